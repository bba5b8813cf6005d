"""
Prompt Router: one prompt strategy per intent.

`route_prompt` is a pure, total function of (intent, message, context,
target_id): no I/O, no clock, no randomness, so the same inputs always give
byte-identical prompts. GENERAL_CHAT is also the default arm, which covers
any value that is not a known Intent.

Target resolution is exact id equality against the relevant list. When the
id does not resolve, the product/order strategies fall back to a
disambiguation prompt that lists everything the customer can choose from.
"""

from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence

from app.schemas.context import MerchantContext, MerchantProfile, OrderRecord, ProductRecord

from .intent_schema import Intent

ASSISTANT_ROLE = "You are a helpful assistant for an e-commerce business."
CLOSING = "Respond in a helpful, conversational tone."
NOT_SPECIFIED = "Not specified"
NO_PRODUCTS = "No products available"
NO_ORDERS = "No orders found"

PAYMENT_METHODS = (
    "UPI (Unified Payments Interface)",
    "Bank Transfer",
    "Cash on Delivery (if available)",
)


# ==============================================================================
# Formatting helpers
# ==============================================================================

def _money(amount: Optional[Decimal]) -> str:
    if amount is None:
        return "₹" + NOT_SPECIFIED
    return f"₹{amount}"


def _date(order: OrderRecord) -> str:
    if order.created_at is None:
        return "Unknown date"
    return order.created_at.strftime("%d %b %Y")


def _or(value: Optional[str], fallback: str = NOT_SPECIFIED) -> str:
    if value is None or not str(value).strip():
        return fallback
    return str(value)


def _product_line(product: ProductRecord) -> str:
    return (
        f"- ID: {product.id}, Name: {product.name}, Price: {_money(product.price)}, "
        f"Description: {_or(product.description, 'No description')}"
    )


def _order_line(order: OrderRecord) -> str:
    return (
        f"- Order ID: {order.id}, Product: {_or(order.product_name, 'Unknown')}, "
        f"Amount: {_money(order.amount)}, Status: {order.status}, Date: {_date(order)}"
    )


def _product_list(products: Sequence[ProductRecord]) -> str:
    if not products:
        return NO_PRODUCTS
    return "\n".join(_product_line(p) for p in products)


def _order_list(orders: Sequence[OrderRecord]) -> str:
    if not orders:
        return NO_ORDERS
    return "\n".join(_order_line(o) for o in orders)


def _find_product(products: Sequence[ProductRecord], target_id: Optional[str]) -> Optional[ProductRecord]:
    if not target_id:
        return None
    return next((p for p in products if p.id == target_id), None)


def _find_order(orders: Sequence[OrderRecord], target_id: Optional[str]) -> Optional[OrderRecord]:
    if not target_id:
        return None
    return next((o for o in orders if o.id == target_id), None)


def _prompt(situation: str, sections: List[str], instructions: List[str], message: str) -> str:
    parts = [f"{ASSISTANT_ROLE} {situation}"]
    parts.extend(sections)
    if instructions:
        parts.append("Instructions:\n" + "\n".join(f"- {line}" for line in instructions))
    parts.append(f'Customer message: "{message}"')
    parts.append(CLOSING)
    return "\n\n".join(parts)


# ==============================================================================
# Products
# ==============================================================================

def view_products_prompt(message: str, products: Sequence[ProductRecord]) -> str:
    if not products:
        return _prompt(
            "The customer wants to see all available products, but the catalog is currently empty.",
            [f"Available Products:\n{NO_PRODUCTS}"],
            [
                "Politely tell the customer that no products are available right now",
                "Invite them to check back later or ask about something else",
                "Keep the tone friendly and professional",
            ],
            message,
        )

    return _prompt(
        "The customer wants to see all available products.",
        [f"Available Products:\n{_product_list(products)}"],
        [
            "Present the products in a friendly, engaging way",
            "Mention prices clearly",
            "Highlight key features if available",
            "Keep the response conversational and helpful",
        ],
        message,
    )


def product_info_prompt(message: str, products: Sequence[ProductRecord], target_id: Optional[str]) -> str:
    product = _find_product(products, target_id)
    if product is None:
        return _prompt(
            "The customer is asking about a specific product, but we couldn't identify which one.",
            [f"Available Products:\n{_product_list(products)}"],
            [
                "Ask them to specify which product they're interested in",
                "List the available products to help them choose",
                "If no products are available, politely say so",
                "Be helpful and guide them to the right product",
            ],
            message,
        )

    return _prompt(
        "The customer is asking about a specific product.",
        [
            "Product Details:\n"
            f"- ID: {product.id}\n"
            f"- Name: {product.name}\n"
            f"- Price: {_money(product.price)}\n"
            f"- Description: {_or(product.description, 'No description available')}"
        ],
        [
            "Provide detailed information about the product",
            "Highlight its features and benefits",
            "Mention the price clearly",
            "Offer to help with ordering if they're interested",
            "Be enthusiastic and helpful",
        ],
        message,
    )


def order_product_prompt(message: str, products: Sequence[ProductRecord], target_id: Optional[str]) -> str:
    product = _find_product(products, target_id)
    if product is None:
        return _prompt(
            "The customer wants to order a product, but we couldn't identify which one.",
            [f"Available Products:\n{_product_list(products)}"],
            [
                "Ask them to specify which product they want to order",
                "List the available products with prices",
                "If no products are available, politely say so",
                "Guide them through the ordering process",
                "Be helpful and clear about next steps",
            ],
            message,
        )

    return _prompt(
        "The customer wants to order a product.",
        [
            "Product to Order:\n"
            f"- ID: {product.id}\n"
            f"- Name: {product.name}\n"
            f"- Price: {_money(product.price)}\n"
            f"- Description: {_or(product.description, 'No description available')}"
        ],
        [
            "Confirm the product they want to order",
            "Explain the ordering process",
            "Mention payment options (UPI, etc.)",
            "Ask for their phone number to create the order",
            "Be clear about next steps",
            "Be enthusiastic and helpful",
        ],
        message,
    )


# ==============================================================================
# Orders
# ==============================================================================

STATUS_GUIDANCE = {
    "PENDING": "The order is PENDING: explain that payment has not been received yet and what the next step is",
    "CONFIRMED": "The order is CONFIRMED: confirm that the payment was received",
    "FAILED": "The order FAILED: apologise and offer assistance to resolve it",
}

CONFIRM_GUIDANCE = {
    "PENDING": "The order is PENDING: explain that confirming means completing the payment, and describe the payment process",
    "CONFIRMED": "The order is already CONFIRMED: tell them no further action is needed",
    "FAILED": "The order FAILED: explain it cannot be confirmed as is and offer to help resolve it",
}


def all_orders_prompt(message: str, orders: Sequence[OrderRecord]) -> str:
    if not orders:
        return _prompt(
            "The customer wants to see all their orders, but no orders were found.",
            [f"Customer Orders:\n{NO_ORDERS}"],
            [
                "Tell the customer politely that no orders were found",
                "Offer to help them browse products or place an order",
                "Keep the tone friendly and professional",
            ],
            message,
        )

    return _prompt(
        "The customer wants to see all their orders.",
        [f"Customer Orders:\n{_order_list(orders)}"],
        [
            "Present the orders in a clear, organized way",
            "Mention order status, amounts, and dates",
            "Be helpful and offer assistance",
            "Keep the tone friendly and professional",
        ],
        message,
    )


def single_order_prompt(message: str, orders: Sequence[OrderRecord], target_id: Optional[str]) -> str:
    order = _find_order(orders, target_id)
    if order is None:
        return _prompt(
            "The customer is asking about a specific order, but we couldn't identify which one.",
            [f"Customer Orders:\n{_order_list(orders)}"],
            [
                "Ask them to specify which order they're asking about",
                "List their available orders to help them choose",
                "If no orders were found, politely say so",
                "Be helpful and guide them to the right order",
            ],
            message,
        )

    guidance = STATUS_GUIDANCE.get(
        order.status, f"The order status is {order.status}: explain it clearly"
    )
    return _prompt(
        "The customer is asking about a specific order.",
        [
            "Order Details:\n"
            f"- Order ID: {order.id}\n"
            f"- Product: {_or(order.product_name, 'Unknown')}\n"
            f"- Amount: {_money(order.amount)}\n"
            f"- Status: {order.status}\n"
            f"- Date: {_date(order)}\n"
            f"- Transaction ID: {_or(order.txn_id, 'Not available')}"
        ],
        [
            "Provide detailed information about the order",
            "Explain the current status clearly",
            guidance,
            "Be helpful and professional",
        ],
        message,
    )


def confirm_order_prompt(message: str, orders: Sequence[OrderRecord], target_id: Optional[str]) -> str:
    order = _find_order(orders, target_id)
    if order is None:
        return _prompt(
            "The customer wants to confirm an order, but we couldn't identify which one.",
            [f"Customer Orders:\n{_order_list(orders)}"],
            [
                "Ask them to specify which order they want to confirm",
                "List their available orders",
                "If no orders were found, politely say so",
                "Guide them through the confirmation process",
                "Be helpful and clear about next steps",
            ],
            message,
        )

    guidance = CONFIRM_GUIDANCE.get(
        order.status, f"The order status is {order.status}: explain what it means for confirmation"
    )
    return _prompt(
        "The customer wants to confirm an order.",
        [
            "Order to Confirm:\n"
            f"- Order ID: {order.id}\n"
            f"- Product: {_or(order.product_name, 'Unknown')}\n"
            f"- Amount: {_money(order.amount)}\n"
            f"- Current Status: {order.status}"
        ],
        [
            "Confirm the order details with them",
            "Explain what confirmation means: the order is confirmed once payment is received",
            guidance,
            "Be clear about next steps",
            "Be helpful and professional",
        ],
        message,
    )


# ==============================================================================
# Business and payment
# ==============================================================================

def business_info_prompt(message: str, merchant: MerchantProfile) -> str:
    return _prompt(
        "The customer is asking about business information.",
        [
            "Business Information:\n"
            f"- Business Name: {_or(merchant.name)}\n"
            f"- Category: {_or(merchant.category)}\n"
            f"- Description: {_or(merchant.description)}\n"
            f"- Address: {_or(merchant.address)}\n"
            f"- Phone: {_or(merchant.phone)}\n"
            f"- UPI ID: {_or(merchant.upi_number)}\n"
            f"- Website: {_or(merchant.website)}"
        ],
        [
            "Provide helpful information about the business",
            "If information is marked Not specified, politely say it is not available",
            "Offer to help with products or orders",
            "Be friendly and professional",
        ],
        message,
    )


def payment_info_prompt(message: str, merchant: MerchantProfile) -> str:
    methods = "\n".join(f"- {m}" for m in PAYMENT_METHODS)
    return _prompt(
        "The customer is asking about payment information.",
        [
            "Payment Information:\n"
            f"- UPI ID: {_or(merchant.upi_number, 'Not available')}\n"
            f"- Business Name: {_or(merchant.name)}\n"
            f"- Phone: {_or(merchant.phone)}",
            f"Payment Methods Available:\n{methods}",
        ],
        [
            "Explain the available payment methods clearly",
            "Provide the UPI ID if available",
            "Explain the payment process step by step",
            "Be clear about security and safety",
            "Offer to help with the ordering process",
        ],
        message,
    )


# ==============================================================================
# General chat (default arm)
# ==============================================================================

def general_chat_prompt(message: str) -> str:
    return _prompt(
        "The customer is engaging in general conversation.",
        [],
        [
            "Be friendly, helpful, and conversational",
            "Keep responses appropriate for a business context",
            "If they ask about products or orders, guide them appropriately",
            "Keep the tone warm and welcoming",
        ],
        message,
    )


# ==============================================================================
# Dispatch
# ==============================================================================

Strategy = Callable[[str, MerchantContext, Optional[str]], str]

STRATEGIES: Dict[Intent, Strategy] = {
    Intent.VIEW_PRODUCTS: lambda m, ctx, t: view_products_prompt(m, ctx.products),
    Intent.PRODUCT_INFO: lambda m, ctx, t: product_info_prompt(m, ctx.products, t),
    Intent.ORDER_PRODUCT: lambda m, ctx, t: order_product_prompt(m, ctx.products, t),
    Intent.ALL_ORDERS_INFO: lambda m, ctx, t: all_orders_prompt(m, ctx.orders),
    Intent.SINGLE_ORDER_INFO: lambda m, ctx, t: single_order_prompt(m, ctx.orders, t),
    Intent.CONFIRM_ORDER: lambda m, ctx, t: confirm_order_prompt(m, ctx.orders, t),
    Intent.BUSINESS_INFO: lambda m, ctx, t: business_info_prompt(m, ctx.merchant),
    Intent.PAYMENT_INFO: lambda m, ctx, t: payment_info_prompt(m, ctx.merchant),
    Intent.GENERAL_CHAT: lambda m, ctx, t: general_chat_prompt(m),
}


def route_prompt(intent, message: str, context: MerchantContext, target_id: Optional[str] = None) -> str:
    """
    Build the response prompt for a classified message.

    Args:
        intent: An Intent, or any value recovered from a malformed
            classification (strings are matched case-insensitively)
        message: Raw customer message
        context: Merchant snapshot for this run
        target_id: Product or order id named by the classifier

    Returns:
        Non-empty prompt string
    """
    strategy = STRATEGIES.get(Intent.parse(intent), STRATEGIES[Intent.GENERAL_CHAT])
    return strategy(message, context, target_id)
