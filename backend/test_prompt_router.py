"""
Prompt router tests: totality, target resolution, and per-intent content.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from ai.intent_schema import Intent
from ai.prompt_router import route_prompt
from app.schemas.context import MerchantContext, MerchantProfile, OrderRecord, ProductRecord

MESSAGE = "hi there"

EMPTY_CONTEXT = MerchantContext(merchant=MerchantProfile(id="m1"))

FULL_CONTEXT = MerchantContext(
    merchant=MerchantProfile(
        id="m1",
        name="Acme Store",
        category="Retail",
        description="Everyday goods",
        address="12 MG Road, Pune",
        phone="+91 20 5555 0000",
        upi_number="shop@upi",
        website="https://shop.example",
    ),
    products=[
        ProductRecord(id="p1", name="Widget", price=Decimal("100"), description="A useful widget"),
        ProductRecord(id="p2", name="Gadget", price=Decimal("250.50")),
    ],
    orders=[
        OrderRecord(id="o2", product_name="Gadget", amount=Decimal("250.50"), status="PENDING",
                    created_at=datetime(2024, 3, 1)),
        OrderRecord(id="o1", product_name="Widget", amount=Decimal("100"), status="CONFIRMED",
                    txn_id="TXN-1", created_at=datetime(2024, 2, 1)),
        OrderRecord(id="o3", product_name="Widget", amount=Decimal("100"), status="FAILED",
                    created_at=datetime(2024, 1, 15)),
    ],
)


@pytest.mark.parametrize("intent", list(Intent))
@pytest.mark.parametrize("context", [EMPTY_CONTEXT, FULL_CONTEXT], ids=["empty", "full"])
@pytest.mark.parametrize("target_id", [None, "p1", "o1", "does-not-exist"])
def test_every_intent_yields_a_non_empty_prompt(intent, context, target_id):
    prompt = route_prompt(intent, MESSAGE, context, target_id)
    assert isinstance(prompt, str)
    assert prompt.strip()
    assert MESSAGE in prompt


@pytest.mark.parametrize("intent", list(Intent))
def test_router_is_pure(intent):
    first = route_prompt(intent, MESSAGE, FULL_CONTEXT, "p1")
    second = route_prompt(intent, MESSAGE, FULL_CONTEXT, "p1")
    assert first == second


@pytest.mark.parametrize("value", ["totally_unknown", "", None, 17])
def test_unrecognized_intent_uses_general_chat(value):
    expected = route_prompt(Intent.GENERAL_CHAT, MESSAGE, FULL_CONTEXT)
    assert route_prompt(value, MESSAGE, FULL_CONTEXT) == expected


def test_intent_strings_are_routed_like_members():
    assert route_prompt("view_products", MESSAGE, FULL_CONTEXT) == route_prompt(
        Intent.VIEW_PRODUCTS, MESSAGE, FULL_CONTEXT
    )


def test_product_info_resolved_target():
    context = MerchantContext(
        merchant=MerchantProfile(id="m1"),
        products=[ProductRecord(id="p1", name="Widget", price=100)],
    )
    prompt = route_prompt(Intent.PRODUCT_INFO, "tell me about it", context, "p1")
    assert "p1" in prompt
    assert "Widget" in prompt
    assert "100" in prompt
    assert "Product Details" in prompt


def test_product_info_unresolved_target_lists_all_products():
    prompt = route_prompt(Intent.PRODUCT_INFO, MESSAGE, FULL_CONTEXT, "P1")
    assert "couldn't identify which one" in prompt
    assert "Widget" in prompt and "Gadget" in prompt


def test_view_products_enumerates_catalog():
    prompt = route_prompt(Intent.VIEW_PRODUCTS, MESSAGE, FULL_CONTEXT)
    assert "- ID: p1, Name: Widget, Price: ₹100, Description: A useful widget" in prompt
    assert "- ID: p2, Name: Gadget, Price: ₹250.50, Description: No description" in prompt


def test_view_products_empty_catalog_is_explicit():
    prompt = route_prompt(Intent.VIEW_PRODUCTS, MESSAGE, EMPTY_CONTEXT)
    assert "No products available" in prompt
    assert "catalog is currently empty" in prompt


def test_order_product_resolved_asks_for_phone_number():
    prompt = route_prompt(Intent.ORDER_PRODUCT, "I want a gadget", FULL_CONTEXT, "p2")
    assert "Gadget" in prompt
    assert "₹250.50" in prompt
    assert "phone number" in prompt


def test_order_product_unresolved_is_disambiguation():
    prompt = route_prompt(Intent.ORDER_PRODUCT, MESSAGE, FULL_CONTEXT, None)
    assert "which product they want to order" in prompt
    assert "phone number" not in prompt


def test_all_orders_empty_list_states_no_orders():
    prompt = route_prompt(Intent.ALL_ORDERS_INFO, MESSAGE, EMPTY_CONTEXT)
    assert "No orders found" in prompt


def test_all_orders_enumerates_product_amount_status_date():
    prompt = route_prompt(Intent.ALL_ORDERS_INFO, MESSAGE, FULL_CONTEXT)
    assert "- Order ID: o1, Product: Widget, Amount: ₹100, Status: CONFIRMED, Date: 01 Feb 2024" in prompt
    assert prompt.index("o2") < prompt.index("o1") < prompt.index("o3")


@pytest.mark.parametrize("order_id, expected", [
    ("o2", "PENDING: explain that payment has not been received yet"),
    ("o1", "CONFIRMED: confirm that the payment was received"),
    ("o3", "FAILED: apologise and offer assistance"),
])
def test_single_order_status_guidance(order_id, expected):
    prompt = route_prompt(Intent.SINGLE_ORDER_INFO, MESSAGE, FULL_CONTEXT, order_id)
    assert expected in prompt
    assert f"Order ID: {order_id}" in prompt


def test_single_order_includes_transaction_id():
    assert "Transaction ID: TXN-1" in route_prompt(Intent.SINGLE_ORDER_INFO, MESSAGE, FULL_CONTEXT, "o1")
    assert "Transaction ID: Not available" in route_prompt(Intent.SINGLE_ORDER_INFO, MESSAGE, FULL_CONTEXT, "o2")


@pytest.mark.parametrize("order_id, expected", [
    ("o2", "confirming means completing the payment"),
    ("o1", "already CONFIRMED"),
    ("o3", "cannot be confirmed as is"),
])
def test_confirm_order_status_branches(order_id, expected):
    prompt = route_prompt(Intent.CONFIRM_ORDER, MESSAGE, FULL_CONTEXT, order_id)
    assert expected in prompt
    assert "Explain what confirmation means" in prompt


def test_confirm_order_unresolved_with_no_orders():
    prompt = route_prompt(Intent.CONFIRM_ORDER, MESSAGE, EMPTY_CONTEXT, "o1")
    assert "which order they want to confirm" in prompt
    assert "No orders found" in prompt


def test_order_target_does_not_resolve_against_products():
    prompt = route_prompt(Intent.SINGLE_ORDER_INFO, MESSAGE, FULL_CONTEXT, "p1")
    assert "couldn't identify which one" in prompt


def test_business_info_surfaces_profile():
    prompt = route_prompt(Intent.BUSINESS_INFO, MESSAGE, FULL_CONTEXT)
    for value in ("Acme Store", "Retail", "Everyday goods", "12 MG Road, Pune",
                  "+91 20 5555 0000", "shop@upi", "https://shop.example"):
        assert value in prompt


def test_business_info_missing_fields_are_not_specified():
    prompt = route_prompt(Intent.BUSINESS_INFO, MESSAGE, EMPTY_CONTEXT)
    assert prompt.count("Not specified") >= 7


def test_payment_info_lists_upi_and_methods():
    prompt = route_prompt(Intent.PAYMENT_INFO, MESSAGE, FULL_CONTEXT)
    assert "UPI ID: shop@upi" in prompt
    assert "Bank Transfer" in prompt
    assert "Cash on Delivery" in prompt


def test_payment_info_without_upi():
    prompt = route_prompt(Intent.PAYMENT_INFO, MESSAGE, EMPTY_CONTEXT)
    assert "UPI ID: Not available" in prompt


def test_general_chat_ignores_context():
    assert route_prompt(Intent.GENERAL_CHAT, MESSAGE, FULL_CONTEXT) == route_prompt(
        Intent.GENERAL_CHAT, MESSAGE, EMPTY_CONTEXT
    )
