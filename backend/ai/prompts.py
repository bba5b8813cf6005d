"""
Classifier prompt: intent extraction ONLY.

The prompt constrains the LLM to a single job: name one of the nine intents
and, when the customer clearly mentions one, the product or order id. The
answer must be a bare JSON object so it can be validated against
`ClassifierOutput`; anything else degrades to GENERAL_CHAT.
"""

from .intent_schema import Intent

SYSTEM_PROMPT = "You are a helpful AI assistant."

INTENT_DESCRIPTIONS = {
    Intent.VIEW_PRODUCTS: "User wants to see the products",
    Intent.ORDER_PRODUCT: "User wants to order a product (include product ID if mentioned)",
    Intent.PRODUCT_INFO: "User wants info on a specific product (include product ID if mentioned)",
    Intent.BUSINESS_INFO: "User wants info related to the business (e.g. opening hours, company story)",
    Intent.GENERAL_CHAT: "User just wants to chat (small talk, greetings, jokes)",
    Intent.PAYMENT_INFO: "User wants payment link, payment method, or info",
    Intent.ALL_ORDERS_INFO: "User wants info on all of their past/current orders",
    Intent.SINGLE_ORDER_INFO: "User wants info about a specific order (include order ID if mentioned)",
    Intent.CONFIRM_ORDER: "User wants to confirm an order (include order ID if mentioned)",
}


def build_classifier_prompt(message: str) -> str:
    """Build the complete intent-classification prompt for one message.

    Args:
        message: Raw customer message

    Returns:
        Prompt listing every intent and the strict JSON answer format
    """
    intent_lines = "\n".join(
        f"- {intent.value}: {INTENT_DESCRIPTIONS[intent]}" for intent in Intent
    )

    return f"""You are an intent classifier. Your job is to analyze the user's message and classify what they want.

Possible intents:
{intent_lines}

Instructions:
- Respond ONLY with a JSON object and nothing else.
- Use this format:
{{
  "intent": "{Intent.VIEW_PRODUCTS.value}",
  "targetId": "ID if relevant"
}}
- targetId can be omitted if there's no specific product or order.
- Never add extra text, explanation, or preamble.
- Never guess IDs. Only include targetId if user clearly mentions it.

User message:
"{message}"
""".strip()
