"""Intent Schema - Strict JSON structure for classifier output validation.

The classifier is FORCED to output ONLY this schema.
Any deviation triggers the GENERAL_CHAT fallback.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Intent(str, Enum):
    """Allowed intents - FIXED, cannot be extended by the LLM."""
    VIEW_PRODUCTS = "view_products"
    ORDER_PRODUCT = "order_product"
    PRODUCT_INFO = "product_info"
    BUSINESS_INFO = "business_info"
    GENERAL_CHAT = "general_chat"
    PAYMENT_INFO = "payment_info"
    ALL_ORDERS_INFO = "all_orders_info"
    SINGLE_ORDER_INFO = "single_order_info"
    CONFIRM_ORDER = "confirm_order"

    @classmethod
    def parse(cls, value: Any) -> Optional["Intent"]:
        """Case-insensitive lookup by value or name; None if unrecognized."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for intent in cls:
            if intent.value == key:
                return intent
        return None


class IntentResult(BaseModel):
    """Produced once per inbound message; never persisted."""
    intent: Intent = Intent.GENERAL_CHAT
    target_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def general_chat(cls) -> "IntentResult":
        return cls(intent=Intent.GENERAL_CHAT)


class ClassifierOutput(BaseModel):
    """Validated classifier answer: {"intent": ..., "targetId": ...}.

    Extra keys are ignored; a missing or unrecognized intent is a schema
    violation.
    """
    intent: Intent
    target_id: Optional[str] = Field(default=None, alias="targetId")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("intent", mode="before")
    @classmethod
    def recognized_intent(cls, v: Any) -> Intent:
        intent = Intent.parse(v)
        if intent is None:
            raise ValueError(f"unrecognized intent: {v!r}")
        return intent

    @field_validator("target_id", mode="before")
    @classmethod
    def clean_target_id(cls, v: Any) -> Optional[str]:
        """Keep only ids the classifier actually supplied.

        Validation rules:
        - None, empty or whitespace-only strings become None
        - Numbers are stringified ("42" and 42 refer to the same id)
        - Any other type (lists, objects, booleans) becomes None
        """
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            v = str(v)
        if not isinstance(v, str):
            return None
        v = v.strip()
        return v or None

    def to_result(self) -> IntentResult:
        return IntentResult(intent=self.intent, target_id=self.target_id)
