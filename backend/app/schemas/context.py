"""Typed records at the ContextLoader boundary. ORM rows never travel past it."""
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _text(value: Any) -> Optional[str]:
    # business_info is free-form JSON; only scalar values are shown
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    return str(value)


class MerchantProfile(BaseModel):
    id: str
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    upi_number: Optional[str] = None
    website: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_merchant(cls, merchant) -> "MerchantProfile":
        info = merchant.business_info if isinstance(merchant.business_info, dict) else {}
        return cls(
            id=merchant.id,
            name=_text(info.get("name")),
            category=_text(info.get("category")),
            description=_text(info.get("description")),
            address=_text(info.get("address")),
            phone=_text(info.get("phoneNumber")),
            upi_number=merchant.upi_number,
            website=merchant.website,
        )


class ProductRecord(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class OrderRecord(BaseModel):
    id: str
    customer_id: Optional[str] = None
    merchant_id: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    txn_id: Optional[str] = None
    amount: Decimal
    status: str = "PENDING"
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_order(cls, order) -> "OrderRecord":
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            merchant_id=order.merchant_id,
            product_id=order.product_id,
            product_name=order.product.name if order.product else None,
            txn_id=order.txn_id,
            amount=order.amount,
            status=order.status,
            paid_at=order.paid_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class MerchantContext(BaseModel):
    """Read-only snapshot for one pipeline run. Never cached."""
    merchant: MerchantProfile
    products: List[ProductRecord] = Field(default_factory=list)
    orders: List[OrderRecord] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
