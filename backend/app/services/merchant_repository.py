"""
Persistence lookups consumed by the pipeline.

Point lookups of a merchant (by API token or by WhatsApp routing id), list
lookups of products and orders, and the append-only audit insert. Nothing
here commits: the caller owns the session and its transaction.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.customer import Customer
from app.models.merchant import Merchant
from app.models.order import Order
from app.models.product import Product
from app.models.webhook_event import WebhookEvent

logger = logging.getLogger(__name__)


def get_merchant_by_token(db: Session, api_token: str) -> Optional[Merchant]:
    if not api_token:
        return None
    return db.query(Merchant).filter(Merchant.api_token == api_token).first()


def get_merchant_by_phone_number_id(db: Session, phone_number_id: str) -> Optional[Merchant]:
    """
    Resolve the owning Merchant of an inbound WhatsApp message.

    Only the explicit phone_number_id link is honoured: an unknown routing id
    resolves to None and the message is skipped by the caller.
    """
    if not phone_number_id:
        return None
    return (
        db.query(Merchant)
        .filter(Merchant.phone_number_id == str(phone_number_id))
        .order_by(Merchant.created_at)  # Deterministic if multiple matches (shouldn't happen)
        .first()
    )


def list_products(db: Session, merchant_id: str) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.merchant_id == merchant_id)
        .order_by(Product.created_at, Product.id)
        .all()
    )


def list_orders(db: Session, merchant_id: str, customer_phone: Optional[str] = None) -> List[Order]:
    """Orders of a merchant, newest first, optionally only the customer's own."""
    query = (
        db.query(Order)
        .options(joinedload(Order.product))
        .filter(Order.merchant_id == merchant_id)
    )
    if customer_phone:
        query = query.join(Customer, Order.customer_id == Customer.id).filter(Customer.phone == customer_phone)
    return query.order_by(Order.created_at.desc(), Order.id).all()


def webhook_message_seen(db: Session, merchant_id: str, message_id: Optional[str]) -> bool:
    if not message_id:
        return False
    return (
        db.query(WebhookEvent.id)
        .filter(WebhookEvent.merchant_id == merchant_id, WebhookEvent.message_id == message_id)
        .first()
        is not None
    )


def record_webhook_event(
    db: Session,
    merchant_id: str,
    payload: dict,
    message_id: Optional[str] = None,
) -> WebhookEvent:
    """Append one audit record. Flushes; the caller commits."""
    event = WebhookEvent(
        payload=payload,
        merchant_id=merchant_id,
        received_at=datetime.now(timezone.utc),
        message_id=message_id,
    )
    db.add(event)
    db.flush()
    logger.debug(f"Webhook event {event.id} recorded for merchant {merchant_id}: {payload.get('type')}")
    return event
