"""
ContextLoader: merchant profile, catalog and order history as one snapshot.

The snapshot is all-or-nothing: when the merchant is unknown or any query
fails (including a statement timeout), the caller gets None and never a
partial context.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.audit import mask_token
from app.schemas.context import MerchantContext, MerchantProfile, OrderRecord, ProductRecord
from app.services import merchant_repository

logger = logging.getLogger(__name__)


def load_merchant_context(
    db: Session,
    access_token: str,
    customer_phone: Optional[str] = None,
) -> Optional[MerchantContext]:
    """
    Load the bounded context of the merchant owning `access_token`.

    Args:
        db: Session scoped to the current request or message
        access_token: Merchant API token
        customer_phone: When given, only this customer's orders are loaded

    Returns:
        MerchantContext, or None when the token is unknown or the read failed
    """
    try:
        merchant = merchant_repository.get_merchant_by_token(db, access_token)
        if merchant is None:
            logger.info(f"No merchant found for API token {mask_token(access_token)}")
            return None

        products = merchant_repository.list_products(db, merchant.id)
        orders = merchant_repository.list_orders(db, merchant.id, customer_phone=customer_phone)

        context = MerchantContext(
            merchant=MerchantProfile.from_merchant(merchant),
            products=[ProductRecord.model_validate(p) for p in products],
            orders=[OrderRecord.from_order(o) for o in orders],
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error loading merchant context: {e}")
        return None

    logger.debug(
        f"Loaded context for merchant {context.merchant.id}: "
        f"{len(context.products)} products, {len(context.orders)} orders"
    )
    return context
