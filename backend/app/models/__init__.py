from app.models.merchant import Merchant
from app.models.product import Product
from app.models.customer import Customer
from app.models.order import Order
from app.models.webhook_event import WebhookEvent

__all__ = ["Merchant", "Product", "Customer", "Order", "WebhookEvent"]
