"""
WebhookEvent: append-only audit of inbound and outbound channel events.
Never updated or deleted by the pipeline.
"""
from sqlalchemy import Column, String, ForeignKey, DateTime
from sqlalchemy.types import JSON
from app.db.base import Base
from app.models._ids import new_id


class WebhookEvent(Base):
    __tablename__ = "webhook_events"

    id = Column(String(36), primary_key=True, default=new_id)
    payload = Column(JSON, nullable=False)
    merchant_id = Column(String(36), ForeignKey("merchants.id", ondelete="CASCADE"), nullable=False, index=True)
    received_at = Column(DateTime(timezone=True), nullable=False)
    # Channel message id (wamid) of inbound messages; used for dedup
    message_id = Column(String(255), nullable=True, index=True)

    def __repr__(self):
        return f"<WebhookEvent id={self.id} merchant_id={self.merchant_id}>"
