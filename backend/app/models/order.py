"""
Order: read-only from the pipeline's point of view.
Status flow (owned elsewhere): PENDING -> CONFIRMED | FAILED. paid_at is set iff CONFIRMED.
"""
from sqlalchemy import Column, String, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base
from app.models._ids import new_id


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    txn_id = Column(String(128), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(32), nullable=False, default="PENDING")  # PENDING | CONFIRMED | FAILED
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", backref="orders")
    product = relationship("Product")
