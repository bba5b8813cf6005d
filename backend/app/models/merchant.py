"""
Merchant: one storefront. Identified by its API token on the synchronous API
and by its WhatsApp phone_number_id (routing id) on the webhook path.
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from app.db.base import Base
from app.models._ids import new_id


class Merchant(Base):
    __tablename__ = "merchants"

    id = Column(String(36), primary_key=True, default=new_id)
    api_token = Column(String(255), unique=True, nullable=False, index=True)
    phone_number_id = Column(String(64), nullable=True, index=True)  # WhatsApp routing id
    whatsapp_access_token = Column(String(512), nullable=True)
    upi_number = Column(String(128), nullable=True)
    website = Column(String(255), nullable=True)
    # {name, category, description, address, phoneNumber}
    business_info = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
