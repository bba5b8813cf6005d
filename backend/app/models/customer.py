from sqlalchemy import Column, String
from app.db.base import Base
from app.models._ids import new_id


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_id)
    phone = Column(String(64), unique=True, nullable=False, index=True)
