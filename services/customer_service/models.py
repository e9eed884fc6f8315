from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from shared.config.database import Base


class Buyer(Base):
    __tablename__ = "buyers"
    __table_args__ = {"schema": "customer_schema"}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Address(Base):
    __tablename__ = "addresses"
    __table_args__ = {"schema": "customer_schema"}

    id = Column(Integer, primary_key=True, index=True)
    buyer_id = Column(Integer, ForeignKey("customer_schema.buyers.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String, nullable=False)
    city = Column(String(120), nullable=True)
    postcode = Column(String(20), nullable=False)
    phone = Column(String(50), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
