from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shared.config.database import Base
from services.customer_service.models import Buyer
from services.inventory_service.models import Product, Supplier  # noqa: F401 - FK targets


class Order(Base):
    __tablename__ = "orders"
    # We use a separate schema to simulate microservice isolation
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, index=True)
    buyer_id = Column(Integer, ForeignKey("customer_schema.buyers.id"), nullable=False, index=True)
    # Free-form on purpose: legacy rows exist, readers always normalize
    status = Column(String, nullable=False, default="pending", index=True)
    payment_status = Column(String, nullable=False, default="pending")
    payment_method = Column(String, nullable=True)
    transaction_id = Column(String, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    deposit_amount = Column(Numeric(12, 2), default=0)
    balance_due = Column(Numeric(12, 2), default=0)
    deposit_paid_at = Column(DateTime(timezone=True), nullable=True)
    full_payment_paid_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    buyer = relationship(Buyer, lazy="joined")


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("order_schema.orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("product_schema.products.id"), nullable=False, index=True)
    # Snapshot taken at checkout; ownership is resolved through the product
    supplier_id = Column(Integer, ForeignKey("product_schema.suppliers.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False) # line total for the whole quantity
