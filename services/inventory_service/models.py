from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from shared.config.database import Base


class Supplier(Base):
    __tablename__ = "suppliers"
    __table_args__ = {"schema": "product_schema"}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {"schema": "product_schema"}

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("product_schema.suppliers.id"), nullable=True, index=True)
    name = Column(String, nullable=False)
    images = Column(JSON, default=list)
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=True, default=0) # NULL means stock is not tracked
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
