from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

DEFAULT_LOW_STOCK_ALERT = 20

class InventoryItem(Base, TimestampMixin):
    """An item of the single admin inventory. Quantity changes go through the inventory ledger."""
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    product_code = Column(String, nullable=True)
    image_url = Column(String(500), nullable=True)
    unit = Column(String, nullable=False, default="piece") # e.g., "kg", "box", "liters", "piece"
    # May drop below zero when an order overrides insufficient stock
    quantity = Column(Numeric(12, 3), default=0, nullable=False)
    price_per_unit = Column(Numeric(12, 3), nullable=True)
    low_stock_alert = Column(Numeric(12, 3), default=DEFAULT_LOW_STOCK_ALERT, nullable=True)
    maximum_capacity = Column(Numeric(12, 3), nullable=True)
    production_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    provider_id = Column(Integer, ForeignKey("providers.id"), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    # Relationships
    provider = relationship("Provider", back_populates="items")
    category = relationship("Category", back_populates="items")
    audits = relationship("InventoryItemAudit", back_populates="inventory_item", cascade="all, delete-orphan")
    customer_grants = relationship("CustomerInventoryItem", back_populates="admin_item", cascade="all, delete-orphan")
