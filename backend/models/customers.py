from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)

    # Relationships
    inventory = relationship("CustomerInventory", back_populates="customer", uselist=False, cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="customer")


class CustomerInventory(Base, TimestampMixin):
    """The subset of admin items a customer has been granted."""
    __tablename__ = "customer_inventories"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), unique=True, nullable=False)

    customer = relationship("Customer", back_populates="inventory")
    items = relationship("CustomerInventoryItem", back_populates="customer_inventory", cascade="all, delete-orphan")


class CustomerInventoryItem(Base):
    __tablename__ = "customer_inventory_items"
    __table_args__ = (UniqueConstraint('customer_inventory_id', 'admin_item_id', name='_customer_inventory_item_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    customer_inventory_id = Column(Integer, ForeignKey("customer_inventories.id"), nullable=False)
    admin_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)

    customer_inventory = relationship("CustomerInventory", back_populates="items")
    admin_item = relationship("InventoryItem", back_populates="customer_grants")
