from sqlalchemy import Column, Integer, Numeric, ForeignKey, String
from sqlalchemy.orm import relationship
from database import Base

class ProviderOrderItem(Base):
    __tablename__ = "provider_order_items"

    id = Column(Integer, primary_key=True, index=True)
    provider_order_id = Column(Integer, ForeignKey("provider_orders.id"), nullable=False)
    admin_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    item_name = Column(String, nullable=False)
    product_code = Column(String, nullable=True)
    unit = Column(String, nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False) # quantity to restock
    price_per_unit = Column(Numeric(12, 3), nullable=True)
    total_price = Column(Numeric(12, 3), nullable=False)

    # Relationships
    provider_order = relationship("ProviderOrder", back_populates="items")
    admin_item = relationship("InventoryItem")
