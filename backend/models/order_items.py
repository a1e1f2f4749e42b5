from sqlalchemy import Column, Integer, Numeric, ForeignKey, String
from sqlalchemy.orm import relationship
from database import Base

class OrderItem(Base):
    """Order line. Name, unit and price are snapshots taken when the line was created."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    admin_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    item_name = Column(String, nullable=False)
    unit = Column(String, nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    price_per_unit = Column(Numeric(12, 3), nullable=True)
    total_price = Column(Numeric(12, 3), nullable=False) # quantity * price_per_unit

    # Relationships
    order = relationship("Order", back_populates="items")
    admin_item = relationship("InventoryItem")
