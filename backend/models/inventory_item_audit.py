from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from utils import local_now

class InventoryItemAudit(Base):
    __tablename__ = "inventory_item_audit"

    id = Column(Integer, primary_key=True, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    change_type = Column(String, nullable=False)  # "sale", "return", "restock", "adjustment"
    change_amount = Column(Numeric(12, 3), nullable=False) # Positive or negative
    old_quantity = Column(Numeric(12, 3), nullable=False)
    new_quantity = Column(Numeric(12, 3), nullable=False)
    changed_by = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=local_now)
    note = Column(String, nullable=True)

    inventory_item = relationship("InventoryItem", back_populates="audits")
