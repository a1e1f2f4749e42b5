from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class Provider(Base, TimestampMixin):
    """External supplier that restocks admin inventory items."""
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=True)
    iban = Column(String, nullable=True)

    # Relationships
    items = relationship("InventoryItem", back_populates="provider")
    provider_orders = relationship("ProviderOrder", back_populates="provider")
