from sqlalchemy import Column, Integer, Text, Numeric, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class ProviderOrderStatus(enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"

class ProviderOrder(Base, TimestampMixin):
    """Restock purchase order issued to a provider."""
    __tablename__ = "provider_orders"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id"), nullable=False)
    status = Column(Enum(ProviderOrderStatus), default=ProviderOrderStatus.PENDING, nullable=False)
    total_amount = Column(Numeric(12, 3), default=0, nullable=False)
    notes = Column(Text, nullable=True)
    email_sent = Column(Boolean, default=False, nullable=False)
    email_sent_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    provider = relationship("Provider", back_populates="provider_orders")
    items = relationship("ProviderOrderItem", back_populates="provider_order", cascade="all, delete-orphan", order_by="ProviderOrderItem.id")
