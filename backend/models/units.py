from sqlalchemy import Column, Integer, String
from database import Base
from models.audit_mixin import TimestampMixin

class Unit(Base, TimestampMixin):
    """A unit of measure offered when entering items and order lines (kg, box, bunch...)."""
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
