from sqlalchemy import Column, DateTime, String
from utils import local_now


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Records are hard-deleted in this system (orders own their items and are
    removed with them), so there are no soft-delete columns here.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=local_now)
    updated_at = Column(DateTime(timezone=True), onupdate=local_now)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
