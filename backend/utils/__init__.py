from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

import pytz
from sqlalchemy.orm import class_mapper

import config

# Scale of every Numeric(12, 3) quantity and money column
THREE_PLACES = Decimal("0.001")


def local_now() -> datetime:
    """Timezone-aware 'now' in the configured application timezone."""
    return datetime.now(pytz.timezone(config.APP_TIMEZONE))


def quantize(value) -> Decimal:
    """Round a quantity or amount to the stored scale."""
    return Decimal(value).quantize(THREE_PLACES, rounding=ROUND_HALF_UP)


def sqlalchemy_to_dict(obj):
    """Convert a SQLAlchemy object to a dictionary."""
    if not obj:
        return None
    mapper = class_mapper(obj.__class__)
    result = {}
    for c in mapper.columns:
        value = getattr(obj, c.key)
        # Convert datetime/date objects to ISO format strings
        if hasattr(value, 'isoformat'):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = float(value)
        # Convert enum types to strings
        elif hasattr(value, 'name') and hasattr(value, 'value'):
            value = value.name
        result[c.key] = value
    return result

__all__ = ['THREE_PLACES', 'local_now', 'quantize', 'sqlalchemy_to_dict']
