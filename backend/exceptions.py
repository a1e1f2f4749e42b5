"""Domain exceptions.

Raised by the services when a business rule is violated. The API layer
translates them into HTTP responses in ``main.py``; the services
themselves never import FastAPI.
"""

from typing import Optional


class WholesaleError(Exception):
    """Base class for every error the order/inventory core raises."""

    code = "error"
    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, "field": self.field}


class MissingFieldsError(WholesaleError):
    """A required input (customerId, items, adminItemId, quantity, unit) is absent."""

    code = "missing_fields"

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} is required.", field=field)


class NotFoundError(WholesaleError):
    """A customer, inventory item, order or provider order id does not resolve."""

    code = "not_found"
    http_status = 404


class InvalidTransitionError(WholesaleError):
    code = "invalid_transition"


class NoOpError(WholesaleError):
    code = "no_op"


class InvalidStateError(WholesaleError):
    """The action is not allowed given the record's current status."""

    code = "invalid_state"


class PersistenceError(WholesaleError):
    code = "persistence_failure"
    http_status = 500
