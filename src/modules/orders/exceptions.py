"""Order domain exceptions.

Raised by the Service Layer when business rules are violated; every one of
them aborts the enclosing transaction.  The API layer (Views) catches these
and translates them into appropriate HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import Forbidden, Unauthenticated
from modules.customers.exceptions import CustomerNotFound

__all__ = [
    "CustomerNotFound",
    "EmptyOrder",
    "Forbidden",
    "InsufficientStock",
    "InvalidQuantity",
    "InvalidTransition",
    "OrderNotFound",
    "ProductUnavailable",
    "Unauthenticated",
]


class InvalidQuantity(Exception):
    """A requested quantity is not a positive integer."""


class EmptyOrder(InvalidQuantity):
    """The order request carries no line items."""


class ProductUnavailable(Exception):
    """A referenced product does not exist or is inactive."""


class InsufficientStock(Exception):
    """The conditional stock reservation failed."""


class OrderNotFound(Exception):
    """The order does not exist (or is not visible to the caller)."""


class InvalidTransition(Exception):
    """The requested status change is not an edge of the transition graph."""
