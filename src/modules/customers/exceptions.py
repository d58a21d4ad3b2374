"""Customer domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class CustomerAlreadyExists(Exception):
    """The principal already has a customer profile, or the email is taken."""


class CustomerNotFound(Exception):
    """The principal has no linked customer record."""
