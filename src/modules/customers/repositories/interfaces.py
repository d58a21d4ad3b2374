"""Customer repository interface.

Extends ``IRepository[Customer]`` with the look-ups needed to resolve a
principal to its customer and to keep emails unique.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def get_by_principal(self, principal_id: str) -> Optional[Customer]:
        """Retrieve the customer linked to an authenticated principal."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Retrieve a customer by email address."""
