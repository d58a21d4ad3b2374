"""Product repository interface.

Extends ``IRepository[Product]`` with the catalog look-ups and the atomic
stock reservation used by the order engine.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product catalog."""

    @abstractmethod
    def get_active(self, id: Any) -> Optional[Product]:
        """Retrieve a product only if it exists and is active."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU."""

    @abstractmethod
    def reserve_stock(self, id: Any, quantity: int) -> bool:
        """Decrement stock by *quantity* only if enough stock remains.

        Returns ``False`` when the conditional write matched no row, i.e.
        a concurrent reservation already consumed the stock.  Must be called
        inside the caller's transaction.
        """
