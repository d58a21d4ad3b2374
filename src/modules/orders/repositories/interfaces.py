"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the order engine needs:
creating an empty pending order, appending priced items, and locking an
order row before a status change.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer
    from modules.orders.models import Order, OrderItem
    from modules.products.models import Product


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.
    """

    @abstractmethod
    def create_pending(self, customer: Customer) -> Order:
        """Insert a new ``pending`` order with a zero total."""

    @abstractmethod
    def add_item(self, order: Order, product: Product, quantity: int) -> OrderItem:
        """Append a line item, snapshotting the product's current price."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order holding a row-level lock, or ``None``."""

    @abstractmethod
    def exists(self, id: Any) -> bool:
        """Whether an order with this id exists."""

    @abstractmethod
    def list_items(self, order_id: Any) -> List[OrderItem]:
        """The order's items in creation order, with products loaded."""
