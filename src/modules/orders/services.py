"""Order service layer (Use Cases).

Orchestrates order placement and the status lifecycle.  All write
operations are atomic: the service defines the unit-of-work boundary and
any domain exception rolls the whole operation back.

Business rules enforced:
- Only an authenticated principal linked to a customer may place orders.
- Lines are validated and reserved in the order the caller sent them;
  the first failure aborts the placement.
- Stock is reserved with a conditional UPDATE (``stock >= quantity``), so
  concurrent placements can never drive stock below zero.
- The unit price is snapshotted from the product when the line is added.
- Status changes follow the transition graph; customers may only cancel
  their own pending orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence
from uuid import UUID

import structlog
from django.db import transaction

from modules.core.policies import can_view_order, is_order_owner, order_visibility_filter
from modules.orders import totals
from modules.orders.constants import CUSTOMER_TRANSITION, OrderStatus
from modules.orders.exceptions import (
    CustomerNotFound,
    EmptyOrder,
    Forbidden,
    InsufficientStock,
    InvalidQuantity,
    InvalidTransition,
    OrderNotFound,
    ProductUnavailable,
    Unauthenticated,
)
from modules.orders.models import Order

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.core.principals import Principal
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.dtos import PlaceOrderItemDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def place_order(
        self, principal: Principal, items: Sequence[PlaceOrderItemDTO]
    ) -> UUID:
        """Create a pending order for the caller and reserve its stock.

        Steps:
        1. Resolve the caller's customer.
        2. Create the order (``pending``, total 0).
        3. For each line, in the order given:
           - validate the quantity;
           - load the product (must exist and be active);
           - check and conditionally decrement stock;
           - insert the line at the product's current price.
        4. The total follows each insert (see ``modules.orders.totals``).

        Duplicate product ids are reserved independently.

        Raises:
            Unauthenticated: the principal is anonymous.
            CustomerNotFound: no customer is linked to the principal.
            EmptyOrder: no lines were given.
            InvalidQuantity: a quantity is not a positive integer.
            ProductUnavailable: a product is missing or inactive.
            InsufficientStock: a product cannot cover the quantity.
        """
        if not principal.is_authenticated or not principal.subject:
            raise Unauthenticated("Placing an order requires an authenticated customer.")

        customer = self._customer_repo.get_by_principal(principal.subject)
        if not customer:
            raise CustomerNotFound(f"No customer linked to principal {principal}.")

        if not items:
            raise EmptyOrder("An order needs at least one line.")

        log = logger.bind(customer_id=str(customer.id), line_count=len(items))
        order = self._order_repo.create_pending(customer)
        log = log.bind(order_id=str(order.id))

        for position, item in enumerate(items):
            if not _is_positive_int(item.quantity):
                log.warning("order.invalid_quantity", line=position)
                raise InvalidQuantity(
                    f"Line {position}: quantity must be a positive integer, "
                    f"got {item.quantity!r}."
                )

            product = self._product_repo.get_active(item.product_id)
            if not product:
                log.warning("order.product_unavailable", product_id=str(item.product_id))
                raise ProductUnavailable(
                    f"Product {item.product_id} does not exist or is inactive."
                )

            if product.stock < item.quantity:
                log.warning(
                    "order.insufficient_stock",
                    product_id=str(product.id),
                    requested=item.quantity,
                    available=product.stock,
                )
                raise InsufficientStock(
                    f"Product {product.sku}: requested {item.quantity}, "
                    f"available {product.stock}."
                )

            if not self._product_repo.reserve_stock(product.id, item.quantity):
                # Another transaction took the stock between the read and the
                # conditional UPDATE.
                raise InsufficientStock(
                    f"Product {product.sku}: stock changed while reserving "
                    f"{item.quantity}."
                )

            self._order_repo.add_item(order, product, item.quantity)

        log.info("order.placed")
        return order.id

    @transaction.atomic
    def set_order_status(
        self,
        principal: Principal,
        order_id: Any,
        next_status: str,
        notes: str = "",
    ) -> Order:
        """Move an order to *next_status*.

        Acquires a row-level lock (``SELECT FOR UPDATE``) on the order
        before validating the transition.  The status observers (history
        record, notification enqueue) run inside this transaction.

        Raises:
            Unauthenticated: the principal is anonymous.
            OrderNotFound: the order does not exist.
            Forbidden: a non-privileged caller does not own the order or
                asked for anything but pending → canceled.
            InvalidTransition: a privileged caller asked for a move that is
                not an edge of the transition graph.
        """
        if not principal.is_authenticated:
            raise Unauthenticated("Changing an order status requires authentication.")

        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=next_status,
            principal=str(principal),
        )

        if not principal.is_privileged:
            if not is_order_owner(principal, order):
                log.warning("order.status_change_forbidden", reason="not_owner")
                raise Forbidden("You can only change your own orders.")
            if (order.status, next_status) != CUSTOMER_TRANSITION:
                log.warning("order.status_change_forbidden", reason="not_allowed")
                raise Forbidden("Customers may only cancel pending orders.")
        elif next_status not in OrderStatus.values or not order.can_transition_to(
            next_status
        ):
            log.warning("order.invalid_transition", terminal=order.is_terminal)
            raise InvalidTransition(
                f"Cannot transition from {order.status} to {next_status}."
            )

        order.status = next_status
        order._status_change_notes = notes
        order._changed_by = principal.subject or ""
        self._order_repo.save(order)

        log.info("order.status_updated")
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def compute_order_total(self, order_id: Any) -> int:
        """Recompute the order total from its lines.

        Raises:
            OrderNotFound: the order does not exist.
        """
        if not self._order_repo.exists(order_id):
            raise OrderNotFound(f"Order {order_id} not found.")
        return totals.compute_order_total(order_id)

    def get_order(self, principal: Principal, order_id: Any) -> Order:
        """Retrieve an order visible to *principal*.

        Raises:
            OrderNotFound: it does not exist or is hidden from *principal*.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order or not can_view_order(principal, order):
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def visible_orders(self, principal: Principal) -> QuerySet[Order]:
        """Queryset of the orders *principal* may read (for filtering/paging)."""
        return (
            Order.objects.filter(order_visibility_filter(principal))
            .select_related("customer")
            .prefetch_related("items__product")
        )
