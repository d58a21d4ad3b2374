"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Look-ups
return ``None`` for unknown or malformed ids; the Service Layer decides
how to translate that into a domain error.

Concurrency control on status updates uses ``select_for_update()``
(no ``version`` field exists on the model).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.customers.models import Customer
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository
from modules.products.models import Product

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create_pending(self, customer: Customer) -> Order:
        order = Order(customer=customer)
        order.save()
        logger.info(
            "order.created", order_id=str(order.id), customer_id=str(customer.id)
        )
        return order

    def add_item(self, order: Order, product: Product, quantity: int) -> OrderItem:
        """Insert an OrderItem priced at ``product.price_cents``.

        The ``post_save`` receiver recomputes the order total in the same
        transaction.
        """
        item = OrderItem(
            order=order,
            product=product,
            quantity=quantity,
            unit_price_cents=product.price_cents,
        )
        item.save()
        return item

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Uses ``select_related`` for the customer FK (single JOIN) and
        ``prefetch_related`` for items, items→product, and status
        history (separate batched queries).  Prevents N+1.
        """
        try:
            return (
                Order.objects.select_related("customer")
                .prefetch_related("items__product", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Only the order row is locked (``of=("self",)``); the customer is
        joined so ownership checks need no extra query.
        """
        try:
            return (
                Order.objects.select_for_update(of=("self",))
                .select_related("customer")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def exists(self, id: Any) -> bool:
        try:
            return Order.objects.filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters and eager-loaded relations.

        Examples of valid filters::

            {"status": "paid"}
            {"customer__principal_id": "auth0|abc"}
        """
        queryset = Order.objects.select_related("customer").prefetch_related(
            "items__product", "status_history"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_items(self, order_id: Any) -> List[OrderItem]:
        return list(
            OrderItem.objects.select_related("product")
            .filter(order_id=order_id)
            .order_by("created_at", "id")
        )

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order.  ``total_cents`` is never written from here."""
        if entity._state.adding:
            entity.save()
        else:
            entity.save(update_fields=["status"])
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity
