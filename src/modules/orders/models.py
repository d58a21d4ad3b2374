"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Orders are created ``pending`` with ``total_cents = 0``.
- ``total_cents`` is derived: ``sum(quantity * unit_price_cents)`` over the
  order's items.  ``Order.save`` never writes it after creation; only the
  recalculation hook in ``modules.orders.totals`` does.
- Every OrderItem mutation (save, delete, queryset ``update`` and
  ``bulk_create``) recomputes the owning order's total inside the same
  transaction.
- OrderItem snapshots the product price at purchase time
  (``unit_price_cents``); later price changes never touch it.
- Each status change appends an ``OrderStatusHistory`` record (see
  ``signals.py``).
"""

from __future__ import annotations

from typing import Any, Iterable

import structlog
from django.db import models, transaction
from django.utils import timezone

from modules.core.models import BaseModel, TimestampedModel
from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus

logger = structlog.get_logger(__name__)


class Order(TimestampedModel):
    """Order aggregate root."""

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_cents = models.PositiveIntegerField(default=0, editable=False)
    placed_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = "orders"
        ordering = ["-placed_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["customer", "-placed_at"], name="orders_customer_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_cents__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether *new_status* is an edge out of the current status."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self._state.adding:
            self.total_cents = 0
        else:
            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                update_fields = [
                    field.name
                    for field in self._meta.concrete_fields
                    if not field.primary_key
                ]
            kwargs["update_fields"] = [
                name for name in update_fields if name != "total_cents"
            ]
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.id} ({self.status})"


class OrderItemQuerySet(models.QuerySet):
    """Keeps order totals in sync on bulk paths that skip model signals."""

    def update(self, **kwargs: Any) -> int:
        from modules.orders.totals import recalculate_order_totals

        with transaction.atomic(using=self.db):
            order_ids = set(self.values_list("order_id", flat=True))
            rows = super().update(**kwargs)
            moved_to = kwargs.get("order_id", kwargs.get("order"))
            if moved_to is not None:
                order_ids.add(getattr(moved_to, "pk", moved_to))
            recalculate_order_totals(order_ids)
        return rows

    def bulk_create(self, objs: Iterable[OrderItem], *args: Any, **kwargs: Any):
        from modules.orders.totals import recalculate_order_totals

        with transaction.atomic(using=self.db):
            created = super().bulk_create(objs, *args, **kwargs)
            recalculate_order_totals({item.order_id for item in created})
        return created


class OrderItem(BaseModel):
    """Line item linking an Order to a Product at a snapshotted unit price."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField()
    unit_price_cents = models.PositiveIntegerField()

    objects = OrderItemQuerySet.as_manager()

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order"], name="order_items_order_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="order_items_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price_cents__gte=0),
                name="order_items_unit_price_non_negative",
            ),
        ]

    @property
    def subtotal_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} @ {self.unit_price_cents}"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``changed_by`` is the principal subject; an empty string means the change
    was performed by a system caller.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    changed_by = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="osh_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
