"""Order total recalculation.

``Order.total_cents`` is a denormalised cache of
``sum(quantity * unit_price_cents)`` over the order's items.  These helpers
are called from the OrderItem signal receivers and queryset overrides, so
they always run inside the transaction that mutated the items.
"""

from __future__ import annotations

from typing import Any, Iterable

import structlog
from django.db.models import F, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from modules.orders.models import Order, OrderItem

logger = structlog.get_logger(__name__)


def _line_total():
    return Sum(F("quantity") * F("unit_price_cents"))


def compute_order_total(order_id: Any) -> int:
    """Sum of the order's line subtotals, ``0`` for an order with no items."""
    result = OrderItem.objects.filter(order_id=order_id).aggregate(
        total=Coalesce(_line_total(), Value(0))
    )
    return int(result["total"])


def recalculate_order_total(order_id: Any) -> None:
    """Rewrite ``total_cents`` from the current items with a single UPDATE."""
    subtotal = (
        OrderItem.objects.filter(order_id=OuterRef("pk"))
        .order_by()
        .values("order_id")
        .annotate(total=_line_total())
        .values("total")
    )
    Order.objects.filter(pk=order_id).update(
        total_cents=Coalesce(Subquery(subtotal), Value(0)),
        updated_at=timezone.now(),
    )
    logger.debug("order.total_recalculated", order_id=str(order_id))


def recalculate_order_totals(order_ids: Iterable[Any]) -> None:
    for order_id in {oid for oid in order_ids if oid is not None}:
        recalculate_order_total(order_id)
