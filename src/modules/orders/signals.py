"""Signals for order bookkeeping.

- OrderItem saves and deletes recompute the owning order's total.
- Order saves record status history and broadcast ``order_status_changed``
  with the persisted (old) and new status, inside the saving transaction.

Callers may attach ``_status_change_notes`` and ``_changed_by`` to an Order
instance before saving; both are consumed by the history record.
"""

from __future__ import annotations

from typing import Optional, Protocol, cast

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import Signal, receiver

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.totals import recalculate_order_total

# Sent with ``order``, ``old_status`` (None on creation) and ``new_status``.
order_status_changed = Signal()


class _OrderStatusAware(Protocol):
    _previous_status: str | None
    _status_change_notes: str | None
    _changed_by: str | None


@receiver(post_save, sender=OrderItem)
@receiver(post_delete, sender=OrderItem)
def _recalculate_total(sender, instance: OrderItem, **kwargs) -> None:
    recalculate_order_total(instance.order_id)


@receiver(pre_save, sender=Order)
def _capture_previous_status(sender, instance: Order, **kwargs) -> None:
    status_instance = cast(_OrderStatusAware, instance)
    if instance._state.adding:
        status_instance._previous_status = None
        return
    status_instance._previous_status = (
        sender.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
    )


@receiver(post_save, sender=Order)
def _record_status_change(sender, instance: Order, created: bool, **kwargs) -> None:
    status_instance = cast(_OrderStatusAware, instance)
    previous_status: Optional[str] = getattr(status_instance, "_previous_status", None)

    if not created and previous_status == instance.status:
        _clear_transient_status_attrs(instance)
        return

    notes = getattr(status_instance, "_status_change_notes", None)
    if notes is None:
        notes = "Order placed" if created else ""

    OrderStatusHistory.objects.create(
        order=instance,
        old_status=previous_status,
        new_status=instance.status,
        changed_by=getattr(status_instance, "_changed_by", None) or "",
        notes=notes,
    )
    _clear_transient_status_attrs(instance)

    order_status_changed.send(
        sender=Order,
        order=instance,
        old_status=previous_status,
        new_status=instance.status,
    )


def _clear_transient_status_attrs(instance: Order) -> None:
    for attr in ("_previous_status", "_status_change_notes", "_changed_by"):
        if hasattr(instance, attr):
            delattr(instance, attr)
