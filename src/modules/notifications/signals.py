"""Order status observer: queue a confirmation when an order becomes paid."""

from __future__ import annotations

from typing import Optional

from django.dispatch import receiver

from modules.notifications.services import NotificationService
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.signals import order_status_changed


@receiver(order_status_changed, sender=Order)
def _enqueue_on_paid(
    sender, order: Order, old_status: Optional[str], new_status: str, **kwargs
) -> None:
    if new_status == OrderStatus.PAID and old_status != OrderStatus.PAID:
        NotificationService().enqueue_order_confirmation(order)
