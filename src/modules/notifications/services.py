"""Notification service layer.

Enqueueing happens inside the order status transaction; draining runs in
the worker (see ``tasks.py``).  Claiming commits before any message is sent
and each job is marked in its own transaction, so one failing job never
aborts or rolls back the rest of the batch.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, List, Optional

import structlog
from django.conf import settings
from django.db import connection, transaction
from django.db.models import Q
from django.template.loader import render_to_string
from django.utils import timezone

from modules.notifications import transport
from modules.notifications.dtos import DeliveryOutcomeDTO
from modules.notifications.exceptions import DeliveryFailure
from modules.notifications.models import NotificationJob, NotificationStatus

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)

SUBJECT_TEMPLATE = "Pedido {order_id} confirmado"


def format_cents(amount_cents: int, currency: str) -> str:
    """``12345, "BRL"`` → ``"BRL 123,45"``."""
    return f"{currency} {amount_cents // 100},{amount_cents % 100:02d}"


class NotificationService:
    """Application service for the order confirmation queue."""

    def enqueue_order_confirmation(self, order: Order) -> NotificationJob:
        """Queue the "order paid" e-mail for *order*'s customer.

        The customer's current name and e-mail are copied into the job, so
        later profile edits do not change an already queued message.
        """
        customer = order.customer
        order.refresh_from_db(fields=["total_cents"])
        job = NotificationJob.objects.create(
            order=order,
            to_email=customer.email,
            payload={
                "customer_name": customer.full_name,
                "order_id": str(order.id),
                "total_cents": order.total_cents,
                "currency": settings.STOREFRONT_CURRENCY,
            },
        )
        logger.info(
            "notification.enqueued", job_id=str(job.id), order_id=str(order.id)
        )
        return job

    def drain_pending_notifications(
        self, batch_size: Optional[int] = None
    ) -> List[DeliveryOutcomeDTO]:
        """Deliver up to *batch_size* pending jobs, oldest first.

        Claiming commits before the first message goes out, and every job's
        ``sent``/``error`` mark commits on its own.  A job that blows up is
        recorded as ``error`` and the batch moves on.
        """
        if batch_size is None:
            batch_size = settings.NOTIFICATION_BATCH_SIZE
        outcomes: List[DeliveryOutcomeDTO] = []

        for job in self._claim_pending(batch_size):
            outcomes.append(self._deliver(job))

        if outcomes:
            logger.info(
                "notification.batch_drained",
                processed=len(outcomes),
                failed=sum(1 for o in outcomes if o.status == NotificationStatus.ERROR),
            )
        return outcomes

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @transaction.atomic
    def _claim_pending(self, batch_size: int) -> List[NotificationJob]:
        """Flip up to *batch_size* claimable jobs to ``sending``.

        Rows are read with ``SELECT … FOR UPDATE SKIP LOCKED`` where the
        database supports it, so concurrent workers never claim the same job.
        """
        now = timezone.now()
        stale = now - timedelta(seconds=settings.NOTIFICATION_CLAIM_TIMEOUT)
        queryset = NotificationJob.objects.filter(
            Q(status=NotificationStatus.PENDING)
            | Q(status=NotificationStatus.SENDING, claimed_at__lt=stale)
        )
        if connection.features.has_select_for_update_skip_locked:
            queryset = queryset.select_for_update(skip_locked=True)
        ids = list(
            queryset.order_by("created_at", "id").values_list("id", flat=True)[
                :batch_size
            ]
        )
        if not ids:
            return []

        NotificationJob.objects.filter(id__in=ids).update(
            status=NotificationStatus.SENDING, claimed_at=now
        )
        return list(NotificationJob.objects.filter(id__in=ids).order_by("created_at", "id"))

    def _deliver(self, job: NotificationJob) -> DeliveryOutcomeDTO:
        log = logger.bind(job_id=str(job.id), order_id=str(job.order_id))

        try:
            context = dict(job.payload)
            context["total_display"] = format_cents(
                context.get("total_cents", 0), context.get("currency", "")
            )
            transport.send(
                job.to_email,
                SUBJECT_TEMPLATE.format(order_id=context.get("order_id", job.order_id)),
                render_to_string("notifications/order_confirmation.txt", context),
                html_body=render_to_string(
                    "notifications/order_confirmation.html", context
                ),
            )
        except DeliveryFailure as exc:
            log.warning("notification.delivery_failed", error=str(exc))
            return self._fail(job, str(exc))
        except Exception as exc:
            log.exception("notification.delivery_crashed")
            return self._fail(job, f"{type(exc).__name__}: {exc}")

        with transaction.atomic():
            job.mark_sent()
        log.info("notification.delivered")
        return DeliveryOutcomeDTO(job_id=job.id, status=NotificationStatus.SENT)

    def _fail(self, job: NotificationJob, error: str) -> DeliveryOutcomeDTO:
        with transaction.atomic():
            job.mark_error(error)
        return DeliveryOutcomeDTO(
            job_id=job.id, status=NotificationStatus.ERROR, error=error
        )
