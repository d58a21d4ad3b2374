"""Durable notification queue.

A ``NotificationJob`` is written in the **same database transaction** as
the status change that produced it, so a rolled-back transition never
leaves a job behind.  The drain worker (``services.py``) reads ``pending``
jobs oldest first and marks each one ``sent`` or ``error``.

Workflow:
1. The ``order_status_changed`` receiver creates the job (``pending``).
2. The worker claims ``status=pending`` jobs ordered by ``created_at`` and
   flips them to ``sending`` in a short transaction of its own.
3. On success → ``mark_sent()``.
4. On failure → ``mark_error(error)``.  Error jobs are not retried.

A ``sending`` job whose claim is older than ``NOTIFICATION_CLAIM_TIMEOUT``
belongs to a worker that died mid-batch and is claimed again.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel


class NotificationStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    SENDING = "sending", "Enviando"
    SENT = "sent", "Enviado"
    ERROR = "error", "Erro"


class NotificationJob(BaseModel):
    """Order confirmation e-mail waiting to be delivered.

    ``payload`` snapshots what the message needs (``customer_name``,
    ``order_id``, ``total_cents``, ``currency``) at enqueue time.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="notification_jobs",
    )
    to_email = models.EmailField()
    payload = models.JSONField(default=dict)
    status = models.CharField(
        max_length=20,
        choices=NotificationStatus.choices,
        default=NotificationStatus.PENDING,
    )
    claimed_at = models.DateTimeField(null=True, blank=True, default=None)
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01

    class Meta:
        db_table = "notification_jobs"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["status", "created_at"],
                name="notif_status_created_idx",
            ),
        ]

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def mark_sent(self) -> None:
        self.status = NotificationStatus.SENT
        self.processed_at = timezone.now()
        self.error_message = None
        self.save(update_fields=["status", "processed_at", "error_message"])

    def mark_error(self, error: str) -> None:
        self.status = NotificationStatus.ERROR
        self.processed_at = timezone.now()
        self.error_message = error
        self.save(update_fields=["status", "processed_at", "error_message"])

    def __str__(self) -> str:
        return f"{self.to_email} [{self.status}] ({self.order_id})"
