"""Celery tasks for the notification queue."""

import structlog
from celery import shared_task

from modules.notifications.services import NotificationService

logger = structlog.get_logger(__name__)


@shared_task(name="notifications.drain_pending")
def drain_pending_notifications(batch_size=None):
    """Drain one batch of pending order confirmations."""
    outcomes = NotificationService().drain_pending_notifications(batch_size)
    logger.info("notifications.drain_task_finished", processed=len(outcomes))
    return [outcome.model_dump(mode="json") for outcome in outcomes]
