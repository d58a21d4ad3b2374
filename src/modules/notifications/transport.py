"""E-mail transport over Django's mail API.

The backend is whatever ``EMAIL_BACKEND`` selects (SMTP in production,
``locmem`` in tests).
"""

from __future__ import annotations

import smtplib
from typing import Optional

import structlog
from django.conf import settings
from django.core.mail import send_mail

from modules.notifications.exceptions import DeliveryFailure

logger = structlog.get_logger(__name__)


def send(
    address: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
) -> None:
    """Deliver one message to *address*.

    Raises:
        DeliveryFailure: the backend raised, rejected the address or headers
            (``BadHeaderError`` is a ``ValueError``), or reported nothing sent.
    """
    try:
        sent = send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [address],
            html_message=html_body,
        )
    except (smtplib.SMTPException, OSError, ValueError) as exc:
        logger.warning("notification.transport_error", error=str(exc))
        raise DeliveryFailure(str(exc)) from exc
    if not sent:
        raise DeliveryFailure(f"Mail backend accepted no message for {address}.")
    logger.info("notification.transport_sent")
