"""Customer model.

Business rules implemented:
- One Customer per principal (``principal_id`` is unique): the opaque
  identity handed over by authentication (Django user PK or Auth0 ``sub``).
- Email must be unique in the system.
- Only contact fields (``full_name``, ``email``, ``phone``) change after
  creation; ``principal_id`` is immutable.
"""

from __future__ import annotations

import structlog
from django.db import models

from modules.core.models import TimestampedModel

logger = structlog.get_logger(__name__)

CONTACT_FIELDS = ("full_name", "email", "phone")


class Customer(TimestampedModel):
    """Customer linked one-to-one to an authenticated principal."""

    principal_id = models.CharField(max_length=255, unique=True, editable=False)
    full_name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.full_name
