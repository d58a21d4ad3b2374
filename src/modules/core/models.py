"""Base abstract models shared by every storefront module.

Provides:
- ``BaseModel``: UUIDv7 primary key + ``created_at`` timestamp.
- ``TimestampedModel``: Extends BaseModel with an ``updated_at`` timestamp.

Append-only records (order items, status history, notification jobs) use
``BaseModel``; mutable records (products, customers, orders) use
``TimestampedModel``.
"""

from __future__ import annotations

import uuid6
from django.db import models


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and creation timestamp."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True


class TimestampedModel(BaseModel):
    """Abstract base that also tracks the last modification time."""

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)
