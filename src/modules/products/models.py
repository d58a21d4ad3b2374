"""Product catalog model.

Invariants enforced at the database level:
- ``sku`` is unique (normalised to upper case on save).
- ``price_cents`` and ``stock`` are never negative (check constraints).
- Products referenced by order items cannot be deleted (``PROTECT`` on the
  ``OrderItem.product`` foreign key).

Stock is shared mutable state: the order engine only ever changes it
through ``ProductDjangoRepository.reserve_stock`` (a conditional UPDATE).
"""

from __future__ import annotations

import structlog
from django.conf import settings
from django.db import models

from modules.core.models import TimestampedModel

logger = structlog.get_logger(__name__)


def _default_currency() -> str:
    return settings.STOREFRONT_CURRENCY


class Product(TimestampedModel):
    """Catalog entry with a price in minor currency units and finite stock."""

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default=_default_currency)
    stock = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["active"], name="products_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_cents__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)
        if is_new:
            logger.info("product.created", product_id=str(self.id), sku=self.sku)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
