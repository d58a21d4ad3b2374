"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``PlaceOrderItemDTO``: one requested line of a new order.
- ``OrderLineDTO``: one exported order line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StrictInt

if TYPE_CHECKING:
    from modules.orders.models import OrderItem


class PlaceOrderItemDTO(BaseModel):
    """Immutable DTO for a single requested line.

    ``quantity`` must be a real ``int`` (bools and numeric strings are
    refused) but its sign is not checked here: the Order Engine rejects
    non-positive values with ``InvalidQuantity`` in line order, alongside
    the stock errors.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: StrictInt


class OrderLineDTO(BaseModel):
    """Immutable DTO for an exported order line (amounts in cents)."""

    model_config = ConfigDict(frozen=True)

    sku: str
    name: str
    quantity: int
    unit_price: int
    subtotal: int

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderLineDTO:
        return cls(
            sku=item.product.sku,  # type: ignore[attr-defined]
            name=item.product.name,  # type: ignore[attr-defined]
            quantity=item.quantity,
            unit_price=item.unit_price_cents,
            subtotal=item.subtotal_cents,
        )
