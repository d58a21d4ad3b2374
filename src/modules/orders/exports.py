"""Order line export.

``OrderExportReader`` is a read projection over an order's lines for
external consumers (spreadsheets, accounting).  A missing order and an
order hidden from the caller produce the same ``OrderNotFound`` so the
export cannot be used to probe for order ids.
"""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING, Any, Iterable, List

import structlog

from modules.core.policies import can_view_order
from modules.orders.dtos import OrderLineDTO
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from modules.core.principals import Principal
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

CSV_HEADER = ("sku", "name", "quantity", "unit_price", "subtotal")


class OrderExportReader:
    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    def list_order_lines(self, order_id: Any, principal: Principal) -> List[OrderLineDTO]:
        """Lines of *order_id* in creation order, amounts in cents.

        Raises:
            OrderNotFound: the order does not exist or *principal* may not
                read it.
        """
        log = logger.bind(order_id=str(order_id), principal=str(principal))
        order = self._order_repo.get_by_id(order_id)
        if not order:
            log.info("order.export_missing")
            raise OrderNotFound(f"Order {order_id} not found.")
        if not can_view_order(principal, order):
            log.warning("order.export_denied")
            raise OrderNotFound(f"Order {order_id} not found.")

        lines = [
            OrderLineDTO.from_entity(item)
            for item in self._order_repo.list_items(order.id)
        ]
        log.info("order.exported", line_count=len(lines))
        return lines


def render_order_csv(lines: Iterable[OrderLineDTO]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for line in lines:
        writer.writerow(
            [line.sku, line.name, line.quantity, line.unit_price, line.subtotal]
        )
    return buffer.getvalue()
