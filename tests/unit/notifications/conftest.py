import pytest

from modules.orders.dtos import PlaceOrderItemDTO
from modules.orders.models import Order


@pytest.fixture()
def pending_order(order_service, buyer_principal, book_a, book_b):
    order_id = order_service.place_order(
        buyer_principal,
        [
            PlaceOrderItemDTO(product_id=book_a.id, quantity=2),
            PlaceOrderItemDTO(product_id=book_b.id, quantity=1),
        ],
    )
    return Order.objects.get(id=order_id)


@pytest.fixture()
def paid_order(order_service, admin_principal, pending_order):
    return order_service.set_order_status(admin_principal, pending_order.id, "paid")
