"""Unit tests for the derived order total.

``Order.total_cents`` must equal ``sum(quantity * unit_price_cents)`` after
every item mutation, whichever path performed it.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.exceptions import OrderNotFound
from modules.orders.models import Order, OrderItem
from modules.orders.totals import compute_order_total, recalculate_order_total

pytestmark = pytest.mark.unit


@pytest.fixture()
def order(buyer):
    return Order.objects.create(customer=buyer)


def _total(order):
    return Order.objects.values_list("total_cents", flat=True).get(id=order.id)


class TestComputeOrderTotal:
    def test_empty_order_totals_zero(self, order):
        assert compute_order_total(order.id) == 0

    def test_sums_quantity_times_unit_price(self, order, book_a, book_b):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)
        OrderItem.objects.create(order=order, product=book_b, quantity=1, unit_price_cents=300)

        assert compute_order_total(order.id) == 1300

    def test_service_variant_rejects_unknown_order(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.compute_order_total(uuid4())

    def test_service_variant(self, order_service, order, book_a):
        OrderItem.objects.create(order=order, product=book_a, quantity=3, unit_price_cents=500)

        assert order_service.compute_order_total(order.id) == 1500


class TestRecalculationTrigger:
    def test_new_order_starts_at_zero(self, buyer):
        order = Order.objects.create(customer=buyer, total_cents=999)

        assert _total(order) == 0

    def test_item_insert(self, order, book_a):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)

        assert _total(order) == 1000

    def test_item_update(self, order, book_a):
        item = OrderItem.objects.create(
            order=order, product=book_a, quantity=2, unit_price_cents=500
        )
        item.quantity = 4
        item.save()

        assert _total(order) == 2000

    def test_item_delete(self, order, book_a, book_b):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)
        item = OrderItem.objects.create(
            order=order, product=book_b, quantity=1, unit_price_cents=300
        )
        item.delete()

        assert _total(order) == 1000

    def test_queryset_update(self, order, book_a):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)

        OrderItem.objects.filter(order=order).update(unit_price_cents=100)

        assert _total(order) == 200

    def test_queryset_update_moving_items(self, buyer, order, book_a):
        target = Order.objects.create(customer=buyer)
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)

        OrderItem.objects.filter(order=order).update(order=target)

        assert _total(order) == 0
        assert _total(target) == 1000

    def test_queryset_delete(self, order, book_a):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)

        OrderItem.objects.filter(order=order).delete()

        assert _total(order) == 0

    def test_bulk_create(self, order, book_a, book_b):
        OrderItem.objects.bulk_create(
            [
                OrderItem(order=order, product=book_a, quantity=1, unit_price_cents=500),
                OrderItem(order=order, product=book_b, quantity=2, unit_price_cents=300),
            ]
        )

        assert _total(order) == 1100

    def test_order_save_never_writes_total(self, order, book_a):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)

        order.total_cents = 1
        order.save()

        assert _total(order) == 1000

    def test_order_save_with_update_fields_never_writes_total(self, order, book_a):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)

        order.total_cents = 1
        order.save(update_fields=["total_cents"])

        assert _total(order) == 1000

    def test_recalculation_is_idempotent(self, order, book_a):
        OrderItem.objects.create(order=order, product=book_a, quantity=2, unit_price_cents=500)

        recalculate_order_total(order.id)
        recalculate_order_total(order.id)

        assert _total(order) == 1000


class TestOrderItem:
    def test_subtotal(self, order, book_a):
        item = OrderItem(order=order, product=book_a, quantity=3, unit_price_cents=450)

        assert item.subtotal_cents == 1350
