"""Unit tests for OrderService.set_order_status (the transition guard).

Graph: pending→paid, paid→shipped, shipped→delivered, pending→canceled.
Privileged callers may walk any edge; customers may only cancel their own
pending orders.
"""

from __future__ import annotations

import itertools
from uuid import uuid4

import pytest

from modules.core.principals import Principal
from modules.orders.constants import VALID_TRANSITIONS, OrderStatus
from modules.orders.dtos import PlaceOrderItemDTO
from modules.orders.exceptions import (
    Forbidden,
    InvalidTransition,
    OrderNotFound,
    Unauthenticated,
)
from modules.orders.models import Order, OrderStatusHistory

pytestmark = pytest.mark.unit

ALL_PAIRS = list(itertools.product(OrderStatus.values, repeat=2))


@pytest.fixture()
def order(order_service, buyer_principal, book_a):
    order_id = order_service.place_order(
        buyer_principal, [PlaceOrderItemDTO(product_id=book_a.id, quantity=1)]
    )
    return Order.objects.get(id=order_id)


def _force_status(order, status):
    # Queryset update: no history, no observers.
    Order.objects.filter(id=order.id).update(status=status)


class TestPrivilegedTransitions:
    @pytest.mark.parametrize("current,target", ALL_PAIRS)
    def test_only_graph_edges_are_allowed(
        self, order_service, admin_principal, order, current, target
    ):
        _force_status(order, current)

        if target in VALID_TRANSITIONS[current]:
            updated = order_service.set_order_status(admin_principal, order.id, target)
            assert updated.status == target
            assert Order.objects.get(id=order.id).status == target
        else:
            with pytest.raises(InvalidTransition):
                order_service.set_order_status(admin_principal, order.id, target)
            assert Order.objects.get(id=order.id).status == current

    def test_unknown_status_value(self, order_service, admin_principal, order):
        with pytest.raises(InvalidTransition):
            order_service.set_order_status(admin_principal, order.id, "refunded")

    def test_full_lifecycle(self, order_service, admin_principal, order):
        for target in (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            order_service.set_order_status(admin_principal, order.id, target)

        assert Order.objects.get(id=order.id).status == OrderStatus.DELIVERED

    def test_system_principal_is_privileged(self, order_service, order):
        order_service.set_order_status(Principal.system(), order.id, OrderStatus.PAID)

        assert Order.objects.get(id=order.id).status == OrderStatus.PAID

    def test_unknown_order(self, order_service, admin_principal):
        with pytest.raises(OrderNotFound):
            order_service.set_order_status(admin_principal, uuid4(), OrderStatus.PAID)

    def test_malformed_order_id(self, order_service, admin_principal):
        with pytest.raises(OrderNotFound):
            order_service.set_order_status(admin_principal, "not-a-uuid", OrderStatus.PAID)


class TestCustomerTransitions:
    def test_owner_cancels_pending_order(self, order_service, buyer_principal, order):
        updated = order_service.set_order_status(
            buyer_principal, order.id, OrderStatus.CANCELED
        )

        assert updated.status == OrderStatus.CANCELED

    def test_owner_cannot_cancel_paid_order(
        self, order_service, buyer_principal, order
    ):
        _force_status(order, OrderStatus.PAID)

        with pytest.raises(Forbidden):
            order_service.set_order_status(
                buyer_principal, order.id, OrderStatus.CANCELED
            )
        assert Order.objects.get(id=order.id).status == OrderStatus.PAID

    @pytest.mark.parametrize(
        "target", [OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.PENDING, "refunded"]
    )
    def test_owner_cannot_make_other_moves(
        self, order_service, buyer_principal, order, target
    ):
        with pytest.raises(Forbidden):
            order_service.set_order_status(buyer_principal, order.id, target)

    def test_other_customer_cannot_cancel(self, order_service, other_principal, order):
        with pytest.raises(Forbidden):
            order_service.set_order_status(
                other_principal, order.id, OrderStatus.CANCELED
            )
        assert Order.objects.get(id=order.id).status == OrderStatus.PENDING

    def test_anonymous_principal(self, order_service, order):
        with pytest.raises(Unauthenticated):
            order_service.set_order_status(
                Principal.anonymous(), order.id, OrderStatus.CANCELED
            )


class TestStatusHistory:
    def test_transition_is_recorded(self, order_service, admin_principal, order):
        order_service.set_order_status(
            admin_principal, order.id, OrderStatus.PAID, notes="PIX confirmado"
        )

        last = OrderStatusHistory.objects.filter(order=order).last()
        assert last.old_status == OrderStatus.PENDING
        assert last.new_status == OrderStatus.PAID
        assert last.changed_by == admin_principal.subject
        assert last.notes == "PIX confirmado"

    def test_system_changes_have_blank_author(self, order_service, order):
        order_service.set_order_status(Principal.system(), order.id, OrderStatus.PAID)

        assert OrderStatusHistory.objects.filter(order=order).last().changed_by == ""

    def test_rejected_transition_records_nothing(
        self, order_service, buyer_principal, order
    ):
        before = OrderStatusHistory.objects.filter(order=order).count()

        with pytest.raises(Forbidden):
            order_service.set_order_status(buyer_principal, order.id, OrderStatus.PAID)

        assert OrderStatusHistory.objects.filter(order=order).count() == before

    def test_status_change_keeps_total(self, order_service, admin_principal, order):
        order_service.set_order_status(admin_principal, order.id, OrderStatus.PAID)

        assert Order.objects.get(id=order.id).total_cents == 500


class TestTerminalStates:
    @pytest.mark.parametrize(
        "status,terminal",
        [
            (OrderStatus.PENDING, False),
            (OrderStatus.PAID, False),
            (OrderStatus.SHIPPED, False),
            (OrderStatus.DELIVERED, True),
            (OrderStatus.CANCELED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert Order(status=status).is_terminal is terminal

    def test_terminal_states_have_no_way_out(self):
        for status in (OrderStatus.DELIVERED, OrderStatus.CANCELED):
            assert Order(status=status).is_terminal
            assert not VALID_TRANSITIONS[status]
