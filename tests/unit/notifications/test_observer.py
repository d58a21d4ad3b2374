"""Unit tests for the "order paid" observer that feeds the notification queue."""

import pytest
from django.db import transaction

from modules.notifications.models import NotificationJob, NotificationStatus
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import Forbidden, InvalidTransition
from modules.orders.models import Order

pytestmark = pytest.mark.unit


class TestEnqueueOnPaid:
    def test_paying_enqueues_one_job(self, paid_order, buyer):
        job = NotificationJob.objects.get(order=paid_order)

        assert job.status == NotificationStatus.PENDING
        assert job.to_email == buyer.email
        assert job.processed_at is None
        assert job.payload == {
            "customer_name": "Ana Souza",
            "order_id": str(paid_order.id),
            "total_cents": 1300,
            "currency": "BRL",
        }

    def test_later_transitions_do_not_enqueue(self, order_service, admin_principal, paid_order):
        order_service.set_order_status(admin_principal, paid_order.id, OrderStatus.SHIPPED)
        order_service.set_order_status(admin_principal, paid_order.id, OrderStatus.DELIVERED)

        assert NotificationJob.objects.filter(order=paid_order).count() == 1

    def test_placing_an_order_does_not_enqueue(self, pending_order):
        assert not NotificationJob.objects.exists()

    def test_cancel_does_not_enqueue(self, order_service, buyer_principal, pending_order):
        order_service.set_order_status(buyer_principal, pending_order.id, OrderStatus.CANCELED)

        assert not NotificationJob.objects.exists()

    def test_repeated_paid_is_rejected_without_new_job(
        self, order_service, admin_principal, paid_order
    ):
        with pytest.raises(InvalidTransition):
            order_service.set_order_status(admin_principal, paid_order.id, OrderStatus.PAID)

        assert NotificationJob.objects.count() == 1

    def test_forbidden_transition_enqueues_nothing(
        self, order_service, buyer_principal, pending_order
    ):
        with pytest.raises(Forbidden):
            order_service.set_order_status(buyer_principal, pending_order.id, OrderStatus.PAID)

        assert not NotificationJob.objects.exists()

    def test_job_is_rolled_back_with_the_transition(
        self, order_service, admin_principal, pending_order
    ):
        with pytest.raises(RuntimeError), transaction.atomic():
            order_service.set_order_status(admin_principal, pending_order.id, OrderStatus.PAID)
            raise RuntimeError("payment gateway rollback")

        assert Order.objects.get(id=pending_order.id).status == OrderStatus.PENDING
        assert not NotificationJob.objects.exists()

    def test_job_keeps_contact_snapshot(self, paid_order, buyer):
        buyer.email = "ana.nova@example.com"
        buyer.save()

        assert NotificationJob.objects.get(order=paid_order).to_email == "ana@example.com"
