"""Integration tests for the orders HTTP API.

Every domain error is returned as ``{"detail": ..., "code": ...}`` with the
status code of its class.
"""

from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.products.models import Product

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


def _place(client, *lines):
    payload = {
        "items": [{"product_id": str(product.id), "quantity": qty} for product, qty in lines]
    }
    return client.post(URL, payload, format="json")


@pytest.fixture()
def placed_order(buyer_client, book_a, book_b):
    response = _place(buyer_client, (book_a, 2), (book_b, 1))
    assert response.status_code == 201
    return response.json()


class TestPlaceOrder:
    def test_creates_order(self, placed_order, buyer):
        assert placed_order["status"] == OrderStatus.PENDING
        assert placed_order["total_cents"] == 1300
        assert placed_order["customer_id"] == str(buyer.id)
        assert [item["product_sku"] for item in placed_order["items"]] == ["BK-001", "BK-002"]
        assert placed_order["items"][0]["subtotal_cents"] == 1000
        assert placed_order["status_history"][0]["new_status"] == OrderStatus.PENDING

    def test_requires_authentication(self, api_client, book_a):
        response = _place(api_client, (book_a, 1))

        assert response.status_code == 401

    def test_caller_without_customer(self, api_client, staff_user, book_a):
        api_client.force_authenticate(user=staff_user)

        response = _place(api_client, (book_a, 1))

        assert response.status_code == 404
        assert response.json()["code"] == "customer_not_found"

    def test_empty_order(self, buyer_client):
        response = buyer_client.post(URL, {"items": []}, format="json")

        assert response.status_code == 400
        assert response.json()["code"] == "empty_order"

    def test_invalid_quantity_keeps_stock(self, buyer_client, book_a, book_b):
        response = _place(buyer_client, (book_a, 2), (book_b, 0))

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_quantity"
        assert Product.objects.get(id=book_a.id).stock == 10
        assert not Order.objects.exists()

    def test_unavailable_product(self, buyer_client, retired_product):
        response = _place(buyer_client, (retired_product, 1))

        assert response.status_code == 400
        assert response.json()["code"] == "product_unavailable"

    def test_insufficient_stock(self, buyer_client, book_b):
        response = _place(buyer_client, (book_b, 6))

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "insufficient_stock"
        assert "BK-002" in body["detail"]

    def test_malformed_payload(self, buyer_client):
        response = buyer_client.post(
            URL, {"items": [{"product_id": "nope", "quantity": 1}]}, format="json"
        )

        assert response.status_code == 400


class TestReadOrders:
    def test_list_shows_only_own_orders(
        self, buyer_client, placed_order, other_customer, book_a
    ):
        Order.objects.create(customer=other_customer)

        response = buyer_client.get(URL)

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["results"][0]["id"] == placed_order["id"]

    def test_staff_lists_everything(self, api_client, staff_user, placed_order, other_customer):
        Order.objects.create(customer=other_customer)
        api_client.force_authenticate(user=staff_user)

        assert api_client.get(URL).json()["count"] == 2

    def test_filter_by_status(self, buyer_client, placed_order):
        assert buyer_client.get(URL, {"status": "paid"}).json()["count"] == 0
        assert buyer_client.get(URL, {"status": "pending"}).json()["count"] == 1

    def test_retrieve_own_order(self, buyer_client, placed_order):
        response = buyer_client.get(f"{URL}{placed_order['id']}/")

        assert response.status_code == 200
        assert response.json()["total_cents"] == 1300

    def test_other_customers_order_is_not_found(self, api_client, other_user, other_customer, placed_order):
        api_client.force_authenticate(user=other_user)

        response = api_client.get(f"{URL}{placed_order['id']}/")

        assert response.status_code == 404
        assert response.json()["code"] == "order_not_found"

    def test_total_endpoint(self, buyer_client, placed_order):
        response = buyer_client.get(f"{URL}{placed_order['id']}/total/")

        assert response.status_code == 200
        assert response.json() == {"order_id": placed_order["id"], "total_cents": 1300}


class TestStatusChanges:
    def test_staff_marks_order_paid(self, api_client, staff_user, placed_order):
        api_client.force_authenticate(user=staff_user)

        response = api_client.patch(
            f"{URL}{placed_order['id']}/", {"status": "paid", "notes": "PIX"}, format="json"
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == OrderStatus.PAID
        assert body["status_history"][-1]["notes"] == "PIX"
        assert body["status_history"][-1]["changed_by"] == str(staff_user.pk)

    def test_staff_invalid_transition(self, api_client, staff_user, placed_order):
        api_client.force_authenticate(user=staff_user)

        response = api_client.patch(
            f"{URL}{placed_order['id']}/", {"status": "delivered"}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_transition"

    def test_customer_cancels_pending_order(self, buyer_client, placed_order, book_a):
        response = buyer_client.post(f"{URL}{placed_order['id']}/cancel/", {}, format="json")

        assert response.status_code == 200
        assert response.json()["status"] == OrderStatus.CANCELED

    def test_customer_cannot_pay(self, buyer_client, placed_order):
        response = buyer_client.patch(
            f"{URL}{placed_order['id']}/", {"status": "paid"}, format="json"
        )

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_customer_cannot_cancel_paid_order(
        self, buyer_client, placed_order, order_service, admin_principal
    ):
        order_service.set_order_status(admin_principal, placed_order["id"], OrderStatus.PAID)

        response = buyer_client.post(f"{URL}{placed_order['id']}/cancel/", {}, format="json")

        assert response.status_code == 403
        assert Order.objects.get(id=placed_order["id"]).status == OrderStatus.PAID

    def test_other_customer_cannot_cancel(self, api_client, other_user, other_customer, placed_order):
        api_client.force_authenticate(user=other_user)

        response = api_client.post(f"{URL}{placed_order['id']}/cancel/", {}, format="json")

        assert response.status_code == 403

    def test_unknown_order(self, staff_client):
        response = staff_client.patch(f"{URL}{uuid4()}/", {"status": "paid"}, format="json")

        assert response.status_code == 404
        assert response.json()["code"] == "order_not_found"

    def test_status_is_required(self, staff_client, placed_order):
        response = staff_client.patch(f"{URL}{placed_order['id']}/", {}, format="json")

        assert response.status_code == 400


class TestExports:
    def test_lines(self, buyer_client, placed_order):
        response = buyer_client.get(f"{URL}{placed_order['id']}/lines/")

        assert response.status_code == 200
        assert response.json() == [
            {"sku": "BK-001", "name": "Livro Infantil A", "quantity": 2, "unit_price": 500, "subtotal": 1000},
            {"sku": "BK-002", "name": "Livro Infantil B", "quantity": 1, "unit_price": 300, "subtotal": 300},
        ]

    def test_csv_download(self, buyer_client, placed_order):
        response = buyer_client.get(f"{URL}{placed_order['id']}/export/")

        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/csv")
        assert f'filename="pedido_{placed_order["id"]}.csv"' in response["Content-Disposition"]
        assert response.content.decode().splitlines() == [
            "sku,name,quantity,unit_price,subtotal",
            "BK-001,Livro Infantil A,2,500,1000",
            "BK-002,Livro Infantil B,1,300,300",
        ]

    def test_csv_filename_uses_canonical_order_id(self, buyer_client, placed_order):
        response = buyer_client.get(f"{URL}urn:uuid:{placed_order['id'].upper()}/export/")

        assert response.status_code == 200
        assert response["Content-Disposition"] == (
            f'attachment; filename="pedido_{placed_order["id"]}.csv"'
        )

    def test_export_hidden_from_other_customers(
        self, api_client, other_user, other_customer, placed_order
    ):
        api_client.force_authenticate(user=other_user)

        response = api_client.get(f"{URL}{placed_order['id']}/export/")

        assert response.status_code == 404
        assert response.json()["code"] == "order_not_found"
