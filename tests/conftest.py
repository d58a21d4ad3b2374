import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.core.principals import Principal
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users, customers and principals
# ---------------------------------------------------------------------------


@pytest.fixture()
def buyer_user():
    return User.objects.create_user(username="ana", password="ana-pass-123")


@pytest.fixture()
def buyer(buyer_user):
    return Customer.objects.create(
        principal_id=str(buyer_user.pk),
        full_name="Ana Souza",
        email="ana@example.com",
    )


@pytest.fixture()
def buyer_principal(buyer):
    return Principal(subject=buyer.principal_id)


@pytest.fixture()
def other_user():
    return User.objects.create_user(username="bruno", password="bruno-pass-123")


@pytest.fixture()
def other_customer(other_user):
    return Customer.objects.create(
        principal_id=str(other_user.pk),
        full_name="Bruno Lima",
        email="bruno@example.com",
    )


@pytest.fixture()
def other_principal(other_customer):
    return Principal(subject=other_customer.principal_id)


@pytest.fixture()
def staff_user():
    return User.objects.create_user(
        username="backoffice", password="staff-pass-123", is_staff=True
    )


@pytest.fixture()
def admin_principal():
    return Principal(subject="staff-1", is_privileged=True)


@pytest.fixture()
def buyer_client(api_client, buyer, buyer_user):
    api_client.force_authenticate(user=buyer_user)
    return api_client


@pytest.fixture()
def staff_client(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def book_a():
    return Product.objects.create(
        sku="bk-001", name="Livro Infantil A", price_cents=500, stock=10
    )


@pytest.fixture()
def book_b():
    return Product.objects.create(
        sku="bk-002", name="Livro Infantil B", price_cents=300, stock=5
    )


@pytest.fixture()
def retired_product():
    return Product.objects.create(
        sku="bk-999", name="Fora de Linha", price_cents=1000, stock=3, active=False
    )


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )
