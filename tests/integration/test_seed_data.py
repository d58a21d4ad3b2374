import pytest
from django.core.management import call_command

from modules.customers.models import Customer
from modules.notifications.models import NotificationJob
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.products.models import Product

pytestmark = pytest.mark.integration


class TestSeedData:
    def test_seeds_catalog_customers_and_orders(self):
        call_command("seed_data")

        assert set(Product.objects.values_list("sku", flat=True)) == {"BK-001", "BK-002", "BK-003"}
        assert Customer.objects.count() == 2
        assert Order.objects.count() == 2
        assert Order.objects.filter(status=OrderStatus.PAID).count() == 1
        assert NotificationJob.objects.count() == 1
        assert Product.objects.get(sku="BK-003").stock == 18

    def test_is_idempotent(self):
        call_command("seed_data")
        call_command("seed_data")

        assert Product.objects.count() == 3
        assert Order.objects.count() == 2
