import pytest
from django.db import IntegrityError, transaction

from modules.products.models import Product

pytestmark = pytest.mark.unit


class TestProductModel:
    def test_sku_is_normalised(self, book_a):
        assert book_a.sku == "BK-001"

    def test_default_currency(self, book_a, settings):
        assert book_a.currency == settings.STOREFRONT_CURRENCY

    def test_sku_is_unique(self, book_a):
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.create(sku="BK-001", name="Duplicate", price_cents=1)

    def test_protected_while_referenced(self, order_service, buyer_principal, book_a):
        from django.db.models import ProtectedError

        from modules.orders.dtos import PlaceOrderItemDTO

        order_service.place_order(
            buyer_principal, [PlaceOrderItemDTO(product_id=book_a.id, quantity=1)]
        )

        with pytest.raises(ProtectedError):
            book_a.delete()
