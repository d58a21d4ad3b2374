"""Product service layer (catalog reads).

Catalog administration (creating products, editing prices and stock) is
done through the Django admin; the API only exposes reads, filtered by the
product visibility policy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

import structlog

from modules.core.policies import can_view_product, product_visibility_filter
from modules.products.exceptions import ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.core.principals import Principal
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for catalog reads.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    def visible_queryset(self, principal: Principal) -> QuerySet[Product]:
        """Queryset of the products *principal* may see (for filtering/paging)."""
        return Product.objects.filter(product_visibility_filter(principal))

    def list_visible(self, principal: Principal) -> List[Product]:
        return list(self.visible_queryset(principal))

    def get_visible(self, principal: Principal, id: Any) -> Product:
        """Retrieve a single product.

        Raises:
            ProductNotFound: if it does not exist or is hidden from *principal*.
        """
        product = self._repo.get_by_id(id)
        if not product or not can_view_product(principal, product):
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.retrieved", product_id=str(id))
        return product
