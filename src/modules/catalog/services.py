"""Catalog service layer (read-only use cases).

The storefront only ever shows active products; product CRUD is owned
by the back office and is not exposed here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog

from modules.catalog.exceptions import ProductNotFound

if TYPE_CHECKING:
    from modules.catalog.models import Product
    from modules.catalog.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CatalogService:
    """Application service for catalog browsing."""

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    def list_products(self):
        """Active products; filtering and pagination happen in the view."""
        return self._repo.list()

    def get_product(self, id: str) -> Product:
        """Retrieve a single active product.

        Raises:
            ProductNotFound: unknown id, malformed id or inactive product.
        """
        product = self._repo.get_active(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def list_categories(self) -> List[str]:
        categories = self._repo.categories()
        logger.debug("catalog.categories_listed", count=len(categories))
        return categories
