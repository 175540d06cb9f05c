"""Django ORM implementation of the Product repository.

Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising, and the service layer decides how to translate a
missing product.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError

from modules.catalog.dtos import ProductSnapshot
from modules.catalog.models import Product
from modules.catalog.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

CATEGORIES_CACHE_KEY = "catalog:categories"

_SNAPSHOT_FIELDS = ("id", "sku", "name", "price", "stock_quantity", "is_active")


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key, active or not."""
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_active(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.active().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None):
        """Active products, optionally narrowed with ORM look-ups."""
        queryset = Product.objects.active()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def snapshot(self, id: UUID | str) -> Optional[ProductSnapshot]:
        """Single-row read; all fields come from the same ``SELECT``."""
        try:
            row = Product.objects.filter(id=id).values(*_SNAPSHOT_FIELDS).first()
        except (ValueError, ValidationError):
            return None
        if row is None:
            return None
        return ProductSnapshot(
            id=row["id"],
            sku=row["sku"],
            name=row["name"],
            unit_price=row["price"],
            stock=row["stock_quantity"],
            active=row["is_active"],
        )

    def categories(self) -> List[str]:
        """Sorted distinct categories, cached for ``CATALOG_CATEGORIES_CACHE_TTL``."""

        def _load() -> List[str]:
            values = (
                Product.objects.active()
                .exclude(category="")
                .order_by("category")
                .values_list("category", flat=True)
                .distinct()
            )
            return list(values)

        return cache.get_or_set(
            CATEGORIES_CACHE_KEY, _load, settings.CATALOG_CATEGORIES_CACHE_TTL
        )
