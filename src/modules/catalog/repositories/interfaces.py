"""Product repository interface.

Extends ``IRepository[Product]`` with the point-in-time snapshot read used
by the checkout and the public catalog queries.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.dtos import ProductSnapshot
    from modules.catalog.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def snapshot(self, id: UUID | str) -> Optional[ProductSnapshot]:
        """Return a consistent read of id, price, stock and active flag.

        Returns ``None`` if the product does not exist.  No side effects.
        """

    @abstractmethod
    def get_active(self, id: str) -> Optional[Product]:
        """Retrieve a product only if it is currently on sale."""

    @abstractmethod
    def categories(self) -> List[str]:
        """Distinct, non-empty categories of active products."""
