"""Inventory ledger: the authoritative per-product stock counter.

A reservation is one conditional ``UPDATE``::

    UPDATE products
       SET stock_quantity = stock_quantity - :n
     WHERE id = :id AND is_active AND stock_quantity >= :n

checked by its affected-row count.  The database serializes concurrent
updates of the same row (row lock on PostgreSQL/MySQL, the write lock on
SQLite), so the sum of successful reservations can never exceed the stock
and the counter never goes negative.  There is no read-then-write in
application memory.

``reserve`` must run inside the caller's ``transaction.atomic()`` block:
rolling that transaction back is how reservations are undone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.catalog.exceptions import OutOfStock, ProductNotAvailable
from modules.catalog.models import Product

logger = structlog.get_logger(__name__)


class IInventoryLedger(ABC):
    @abstractmethod
    def reserve(self, product_id: UUID, quantity: int) -> int:
        """Atomically take *quantity* units; return the remaining stock.

        Raises:
            OutOfStock: fewer than *quantity* units are available.
            ProductNotAvailable: product missing or inactive.
        """


class DjangoInventoryLedger(IInventoryLedger):
    """Ledger backed by ``products.stock_quantity``."""

    def reserve(self, product_id: UUID, quantity: int) -> int:
        if quantity < 1:
            raise ValueError("Reservation quantity must be at least 1.")
        if not transaction.get_connection().in_atomic_block:
            raise RuntimeError("Stock reservations must run inside a transaction.")

        updated = Product.objects.filter(
            id=product_id,
            is_active=True,
            stock_quantity__gte=quantity,
        ).update(
            stock_quantity=F("stock_quantity") - quantity,
            updated_at=timezone.now(),
        )

        row = (
            Product.objects.filter(id=product_id)
            .values("stock_quantity", "is_active")
            .first()
        )
        if updated == 1:
            return row["stock_quantity"]

        if row is None or not row["is_active"]:
            raise ProductNotAvailable(product_id)

        logger.info(
            "inventory.reservation_rejected",
            product_id=str(product_id),
            requested=quantity,
            available=row["stock_quantity"],
        )
        raise OutOfStock(product_id, quantity, row["stock_quantity"])
