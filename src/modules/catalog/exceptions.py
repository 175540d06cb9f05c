"""Catalog domain exceptions.

Raised by the catalog repository and the inventory ledger.  The order
service translates the stock-related ones into checkout errors; the
catalog views translate ``ProductNotFound`` into a 404.
"""

from __future__ import annotations


class ProductNotFound(Exception):
    """The requested product does not exist or is not on sale."""


class ProductNotAvailable(Exception):
    """The product vanished or was deactivated before stock could be taken."""

    def __init__(self, product_id: object) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} is not available.")


class OutOfStock(Exception):
    """A conditional stock decrement matched no row: not enough units left."""

    def __init__(self, product_id: object, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Product {product_id}: requested {requested}, available {available}."
        )
