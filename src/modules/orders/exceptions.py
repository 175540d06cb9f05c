"""Order domain exceptions.

Raised by the Service Layer when a checkout or a status change cannot
proceed.  Every error carries a stable ``code``; the API layer (Views)
catches these and translates them into HTTP responses.

Side-effect guarantees by kind:

- ``ValidationFailed`` / ``ProductUnavailable``: raised before any stock
  is touched.
- ``InsufficientStock``: any reservation made earlier in the same attempt
  is rolled back with the transaction.
- ``StorageFailure``: infrastructure fault; the transaction was rolled back
  and the whole operation is safe to retry.
- ``NotificationFailure``: post-commit only, logged and never surfaced as
  a failed checkout.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence
from uuid import UUID


class OrderError(Exception):
    """Base class of every order-domain error."""

    code = "order_error"


class ValidationFailed(OrderError):
    """The request is malformed; ``fields`` maps field paths to messages."""

    code = "validation_failed"

    def __init__(self, fields: Mapping[str, Sequence[str]]) -> None:
        self.fields: Dict[str, List[str]] = {k: list(v) for k, v in fields.items()}
        super().__init__(
            "Invalid order request: " + ", ".join(sorted(self.fields)) + "."
        )


class InvalidQuantity(ValidationFailed):
    """A line quantity is not a positive integer."""

    code = "invalid_quantity"

    def __init__(self, quantity: object, field: str = "quantity") -> None:
        self.quantity = quantity
        super().__init__({field: [f"Quantity must be an integer >= 1, got {quantity!r}."]})


class ProductUnavailable(OrderError):
    """A cart line references a missing or inactive product."""

    code = "product_unavailable"

    def __init__(self, product_id: UUID | str) -> None:
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found or inactive.")


class InsufficientStock(OrderError):
    """Not enough stock to fulfil one of the lines."""

    code = "insufficient_stock"

    def __init__(self, product_id: UUID | str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}."
        )


class StorageFailure(OrderError):
    """The data store failed; nothing was committed."""

    code = "storage_failure"


class StorageTimeout(StorageFailure):
    """The checkout exceeded its time budget and was rolled back."""

    code = "storage_timeout"


class NotificationFailure(OrderError):
    """The confirmation request could not be handed to the dispatcher."""

    code = "notification_failure"


class OrderNotFound(OrderError):
    """The requested order does not exist."""

    code = "order_not_found"


class InvalidOrderStatus(OrderError):
    """Unknown status, or a transition the lifecycle forbids."""

    code = "invalid_status"
