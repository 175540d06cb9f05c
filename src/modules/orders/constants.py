"""Order domain constants.

Status choices, the optional strict lifecycle and the stages a single
checkout attempt moves through.
"""

import string
from enum import StrEnum

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


# Only consulted when ORDER_STRICT_STATUS_TRANSITIONS is enabled.
STRICT_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


class CheckoutStage(StrEnum):
    """Where an order-creation attempt is; logged on every abort."""

    START = "start"
    VALIDATING = "validating"
    PRICING = "pricing"
    RESERVING = "reserving"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    ABORTED = "aborted"


ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_SUFFIX_LENGTH = 8

ORDER_PLACED_EVENT = "OrderPlaced"
NOTIFICATIONS_TOPIC = "notifications"
