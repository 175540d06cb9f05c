"""Order and OrderLine models.

Rules implemented:
- ``order_number`` is a human-readable identifier, unique at the database
  level and immutable after creation.  Collisions are resolved by the
  repository (retry on ``IntegrityError``), never by a pre-check.
- ``total_amount`` always equals the sum of the order's line totals; both
  are written once, in the same transaction.
- ``OrderLine`` snapshots the product's price, name and SKU at order time.
  Later catalog changes never alter a committed order.
- ``line_total`` is always ``quantity * unit_price``.
- ``status`` is the only field that changes after creation.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    ORDER_NUMBER_ALPHABET,
    ORDER_NUMBER_SUFFIX_LENGTH,
    STRICT_TRANSITIONS,
    TERMINAL_STATES,
    OrderStatus,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    The UUIDv7 ``id`` is the internal key; customers and support staff use
    ``order_number`` (``ORD-XXXXXXXX``).
    """

    order_number: models.CharField = models.CharField(
        max_length=32, unique=True, editable=False
    )
    customer_name: models.CharField = models.CharField(max_length=255)
    customer_email: models.EmailField = models.EmailField(max_length=254)
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    shipping_address: models.TextField = models.TextField()
    billing_address: models.TextField = models.TextField(blank=True, default="")
    payment_method: models.CharField = models.CharField(
        max_length=50, blank=True, default=""
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["customer_email"], name="orders_email_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is delivered or cancelled."""
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether *new_status* may follow the current status.

        Any known status is accepted unless
        ``ORDER_STRICT_STATUS_TRANSITIONS`` is enabled, in which case only
        the forward lifecycle (and ``pending -> cancelled``) is legal.
        """
        if new_status not in OrderStatus.values:
            return False
        if not settings.ORDER_STRICT_STATUS_TRANSITIONS:
            return True
        return new_status in STRICT_TRANSITIONS.get(self.status, set())

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Return a candidate number: prefix + random uppercase alphanumerics."""
        suffix = "".join(
            secrets.choice(ORDER_NUMBER_ALPHABET)
            for _ in range(ORDER_NUMBER_SUFFIX_LENGTH)
        )
        return f"{settings.ORDER_NUMBER_PREFIX}{suffix}"

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def lines_total(self) -> Decimal:
        return sum((line.line_total for line in self.lines.all()), Decimal("0.00"))

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderLine(BaseModel):
    """Line item linking an Order to a Product.

    ``unit_price``, ``product_name`` and ``product_sku`` are copies taken
    when the order was placed.  ``product`` is a non-owning reference kept
    for navigation; ``PROTECT`` stops the catalog from deleting a product
    that appears in order history.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="lines",
    )
    product: models.ForeignKey = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="order_lines",
    )
    product_name: models.CharField = models.CharField(max_length=255)
    product_sku: models.CharField = models.CharField(max_length=64)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    line_total: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_lines"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_lines_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name="order_lines_unit_price_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.line_total = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_sku} x{self.quantity} (${self.line_total})"
