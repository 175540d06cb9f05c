"""Catalog DTOs.

``ProductSnapshot`` is the point-in-time view of a product that the
checkout works from: every field comes from the same row read, and the
model is frozen so the price used for pricing cannot drift while an
order is being assembled.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ProductSnapshot(BaseModel):
    """Immutable, internally consistent read of one product row."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    sku: str
    name: str
    unit_price: Decimal
    stock: int
    active: bool
