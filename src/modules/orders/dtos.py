"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Views) and the
Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: one cart line (product and quantity).
- ``CreateOrderDTO``: the checkout request (customer, addresses, cart).

``CreateOrderDTO.parse`` is the structural validation step of a checkout:
it runs before any store access and reports every problem at once as a
``ValidationFailed`` whose ``fields`` are keyed by dotted paths
(``items.1.quantity``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
)

from modules.orders.exceptions import ValidationFailed


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single cart line.

    The client sends ``product_id`` and ``quantity`` only.  The unit price
    is always resolved from the catalog, never taken from the request.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for checkout requests.

    Duplicate product ids are allowed; each becomes its own order line.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: EmailStr
    shipping_address: str = Field(min_length=1)
    billing_address: str = ""
    payment_method: str = Field(default="", max_length=50)
    notes: str = ""
    items: List[CreateOrderItemDTO]

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @classmethod
    def parse(cls, payload: Mapping[str, Any]) -> CreateOrderDTO:
        """Validate a raw request body.

        Optional text fields sent as ``null`` are treated as empty.

        Raises:
            ValidationFailed: one entry per offending field path.
        """
        if not isinstance(payload, Mapping):
            raise ValidationFailed({"non_field_errors": ["Expected a JSON object."]})
        data = dict(payload)
        for key in ("billing_address", "payment_method", "notes"):
            if data.get(key) is None:
                data.pop(key, None)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailed(_collect_errors(exc)) from exc


def _collect_errors(exc: ValidationError) -> Dict[str, List[str]]:
    fields: Dict[str, List[str]] = {}
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        message = error["msg"].removeprefix("Value error, ")
        fields.setdefault(path, []).append(message)
    return fields
