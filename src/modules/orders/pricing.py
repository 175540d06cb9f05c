"""Pricing calculator.

Pure functions over ``ProductSnapshot`` values: no database access, no
clock, no settings.  Money is ``Decimal`` with two places; each line is
quantized with ``ROUND_HALF_UP`` and the order total is the sum of the
already-quantized line totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence, Tuple

from modules.catalog.dtos import ProductSnapshot
from modules.orders.exceptions import InvalidQuantity

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PricedLine:
    product: ProductSnapshot
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class PricedOrder:
    lines: Tuple[PricedLine, ...]
    total: Decimal


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def price_line(product: ProductSnapshot, quantity: int) -> PricedLine:
    """Price one line.

    Raises:
        InvalidQuantity: *quantity* is not an ``int`` >= 1 (``bool`` included).
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(quantity)
    unit_price = quantize(product.unit_price)
    return PricedLine(
        product=product,
        quantity=quantity,
        unit_price=unit_price,
        line_total=quantize(unit_price * quantity),
    )


def price_lines(lines: Sequence[Tuple[ProductSnapshot, int]]) -> PricedOrder:
    """Price a whole cart, preserving line order."""
    priced = []
    for index, (product, quantity) in enumerate(lines):
        try:
            priced.append(price_line(product, quantity))
        except InvalidQuantity as exc:
            raise InvalidQuantity(quantity, field=f"items.{index}.quantity") from exc
    total = sum((line.line_total for line in priced), Decimal("0.00"))
    return PricedOrder(lines=tuple(priced), total=total)
