# storefront/core/pricing.py
"""
Line and order total computation.

All arithmetic is done in `Decimal`. Line totals are kept at full precision
and only the aggregated figures are rounded (half-up, 2 places), so summing
many lines never compounds rounding error.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol

from storefront.core.errors import InvalidPrice, InvalidQuantity

CENT = Decimal("0.01")
ZERO = Decimal("0")


class PricedLine(Protocol):
    unit_price: float | Decimal
    quantity: int


@dataclass(frozen=True)
class Line:
    """Plain (unit_price, quantity) pair, for callers without an ORM row."""

    unit_price: float | Decimal
    quantity: int


@dataclass(frozen=True)
class OrderTotals:
    items_price: Decimal
    tax_price: Decimal
    shipping_price: Decimal
    total_price: Decimal


def to_money(value: float | int | str | Decimal) -> Decimal:
    """Convert a price to Decimal without picking up float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _check_price(value, what: str = "Price") -> Decimal:
    amount = to_money(value)
    if not amount.is_finite():
        raise InvalidPrice(f"{what} must be a finite number")
    if amount < ZERO:
        raise InvalidPrice(f"{what} must not be negative")
    return amount


def check_quantity(quantity) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity()
    if quantity <= 0:
        raise InvalidQuantity()
    return quantity


def line_total(unit_price: float | Decimal, quantity: int) -> Decimal:
    """
    unit_price * quantity, unrounded.

    Raises:
        InvalidPrice: unit_price < 0 or not finite
        InvalidQuantity: quantity is not an integer >= 1
    """
    price = _check_price(unit_price)
    qty = check_quantity(quantity)
    return price * qty


def aggregate(
    lines: Iterable[PricedLine],
    tax_rate: float | Decimal | None = None,
    shipping_cost: float | Decimal | None = None,
) -> OrderTotals:
    """
    Sum line totals into order totals.

    - items_price: sum of line totals, rounded once
    - tax_price: unrounded items sum * tax_rate, rounded (0 without a rate)
    - shipping_price: passed through (0 means free shipping)
    - total_price: items_price + tax_price + shipping_price

    Empty `lines` gives zero items/tax and a total equal to the shipping cost.
    """
    subtotal = ZERO
    for line in lines:
        subtotal += line_total(line.unit_price, line.quantity)

    rate = ZERO if tax_rate is None else _check_price(tax_rate, "Tax rate")
    shipping = ZERO if shipping_cost is None else _check_price(
        shipping_cost, "Shipping cost"
    )

    items_price = round_money(subtotal)
    tax_price = round_money(subtotal * rate)
    shipping_price = round_money(shipping)

    return OrderTotals(
        items_price=items_price,
        tax_price=tax_price,
        shipping_price=shipping_price,
        total_price=items_price + tax_price + shipping_price,
    )
