"""
Money helpers. Amounts are Decimal with two places, never float.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENT = Decimal("0.01")


def to_money(value: Union[Decimal, int, str]) -> Decimal:
    """Quantize to cents (half up)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return to_money(unit_price * quantity)


def order_total(lines: Iterable) -> Decimal:
    """Sum of quantity x unit_price over objects exposing both attributes."""
    return to_money(sum((line_total(line.quantity, line.unit_price) for line in lines), Decimal("0")))
