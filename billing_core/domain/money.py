"""Decimal helpers for currency values"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Union

ZERO = Decimal("0")
CENT = Decimal("0.01")

Numeric = Union[Decimal, int, float, str]


def to_decimal(value: Optional[Numeric]) -> Decimal:
    """
    Coerce a stored or user-entered number to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than the
    binary approximation. None is treated as zero (absent paid amount, etc).
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half-up. The only rounding applied to money values."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    if value < low:
        return low
    if value > high:
        return high
    return value


def format_currency(amount: Numeric, symbol: str = "₱") -> str:
    """
    Display form: symbol, thousands grouping, 2 decimals.

    Example:
        format_currency(Decimal("1650")) -> "₱1,650.00"
        format_currency(Decimal("-25.5")) -> "-₱25.50"
    """
    value = round_money(to_decimal(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
