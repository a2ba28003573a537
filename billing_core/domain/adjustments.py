"""Discount and tax calculation applied to a record subtotal"""

from decimal import Decimal
from typing import Optional
from billing_core.domain.models import Adjustment, AdjustmentType, AmountBreakdown
from billing_core.domain.money import ZERO, clamp, round_money, to_decimal
from billing_core.domain.exceptions import InvalidAdjustmentTypeError

HUNDRED = Decimal("100")


def _adjustment_type(adjustment: Adjustment) -> AdjustmentType:
    try:
        return AdjustmentType(adjustment.type)
    except ValueError as e:
        raise InvalidAdjustmentTypeError(
            f"Adjustment type must be 'amount' or 'percent', got {adjustment.type!r}"
        ) from e


def adjustment_amount(base: Decimal, adjustment: Optional[Adjustment]) -> Decimal:
    """Resolve a flat or percentage adjustment against a base amount"""
    if adjustment is None:
        return ZERO

    value = to_decimal(adjustment.value)
    if _adjustment_type(adjustment) is AdjustmentType.PERCENT:
        return base * value / HUNDRED
    return value


def compute_amounts(
    subtotal: Decimal,
    discount: Optional[Adjustment] = None,
    tax: Optional[Adjustment] = None,
) -> AmountBreakdown:
    """
    Apply discount, then tax on the discounted base.

    Order:
    1. discount_amount = subtotal x pct / 100, or the flat value
    2. taxable_base = subtotal - discount_amount
    3. tax_amount = taxable_base x pct / 100, or the flat value
    4. total = taxable_base + tax_amount

    The discount is clamped to [0, subtotal]: an invoice total never goes
    negative because of an oversized flat discount.

    Example:
        subtotal 100, discount 10%, tax 10% -> 10, 90, 9, 99
    """
    # Each stage is rounded to cents so the parts always add up to the total
    subtotal = round_money(to_decimal(subtotal))

    discount_amount = clamp(adjustment_amount(subtotal, discount), ZERO, max(subtotal, ZERO))
    discount_amount = round_money(discount_amount)
    taxable_base = subtotal - discount_amount
    tax_amount = round_money(adjustment_amount(taxable_base, tax))

    return AmountBreakdown(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_base=taxable_base,
        tax_amount=tax_amount,
        total=taxable_base + tax_amount,
    )
