"""Line item totals"""

from decimal import Decimal
from typing import Dict, Iterable
from billing_core.domain.models import LineItem, PaymentStatus
from billing_core.domain.money import ZERO, sum_money, to_decimal


def line_total(item: LineItem) -> Decimal:
    return to_decimal(item.quantity) * to_decimal(item.unit_amount)


def subtotal(items: Iterable[LineItem]) -> Decimal:
    """
    Sum of quantity x unit amount over all items.

    Inputs are assumed valid (quantity > 0, unit amount >= 0); rejection
    happens at the API schema boundary.
    """
    return sum_money(line_total(item) for item in items)


def status_totals(items: Iterable[LineItem]) -> Dict[PaymentStatus, Decimal]:
    """Line totals grouped by item payment status (every status present, zero if unused)"""
    totals: Dict[PaymentStatus, Decimal] = {status: ZERO for status in PaymentStatus}
    for item in items:
        totals[PaymentStatus(item.status)] += line_total(item)
    return totals
