"""Payment balance and status derivation - the single source for balance figures"""

import logging
from decimal import Decimal
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple
from billing_core.domain.models import (
    Adjustment,
    DerivedStatus,
    InvoiceStatus,
    LineItem,
    MonetaryRecord,
    PaymentBalance,
    PaymentStatus,
    RecordFigures,
    RecordKind,
    RecordStatus,
)
from billing_core.domain.adjustments import compute_amounts
from billing_core.domain.line_items import subtotal
from billing_core.domain.money import to_decimal

logger = logging.getLogger(__name__)

# Item statuses meaning some money has changed hands
_PARTIAL_STATUSES = {PaymentStatus.PAID, PaymentStatus.DOWNPAYMENT, PaymentStatus.CHEQUE}


def compute_balance(total: Decimal, paid_amount: Optional[Decimal]) -> PaymentBalance:
    """
    Remaining amount owed: total - paid_amount.

    The discount is already folded into `total`, so it is never subtracted
    here. Overpayment leaves a negative balance, kept as-is and flagged
    by `overpaid`; reporting it is left to the save path.
    """
    total = to_decimal(total)
    paid = to_decimal(paid_amount)
    return PaymentBalance(total=total, paid_amount=paid, balance=total - paid)


def derive_job_order_status(
    items: Iterable[LineItem],
    paid_amount: Optional[Decimal],
    current_status: Optional[RecordStatus] = None,
) -> DerivedStatus:
    """
    Job order status from item statuses and the recorded payment.

    Rules, first match wins:
    - Cancelled stays Cancelled (the only status a user sets directly)
    - Completed: every item is Paid
    - Downpayment: any item Paid/Downpayment/Cheque, or paid_amount > 0
    - Pending otherwise
    """
    if current_status == DerivedStatus.CANCELLED:
        return DerivedStatus.CANCELLED

    statuses = [PaymentStatus(item.status) for item in items]

    if statuses and all(s is PaymentStatus.PAID for s in statuses):
        return DerivedStatus.COMPLETED
    if any(s in _PARTIAL_STATUSES for s in statuses) or to_decimal(paid_amount) > 0:
        return DerivedStatus.DOWNPAYMENT
    return DerivedStatus.PENDING


def derive_invoice_status(
    total: Decimal,
    paid_amount: Optional[Decimal],
    current_status: Optional[RecordStatus] = None,
) -> InvoiceStatus:
    """Invoices carry one order-level flag: Paid once fully settled or marked so by the user"""
    if current_status == InvoiceStatus.PAID:
        return InvoiceStatus.PAID
    total = to_decimal(total)
    if total > 0 and to_decimal(paid_amount) >= total:
        return InvoiceStatus.PAID
    return InvoiceStatus.UNPAID


def settle_record(record: MonetaryRecord) -> RecordFigures:
    """
    Compute breakdown, balance and status for a record.

    Every read path that shows a total, discount or balance goes through
    here so the figures never diverge between views.
    """
    breakdown = compute_amounts(subtotal(record.items), record.discount, record.tax)
    balance = compute_balance(breakdown.total, record.paid_amount)

    status: RecordStatus
    if RecordKind(record.kind) is RecordKind.JOB_ORDER:
        status = derive_job_order_status(record.items, record.paid_amount, record.status)
    else:
        status = derive_invoice_status(breakdown.total, record.paid_amount, record.status)

    return RecordFigures(breakdown=breakdown, balance=balance, status=status)


def display_status(record: MonetaryRecord, status: Optional[RecordStatus] = None) -> str:
    """Badge text: a pending cheque on any item outranks the order status"""
    if any(PaymentStatus(item.status) is PaymentStatus.CHEQUE for item in record.items):
        return PaymentStatus.CHEQUE.value
    return (status or record.status).value


def summarize_item_statuses(items: Iterable[LineItem]) -> str:
    """Tooltip text such as '2 paid, 1 unpaid', in first-seen order"""
    counts: Dict[PaymentStatus, int] = {}
    for item in items:
        status = PaymentStatus(item.status)
        counts[status] = counts.get(status, 0) + 1
    return ", ".join(f"{count} {status.value.lower()}" for status, count in counts.items())


def mark_all_items(
    items: Iterable[LineItem],
    status: PaymentStatus,
    discount: Optional[Adjustment] = None,
    tax: Optional[Adjustment] = None,
) -> Tuple[List[LineItem], Optional[Decimal]]:
    """
    Set every item to the same payment status.

    Returns the new items and, when marking everything Paid, the paid amount
    to record (the record total after discount and tax). None means leave
    the paid amount alone.
    """
    status = PaymentStatus(status)
    updated = []
    for item in items:
        check_status_transition(item.status, status, item_id=item.id)
        updated.append(replace(item, status=status))

    paid_amount = None
    if status is PaymentStatus.PAID:
        paid_amount = compute_amounts(subtotal(updated), discount, tax).total
    return updated, paid_amount


def check_status_transition(
    old: PaymentStatus,
    new: PaymentStatus,
    item_id: Optional[str] = None,
) -> bool:
    """
    Item statuses may move in any direction; moving away from Paid
    (a payment reversal) is allowed but recorded in the audit log.

    Returns True when the transition is a reversal.
    """
    old, new = PaymentStatus(old), PaymentStatus(new)
    reversal = old is PaymentStatus.PAID and new is not PaymentStatus.PAID
    if reversal:
        logger.info(
            "Item payment status reversed",
            extra={"step": "status_transition", "item_id": item_id, "from": old.value, "to": new.value},
        )
    return reversal


def audit_item_statuses(
    previous: Iterable[LineItem],
    current: Iterable[LineItem],
) -> None:
    """Audit status changes between two versions of a record's items (matched by id)"""
    before = {item.id: item.status for item in previous}
    for item in current:
        if item.id in before:
            check_status_transition(before[item.id], item.status, item_id=item.id)

