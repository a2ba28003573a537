"""Record assembly for create and edit flows"""

import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from billing_core.domain.models import (
    Adjustment,
    DerivedStatus,
    Expense,
    ExpenseCategory,
    ExpenseItem,
    InvoiceStatus,
    LineItem,
    MonetaryRecord,
    RecordKind,
    RecordStatus,
    SalaryPayment,
)
from billing_core.domain.balance import audit_item_statuses, settle_record
from billing_core.domain.exceptions import ImmutableFieldError
from billing_core.domain.money import ZERO, sum_money, to_decimal


def finalize_record(record: MonetaryRecord) -> MonetaryRecord:
    """
    Copy of the record with its derived fields (total_amount, status) recomputed.

    An invoice marked Paid with less than the total recorded is treated as
    settled in full.
    """
    figures = settle_record(record)
    paid_amount = to_decimal(record.paid_amount)

    if figures.status == InvoiceStatus.PAID and paid_amount < figures.breakdown.total:
        paid_amount = figures.breakdown.total

    return replace(
        record,
        paid_amount=paid_amount,
        total_amount=figures.breakdown.total,
        status=figures.status,
    )


def new_record(
    kind: RecordKind,
    number: str,
    client_name: str,
    items: List[LineItem],
    start_date: datetime,
    paid_amount: Decimal = ZERO,
    discount: Optional[Adjustment] = None,
    tax: Optional[Adjustment] = None,
    status: Optional[RecordStatus] = None,
    due_date: Optional[datetime] = None,
    record_id: Optional[str] = None,
    **details: Any,
) -> MonetaryRecord:
    """
    Build a job order or invoice from form input.

    `number` comes from the sequence assigner. For job orders only
    Cancelled is taken from `status`; everything else is derived. For
    invoices `status` may be Paid or Unpaid.
    """
    kind = RecordKind(kind)
    if kind is RecordKind.JOB_ORDER:
        initial = DerivedStatus.CANCELLED if status == DerivedStatus.CANCELLED else DerivedStatus.PENDING
    else:
        initial = InvoiceStatus(status) if status else InvoiceStatus.UNPAID

    record = MonetaryRecord(
        id=record_id or str(uuid.uuid4()),
        number=number,
        kind=kind,
        client_name=client_name,
        items=list(items),
        paid_amount=to_decimal(paid_amount),
        total_amount=ZERO,
        status=initial,
        start_date=start_date,
        due_date=due_date,
        discount=discount,
        tax=tax,
        **details,
    )
    return finalize_record(record)


def apply_edit(existing: MonetaryRecord, edited: MonetaryRecord) -> MonetaryRecord:
    """
    Merge an edited record over the stored one.

    id, kind and number are fixed after creation; a different number is
    rejected. Item status changes are passed through the audit log.
    """
    if edited.number and edited.number != existing.number:
        raise ImmutableFieldError(
            f"Record number cannot change ({existing.number} -> {edited.number})"
        )

    audit_item_statuses(existing.items, edited.items)

    merged = replace(edited, id=existing.id, kind=existing.kind, number=existing.number)
    if RecordKind(merged.kind) is RecordKind.JOB_ORDER and merged.status != DerivedStatus.CANCELLED:
        # Un-cancelling: let the status be derived again
        merged = replace(merged, status=DerivedStatus.PENDING)
    return finalize_record(merged)


def new_expense(
    description: str,
    category: ExpenseCategory,
    items: List[ExpenseItem],
    date: datetime,
    expense_id: Optional[str] = None,
) -> Expense:
    """Expense with its total taken from the items"""
    return Expense(
        id=expense_id or str(uuid.uuid4()),
        date=date,
        description=description,
        category=ExpenseCategory(category),
        items=list(items),
        total_amount=sum_money(to_decimal(item.amount) for item in items),
    )


def new_salary_payment(
    employee_name: str,
    amount: Decimal,
    payment_date: datetime,
    notes: Optional[str] = None,
    payment_id: Optional[str] = None,
) -> SalaryPayment:
    return SalaryPayment(
        id=payment_id or str(uuid.uuid4()),
        employee_name=employee_name,
        payment_date=payment_date,
        amount=to_decimal(amount),
        notes=notes,
    )
