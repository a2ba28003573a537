"""Report aggregation - filtered/sorted record tables and period summaries"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence
from billing_core.domain.models import (
    Bucket,
    Expense,
    MonetaryRecord,
    RecordFigures,
    Report,
    ReportRow,
    ReportSummary,
    SalaryPayment,
    SalarySummary,
    SeriesPoint,
    SortDirection,
    SortSpec,
)
from billing_core.domain.balance import display_status, settle_record, summarize_item_statuses
from billing_core.domain.exceptions import InvalidSortFieldError
from billing_core.domain.money import ZERO, sum_money, to_decimal
from billing_core.domain.periods import CalendarConfig, in_bucket, sub_bucket_key, sub_bucket_slots
from billing_core.utils.date_utils import timestamp_or_epoch

DEFAULT_RECORD_SORT = SortSpec(field="start_date", direction=SortDirection.DESCENDING)
DEFAULT_EXPENSE_SORT = SortSpec(field="date", direction=SortDirection.DESCENDING)

RECORD_NUMERIC_FIELDS = {"total_amount", "paid_amount", "balance"}
RECORD_DATE_FIELDS = {"start_date", "due_date", "cheque_date"}
RECORD_TEXT_FIELDS = {
    "number",
    "client_name",
    "status",
    "kind",
    "notes",
    "payment_method",
    "payment_reference",
    "cheque_bank_name",
    "cheque_number",
    "contact_method",
    "contact_detail",
    "address",
    "tin_number",
}

EXPENSE_NUMERIC_FIELDS = {"total_amount"}
EXPENSE_DATE_FIELDS = {"date"}
EXPENSE_TEXT_FIELDS = {"description", "category"}


def _text_key(value: Any) -> tuple:
    # Case-insensitive first, exact spelling breaks ties
    if value is None:
        return ("", "")
    text = value.value if hasattr(value, "value") else str(value)
    return (text.casefold(), text)


def _stable_sort(rows: Sequence[Any], key: Callable[[Any], Any], direction: SortDirection) -> List[Any]:
    # sorted() keeps equal elements in input order, also with reverse=True
    return sorted(rows, key=key, reverse=SortDirection(direction) is SortDirection.DESCENDING)


# Records


def matches_query(record: MonetaryRecord, query: Optional[str]) -> bool:
    """Case-insensitive substring match on client name or record number"""
    if not query:
        return True
    needle = query.casefold()
    return needle in record.client_name.casefold() or needle in record.number.casefold()


def filter_records(
    records: Sequence[MonetaryRecord],
    bucket: Bucket,
    now: datetime,
    cal: CalendarConfig,
    query: Optional[str] = None,
) -> List[MonetaryRecord]:
    """Records whose start date falls in the bucket and that match the search text"""
    return [
        record
        for record in records
        if in_bucket(record.start_date, bucket, now, cal) and matches_query(record, query)
    ]


def _record_sort_key(spec: SortSpec, cal: CalendarConfig) -> Callable[[MonetaryRecord], Any]:
    name = spec.field
    tz = cal.tz

    if name == "balance":
        return lambda record: settle_record(record).balance.balance
    if name in RECORD_NUMERIC_FIELDS:
        return lambda record: to_decimal(getattr(record, name))
    if name in RECORD_DATE_FIELDS:
        return lambda record: timestamp_or_epoch(getattr(record, name), tz)
    if name == "items":
        return lambda record: _text_key(", ".join(item.description for item in record.items))
    if name in RECORD_TEXT_FIELDS:
        return lambda record: _text_key(getattr(record, name))

    raise InvalidSortFieldError(f"Cannot sort records by {name!r}")


def sort_records(
    records: Sequence[MonetaryRecord],
    spec: SortSpec,
    cal: Optional[CalendarConfig] = None,
) -> List[MonetaryRecord]:
    """
    Stable sort for the record table.

    Amounts compare numerically, dates by timestamp (missing dates count as
    the epoch, naive dates read in the calendar timezone), balance by the
    settled balance, everything else as text.
    """
    return _stable_sort(records, _record_sort_key(spec, cal or CalendarConfig()), spec.direction)


def summarize(
    records: Sequence[MonetaryRecord],
    expenses: Sequence[Expense],
    figures: Optional[Dict[str, RecordFigures]] = None,
) -> ReportSummary:
    """
    Period totals.

    total_unpaid is the sum of settled balances. The discount is already
    part of each record total, so it is reported in total_discount but not
    subtracted a second time. cash_on_hand and net_profit share a formula
    today; they are separate fields so either can change on its own.
    """
    if figures is None:
        figures = {record.id: settle_record(record) for record in records}

    settled = [figures[record.id] for record in records]
    total_sales = sum_money(f.breakdown.total for f in settled)
    total_paid = sum_money(f.balance.paid_amount for f in settled)
    total_discount = sum_money(f.breakdown.discount_amount for f in settled)
    total_unpaid = sum_money(f.balance.balance for f in settled)
    total_expenses = sum_money(to_decimal(expense.total_amount) for expense in expenses)

    return ReportSummary(
        total_sales=total_sales,
        total_paid=total_paid,
        total_discount=total_discount,
        total_unpaid=total_unpaid,
        total_expenses=total_expenses,
        cash_on_hand=total_paid - total_expenses,
        net_profit=total_paid - total_expenses,
        total_customers=len({record.client_name for record in records}),
        record_count=len(records),
    )


# Expenses


def matches_expense_query(expense: Expense, query: Optional[str]) -> bool:
    """Search text against description, category and item descriptions"""
    if not query:
        return True
    needle = query.casefold()
    return (
        needle in expense.description.casefold()
        or needle in expense.category.value.casefold()
        or any(needle in item.description.casefold() for item in expense.items)
    )


def filter_expenses(
    expenses: Sequence[Expense],
    bucket: Bucket,
    now: datetime,
    cal: CalendarConfig,
    query: Optional[str] = None,
) -> List[Expense]:
    return [
        expense
        for expense in expenses
        if in_bucket(expense.date, bucket, now, cal) and matches_expense_query(expense, query)
    ]


def _expense_sort_key(spec: SortSpec, cal: CalendarConfig) -> Callable[[Expense], Any]:
    name = spec.field
    tz = cal.tz

    if name in EXPENSE_NUMERIC_FIELDS:
        return lambda expense: to_decimal(getattr(expense, name))
    if name in EXPENSE_DATE_FIELDS:
        return lambda expense: timestamp_or_epoch(getattr(expense, name), tz)
    if name == "items":
        return lambda expense: _text_key(", ".join(item.description for item in expense.items))
    if name in EXPENSE_TEXT_FIELDS:
        return lambda expense: _text_key(getattr(expense, name))

    raise InvalidSortFieldError(f"Cannot sort expenses by {name!r}")


def sort_expenses(
    expenses: Sequence[Expense],
    spec: SortSpec,
    cal: Optional[CalendarConfig] = None,
) -> List[Expense]:
    return _stable_sort(expenses, _expense_sort_key(spec, cal or CalendarConfig()), spec.direction)


# Full report


def build_report(
    records: Sequence[MonetaryRecord],
    expenses: Sequence[Expense],
    bucket: Bucket,
    now: datetime,
    cal: CalendarConfig,
    query: Optional[str] = None,
    sort: Optional[SortSpec] = None,
    expense_query: Optional[str] = None,
    expense_sort: Optional[SortSpec] = None,
) -> Report:
    """
    Main entry point for dashboard and report views.

    Recomputes everything from the given snapshot on each call; nothing is
    cached between calls, so the same inputs always give the same report.
    """
    bucket = Bucket(bucket)

    selected = sort_records(filter_records(records, bucket, now, cal, query), sort or DEFAULT_RECORD_SORT, cal)
    selected_expenses = sort_expenses(
        filter_expenses(expenses, bucket, now, cal, expense_query),
        expense_sort or DEFAULT_EXPENSE_SORT,
        cal,
    )

    figures = {record.id: settle_record(record) for record in selected}
    rows = [
        ReportRow(
            record=record,
            figures=figures[record.id],
            display_status=display_status(record, figures[record.id].status),
            status_summary=summarize_item_statuses(record.items),
        )
        for record in selected
    ]

    return Report(
        bucket=bucket,
        rows=rows,
        expenses=selected_expenses,
        summary=summarize(selected, selected_expenses, figures),
    )


def summarize_salaries(
    payments: Sequence[SalaryPayment],
    bucket: Bucket,
    now: datetime,
    cal: CalendarConfig,
) -> SalarySummary:
    """Salary payments in the bucket, newest first, with their total"""
    selected = [p for p in payments if in_bucket(p.payment_date, bucket, now, cal)]
    selected = _stable_sort(selected, lambda p: timestamp_or_epoch(p.payment_date, cal.tz), SortDirection.DESCENDING)
    return SalarySummary(payments=selected, total_paid=sum_money(to_decimal(p.amount) for p in selected))


def sales_series(
    records: Sequence[MonetaryRecord],
    expenses: Sequence[Expense],
    bucket: Bucket,
    now: datetime,
    cal: CalendarConfig,
) -> List[SeriesPoint]:
    """
    Chart data for a bucket: one point per hour (today), weekday (week),
    day (month) or month (year, overall). Empty slots are zero.
    """
    slots = sub_bucket_slots(bucket, now, cal)
    sales: Dict[int, Decimal] = {key: ZERO for key, _ in slots}
    paid: Dict[int, Decimal] = {key: ZERO for key, _ in slots}
    spent: Dict[int, Decimal] = {key: ZERO for key, _ in slots}

    for record in filter_records(records, bucket, now, cal):
        key = sub_bucket_key(record.start_date, bucket, cal)
        figures = settle_record(record)
        sales[key] += figures.breakdown.total
        paid[key] += figures.balance.paid_amount

    for expense in filter_expenses(expenses, bucket, now, cal):
        spent[sub_bucket_key(expense.date, bucket, cal)] += to_decimal(expense.total_amount)

    return [
        SeriesPoint(key=key, label=label, sales=sales[key], paid=paid[key], expenses=spent[key])
        for key, label in slots
    ]
