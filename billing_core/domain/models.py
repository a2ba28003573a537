"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union


def _new_id() -> str:
    return str(uuid.uuid4())


class PaymentStatus(str, Enum):
    """Per-item payment state on a job order"""

    UNPAID = "Unpaid"
    PAID = "Paid"
    DOWNPAYMENT = "Downpayment"
    CHEQUE = "Cheque"


class DerivedStatus(str, Enum):
    """Order-level job order status, derived from items and payments"""

    PENDING = "Pending"
    DOWNPAYMENT = "Downpayment"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class InvoiceStatus(str, Enum):
    """Order-level invoice status"""

    UNPAID = "Unpaid"
    PAID = "Paid"


class AdjustmentType(str, Enum):
    AMOUNT = "amount"
    PERCENT = "percent"


class RecordKind(str, Enum):
    JOB_ORDER = "job_order"
    INVOICE = "invoice"


class ExpenseCategory(str, Enum):
    GENERAL = "General"
    CASH_ADVANCE = "Cash Advance"
    SALARY = "Salary"
    FIXED_EXPENSE = "Fixed Expense"


class Bucket(str, Enum):
    """Calendar window used to partition records for reporting"""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    OVERALL = "overall"


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


RecordStatus = Union[DerivedStatus, InvoiceStatus]


@dataclass
class LineItem:
    """Single billable line on a job order or invoice"""

    description: str
    quantity: Decimal
    unit_amount: Decimal
    status: PaymentStatus = PaymentStatus.UNPAID
    remarks: Optional[str] = None
    id: str = field(default_factory=_new_id)


@dataclass
class Adjustment:
    """Discount or tax, either a flat amount or a percentage"""

    value: Decimal
    type: AdjustmentType = AdjustmentType.AMOUNT


@dataclass
class MonetaryRecord:
    """Job order or invoice as persisted"""

    id: str
    number: str
    kind: RecordKind
    client_name: str
    items: List[LineItem]
    paid_amount: Decimal
    total_amount: Decimal
    status: RecordStatus
    start_date: datetime
    due_date: Optional[datetime] = None
    discount: Optional[Adjustment] = None
    tax: Optional[Adjustment] = None
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    cheque_bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    cheque_date: Optional[datetime] = None
    contact_method: Optional[str] = None
    contact_detail: Optional[str] = None
    address: Optional[str] = None
    tin_number: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    payment_details: Optional[str] = None


@dataclass
class ExpenseItem:
    description: str
    amount: Decimal
    id: str = field(default_factory=_new_id)


@dataclass
class Expense:
    """Operational cost, total is the sum of its items"""

    id: str
    date: datetime
    description: str
    category: ExpenseCategory
    items: List[ExpenseItem]
    total_amount: Decimal


@dataclass
class SalaryPayment:
    id: str
    employee_name: str
    payment_date: datetime
    amount: Decimal
    notes: Optional[str] = None


@dataclass
class AmountBreakdown:
    """Output of discount/tax calculation"""

    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass
class PaymentBalance:
    """Remaining amount owed on a record"""

    total: Decimal
    paid_amount: Decimal
    balance: Decimal

    @property
    def overpaid(self) -> bool:
        return self.balance < 0


@dataclass
class RecordFigures:
    """Everything a view needs to show a record's money columns"""

    breakdown: AmountBreakdown
    balance: PaymentBalance
    status: RecordStatus


@dataclass
class SortSpec:
    field: str
    direction: SortDirection = SortDirection.ASCENDING


@dataclass
class ReportSummary:
    """Period totals shown on the dashboard and report views"""

    total_sales: Decimal
    total_paid: Decimal
    total_discount: Decimal
    total_unpaid: Decimal
    total_expenses: Decimal
    cash_on_hand: Decimal
    net_profit: Decimal
    total_customers: int
    record_count: int


@dataclass
class ReportRow:
    record: MonetaryRecord
    figures: RecordFigures
    display_status: str
    status_summary: str


@dataclass
class Report:
    bucket: Bucket
    rows: List[ReportRow]
    expenses: List[Expense]
    summary: ReportSummary


@dataclass
class SalarySummary:
    payments: List[SalaryPayment]
    total_paid: Decimal


@dataclass
class SeriesPoint:
    """One chart bar: totals for a single hour, weekday, day or month"""

    key: int
    label: str
    sales: Decimal
    paid: Decimal
    expenses: Decimal
