"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from billing_core.config import settings
from billing_core.domain.models import (
    Adjustment,
    AdjustmentType,
    Bucket,
    Expense,
    ExpenseCategory,
    ExpenseItem,
    InvoiceStatus,
    LineItem,
    MonetaryRecord,
    PaymentStatus,
    RecordFigures,
    ReportSummary,
    SalaryPayment,
    SeriesPoint,
)
from billing_core.domain.balance import display_status, settle_record, summarize_item_statuses
from billing_core.domain.line_items import line_total
from billing_core.domain.money import format_currency


# Requests


class LineItemSchema(BaseModel):
    """Line item as entered on the job order / invoice form"""

    id: Optional[str] = None
    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., gt=0, description="Must be greater than 0")
    unit_amount: Decimal = Field(..., ge=0)
    status: PaymentStatus = PaymentStatus.UNPAID
    remarks: Optional[str] = None

    def to_domain(self) -> LineItem:
        item = LineItem(
            description=self.description,
            quantity=self.quantity,
            unit_amount=self.unit_amount,
            status=self.status,
            remarks=self.remarks,
        )
        if self.id:
            item.id = self.id
        return item


class AdjustmentSchema(BaseModel):
    value: Decimal = Field(..., ge=0)
    type: AdjustmentType = AdjustmentType.AMOUNT

    def to_domain(self) -> Adjustment:
        return Adjustment(value=self.value, type=self.type)


class PaymentDetails(BaseModel):
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    cheque_bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    cheque_date: Optional[datetime] = None


class JobOrderRequest(PaymentDetails):
    """Request body for POST /v1/job-orders"""

    client_name: str = Field(..., min_length=1)
    contact_method: Optional[str] = None
    contact_detail: Optional[str] = None
    start_date: datetime
    due_date: Optional[datetime] = None
    items: List[LineItemSchema] = Field(..., min_length=1)
    paid_amount: Decimal = Field(Decimal("0"), ge=0)
    discount: Optional[AdjustmentSchema] = None
    notes: Optional[str] = None
    cancelled: bool = False


class JobOrderUpdateRequest(JobOrderRequest):
    """Request body for PUT /v1/job-orders/{id}; the number may be echoed back but not changed"""

    job_order_number: Optional[str] = None


class MarkAllRequest(BaseModel):
    status: PaymentStatus


class InvoiceRequest(PaymentDetails):
    """Request body for POST /v1/invoices"""

    client_name: str = Field(..., min_length=1)
    address: Optional[str] = None
    tin_number: Optional[str] = None
    date: datetime
    due_date: Optional[datetime] = None
    items: List[LineItemSchema] = Field(..., min_length=1)
    paid_amount: Decimal = Field(Decimal("0"), ge=0)
    discount: Optional[AdjustmentSchema] = None
    tax: Optional[AdjustmentSchema] = None
    status: InvoiceStatus = InvoiceStatus.UNPAID
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    payment_details: Optional[str] = Field(None, description="Bank transfer / e-wallet instructions printed on the invoice")


class InvoiceUpdateRequest(InvoiceRequest):
    invoice_number: Optional[str] = None


class ExpenseItemSchema(BaseModel):
    id: Optional[str] = None
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)

    def to_domain(self) -> ExpenseItem:
        item = ExpenseItem(description=self.description, amount=self.amount)
        if self.id:
            item.id = self.id
        return item


class ExpenseRequest(BaseModel):
    """Request body for POST /v1/expenses"""

    description: str = Field(..., min_length=1)
    category: ExpenseCategory = ExpenseCategory.GENERAL
    items: List[ExpenseItemSchema] = Field(..., min_length=1)
    date: Optional[datetime] = None


class SalaryRequest(BaseModel):
    """Request body for POST /v1/salaries"""

    employee_name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None


# Responses


class LineItemResponse(BaseModel):
    id: str
    description: str
    quantity: Decimal
    unit_amount: Decimal
    line_total: Decimal
    status: PaymentStatus
    remarks: Optional[str] = None


class RecordResponse(BaseModel):
    """Job order or invoice with every money figure already settled"""

    id: str
    number: str
    kind: str
    client_name: str
    items: List[LineItemResponse]
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    balance_display: str
    overpaid: bool
    status: str
    display_status: str
    status_summary: str
    start_date: datetime
    due_date: Optional[datetime] = None
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

    @classmethod
    def from_domain(cls, record: MonetaryRecord, figures: Optional[RecordFigures] = None) -> "RecordResponse":
        figures = figures or settle_record(record)
        return cls(
            id=record.id,
            number=record.number,
            kind=record.kind.value,
            client_name=record.client_name,
            items=[
                LineItemResponse(
                    id=item.id,
                    description=item.description,
                    quantity=item.quantity,
                    unit_amount=item.unit_amount,
                    line_total=line_total(item),
                    status=item.status,
                    remarks=item.remarks,
                )
                for item in record.items
            ],
            subtotal=figures.breakdown.subtotal,
            discount_amount=figures.breakdown.discount_amount,
            tax_amount=figures.breakdown.tax_amount,
            total_amount=figures.breakdown.total,
            paid_amount=figures.balance.paid_amount,
            balance=figures.balance.balance,
            balance_display=format_currency(figures.balance.balance, settings.currency_symbol),
            overpaid=figures.balance.overpaid,
            status=figures.status.value,
            display_status=display_status(record, figures.status),
            status_summary=summarize_item_statuses(record.items),
            start_date=record.start_date,
            due_date=record.due_date,
            notes=record.notes,
            payment_method=record.payment_method,
            payment_reference=record.payment_reference,
            cheque_bank_name=record.cheque_bank_name,
            cheque_number=record.cheque_number,
            cheque_date=record.cheque_date,
            contact_method=record.contact_method,
            contact_detail=record.contact_detail,
            address=record.address,
            tin_number=record.tin_number,
            terms_and_conditions=record.terms_and_conditions,
            payment_details=record.payment_details,
        )


class ExpenseItemResponse(BaseModel):
    id: str
    description: str
    amount: Decimal


class ExpenseResponse(BaseModel):
    id: str
    date: datetime
    description: str
    category: ExpenseCategory
    items: List[ExpenseItemResponse]
    total_amount: Decimal

    @classmethod
    def from_domain(cls, expense: Expense) -> "ExpenseResponse":
        return cls(
            id=expense.id,
            date=expense.date,
            description=expense.description,
            category=expense.category,
            items=[
                ExpenseItemResponse(id=item.id, description=item.description, amount=item.amount)
                for item in expense.items
            ],
            total_amount=expense.total_amount,
        )


class SalaryResponse(BaseModel):
    id: str
    employee_name: str
    payment_date: datetime
    amount: Decimal
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, payment: SalaryPayment) -> "SalaryResponse":
        return cls(
            id=payment.id,
            employee_name=payment.employee_name,
            payment_date=payment.payment_date,
            amount=payment.amount,
            notes=payment.notes,
        )


class SalarySummaryResponse(BaseModel):
    bucket: Bucket
    payments: List[SalaryResponse]
    total_paid: Decimal


class ReportSummarySchema(BaseModel):
    total_sales: Decimal
    total_paid: Decimal
    total_discount: Decimal
    total_unpaid: Decimal
    total_expenses: Decimal
    cash_on_hand: Decimal
    net_profit: Decimal
    total_customers: int
    record_count: int

    @classmethod
    def from_domain(cls, summary: ReportSummary) -> "ReportSummarySchema":
        return cls(**vars(summary))


class ReportResponse(BaseModel):
    """Response for GET /v1/reports/summary"""

    bucket: Bucket
    records: List[RecordResponse]
    expenses: List[ExpenseResponse]
    summary: ReportSummarySchema


class SeriesPointSchema(BaseModel):
    key: int
    label: str
    sales: Decimal
    paid: Decimal
    expenses: Decimal

    @classmethod
    def from_domain(cls, point: SeriesPoint) -> "SeriesPointSchema":
        return cls(**vars(point))


class SeriesResponse(BaseModel):
    """Response for GET /v1/reports/sales-series"""

    bucket: Bucket
    points: List[SeriesPointSchema]
