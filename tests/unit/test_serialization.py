"""Unit tests for the persisted document form"""

from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo
from billing_core.domain.models import (
    Adjustment,
    AdjustmentType,
    DerivedStatus,
    ExpenseCategory,
    ExpenseItem,
    InvoiceStatus,
    LineItem,
    PaymentStatus,
    RecordKind,
)
from billing_core.domain.records import new_expense, new_record, new_salary_payment
from billing_core.domain.serialization import (
    expense_from_document,
    expense_to_document,
    record_from_document,
    record_to_document,
    salary_from_document,
    salary_to_document,
)

MANILA = ZoneInfo("Asia/Manila")


def test_job_order_round_trip(make_job_order):
    record = make_job_order(
        items=[
            ("Tarpaulin", "2", "450.50", PaymentStatus.PAID),
            ("Layout", "1", "300", PaymentStatus.CHEQUE),
        ],
        paid_amount="901",
        discount=Adjustment(value=Decimal("5"), type=AdjustmentType.PERCENT),
        cheque_bank_name="BPI",
        cheque_number="000123",
        cheque_date=datetime(2024, 1, 20, tzinfo=MANILA),
    )

    restored = record_from_document(record_to_document(record))

    assert restored.total_amount == record.total_amount
    assert restored.items == record.items
    assert restored.status == record.status == DerivedStatus.DOWNPAYMENT
    assert restored == record


def test_job_order_document_layout(make_job_order):
    document = record_to_document(make_job_order(paid_amount="100"))

    assert document["jobOrderNumber"].startswith("JO-")
    assert document["totalAmount"] == "900.00"
    assert document["paidAmount"] == "100"
    assert document["status"] == "Downpayment"
    assert document["items"][0]["amount"] == "450"
    assert document["discount"] is None
    assert document["notes"] is None


def test_invoice_round_trip():
    record = new_record(
        kind=RecordKind.INVOICE,
        number="INV-20240110-0001",
        client_name="Bayside Cafe",
        items=[LineItem(description="Menu boards", quantity=Decimal("2"), unit_amount=Decimal("500"))],
        start_date=datetime(2024, 1, 10, 9, 0, tzinfo=MANILA),
        tax=Adjustment(value=Decimal("12"), type=AdjustmentType.PERCENT),
        address="12 Rizal St",
        tin_number="123-456-789",
    )

    document = record_to_document(record)
    restored = record_from_document(document)

    assert document["invoiceNumber"] == "INV-20240110-0001"
    assert document["date"] == "2024-01-10T09:00:00+08:00"
    assert restored.total_amount == Decimal("1120")
    assert restored.status == InvoiceStatus.UNPAID
    assert restored == record


def test_invoice_printed_text_fields():
    record = new_record(
        kind=RecordKind.INVOICE,
        number="INV-20240110-0002",
        client_name="Bayside Cafe",
        items=[LineItem(description="Menu boards", quantity=Decimal("1"), unit_amount=Decimal("500"))],
        start_date=datetime(2024, 1, 10, 9, 0, tzinfo=MANILA),
        terms_and_conditions="Payment due within 30 days.",
        payment_details="GCash 0917 555 0101",
    )

    document = record_to_document(record)
    restored = record_from_document(document)

    assert document["termsAndConditions"] == "Payment due within 30 days."
    assert document["paymentDetails"] == "GCash 0917 555 0101"
    assert restored.terms_and_conditions == "Payment due within 30 days."
    assert restored.payment_details == "GCash 0917 555 0101"
    assert restored == record


def test_reads_legacy_numeric_document():
    document = {
        "id": "jo_1",
        "jobOrderNumber": "JO-20240105-0001",
        "clientName": "Acme Printing",
        "items": [{"id": "i1", "description": "Flyers", "quantity": 500, "amount": 2.5, "status": "Unpaid"}],
        "paidAmount": 250.25,
        "totalAmount": 1250,
        "status": "Downpayment",
        "startDate": "2024-01-05T02:00:00.000Z",
    }

    record = record_from_document(document, RecordKind.JOB_ORDER)

    assert record.kind is RecordKind.JOB_ORDER
    assert record.paid_amount == Decimal("250.25")
    assert record.items[0].unit_amount == Decimal("2.5")
    assert record.start_date == datetime(2024, 1, 5, 10, 0, tzinfo=MANILA)
    assert record.due_date is None
    assert record.discount is None


def test_expense_round_trip():
    expense = new_expense(
        description="Ink refill",
        category=ExpenseCategory.GENERAL,
        items=[ExpenseItem(description="Cyan", amount=Decimal("300.75"))],
        date=datetime(2024, 1, 10, 8, 0, tzinfo=MANILA),
    )

    assert expense_from_document(expense_to_document(expense)) == expense


def test_salary_round_trip():
    payment = new_salary_payment("Rosa", Decimal("3500"), datetime(2024, 1, 5, tzinfo=MANILA), notes="Half month")

    assert salary_from_document(salary_to_document(payment)) == payment
