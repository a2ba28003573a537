"""
Persisted document form of records.

Documents use the camelCase layout of the billing app's document store
(jobOrderNumber / invoiceNumber, totalAmount, discountType, ...). Money is
written as decimal strings so values survive the round trip exactly;
numbers are accepted on read since older documents store JSON numbers.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from billing_core.domain.models import (
    Adjustment,
    AdjustmentType,
    DerivedStatus,
    Expense,
    ExpenseCategory,
    ExpenseItem,
    InvoiceStatus,
    LineItem,
    MonetaryRecord,
    PaymentStatus,
    RecordKind,
    SalaryPayment,
)
from billing_core.domain.money import to_decimal
from billing_core.utils.date_utils import parse_timestamp

Document = Dict[str, Any]

NUMBER_KEYS = {
    RecordKind.JOB_ORDER: "jobOrderNumber",
    RecordKind.INVOICE: "invoiceNumber",
}
START_DATE_KEYS = {
    RecordKind.JOB_ORDER: "startDate",
    RecordKind.INVOICE: "date",
}

# Optional free-text fields: attribute name -> document key, written as null when unset
OPTIONAL_TEXT_FIELDS = {
    "notes": "notes",
    "payment_method": "paymentMethod",
    "payment_reference": "paymentReference",
    "cheque_bank_name": "chequeBankName",
    "cheque_number": "chequeNumber",
    "contact_method": "contactMethod",
    "contact_detail": "contactDetail",
    "address": "address",
    "tin_number": "tinNumber",
    "terms_and_conditions": "termsAndConditions",
    "payment_details": "paymentDetails",
}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _adjustment_fields(document: Document, key: str, adjustment: Optional[Adjustment]) -> None:
    # Absent adjustments are written as nulls so a merge-update clears them
    if adjustment is None:
        document[key] = None
        document[f"{key}Type"] = None
        return
    document[key] = str(to_decimal(adjustment.value))
    document[f"{key}Type"] = AdjustmentType(adjustment.type).value


def _read_adjustment(document: Document, key: str) -> Optional[Adjustment]:
    if document.get(key) in (None, ""):
        return None
    return Adjustment(
        value=to_decimal(document[key]),
        type=AdjustmentType(document.get(f"{key}Type") or AdjustmentType.AMOUNT.value),
    )


def line_item_to_document(item: LineItem) -> Document:
    return {
        "id": item.id,
        "description": item.description,
        "quantity": str(to_decimal(item.quantity)),
        "amount": str(to_decimal(item.unit_amount)),
        "status": PaymentStatus(item.status).value,
        "remarks": item.remarks,
    }


def line_item_from_document(document: Document) -> LineItem:
    return LineItem(
        id=document["id"],
        description=document["description"],
        quantity=to_decimal(document["quantity"]),
        unit_amount=to_decimal(document["amount"]),
        status=PaymentStatus(document.get("status") or PaymentStatus.UNPAID.value),
        remarks=document.get("remarks"),
    )


def record_to_document(record: MonetaryRecord) -> Document:
    kind = RecordKind(record.kind)
    document: Document = {
        "id": record.id,
        "kind": kind.value,
        NUMBER_KEYS[kind]: record.number,
        "clientName": record.client_name,
        "items": [line_item_to_document(item) for item in record.items],
        "paidAmount": str(to_decimal(record.paid_amount)),
        "totalAmount": str(to_decimal(record.total_amount)),
        "status": record.status.value,
        START_DATE_KEYS[kind]: _iso(record.start_date),
        "dueDate": _iso(record.due_date),
        "chequeDate": _iso(record.cheque_date),
    }
    _adjustment_fields(document, "discount", record.discount)
    _adjustment_fields(document, "tax", record.tax)

    for attribute, key in OPTIONAL_TEXT_FIELDS.items():
        document[key] = getattr(record, attribute)

    return document


def record_from_document(document: Document, kind: Optional[RecordKind] = None) -> MonetaryRecord:
    """Rebuild a record; `kind` is required for documents written without a 'kind' key"""
    kind = RecordKind(document.get("kind") or kind)
    status_type = DerivedStatus if kind is RecordKind.JOB_ORDER else InvoiceStatus

    return MonetaryRecord(
        id=document["id"],
        number=document[NUMBER_KEYS[kind]],
        kind=kind,
        client_name=document["clientName"],
        items=[line_item_from_document(item) for item in document.get("items", [])],
        paid_amount=to_decimal(document.get("paidAmount")),
        total_amount=to_decimal(document.get("totalAmount")),
        status=status_type(document["status"]),
        start_date=parse_timestamp(document[START_DATE_KEYS[kind]]),
        due_date=parse_timestamp(document.get("dueDate")),
        cheque_date=parse_timestamp(document.get("chequeDate")),
        discount=_read_adjustment(document, "discount"),
        tax=_read_adjustment(document, "tax"),
        **{attribute: document.get(key) for attribute, key in OPTIONAL_TEXT_FIELDS.items()},
    )


def expense_to_document(expense: Expense) -> Document:
    return {
        "id": expense.id,
        "date": _iso(expense.date),
        "description": expense.description,
        "category": ExpenseCategory(expense.category).value,
        "items": [
            {"id": item.id, "description": item.description, "amount": str(to_decimal(item.amount))}
            for item in expense.items
        ],
        "totalAmount": str(to_decimal(expense.total_amount)),
    }


def expense_from_document(document: Document) -> Expense:
    return Expense(
        id=document["id"],
        date=parse_timestamp(document["date"]),
        description=document["description"],
        category=ExpenseCategory(document.get("category") or ExpenseCategory.GENERAL.value),
        items=[
            ExpenseItem(id=item["id"], description=item["description"], amount=to_decimal(item["amount"]))
            for item in document.get("items", [])
        ],
        total_amount=to_decimal(document.get("totalAmount")),
    )


def salary_to_document(payment: SalaryPayment) -> Document:
    return {
        "id": payment.id,
        "employeeName": payment.employee_name,
        "paymentDate": _iso(payment.payment_date),
        "amount": str(to_decimal(payment.amount)),
        "notes": payment.notes,
    }


def salary_from_document(document: Document) -> SalaryPayment:
    return SalaryPayment(
        id=document["id"],
        employee_name=document["employeeName"],
        payment_date=parse_timestamp(document["paymentDate"]),
        amount=to_decimal(document["amount"]),
        notes=document.get("notes"),
    )
