"""/v1/invoices - create, edit, list and delete invoices"""

import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from billing_core.api.v1.common import commit_record
from billing_core.api.v1.schemas import InvoiceRequest, InvoiceUpdateRequest, RecordResponse
from billing_core.api.dependencies import get_calendar, get_now, get_owner_id, get_request_id
from billing_core.config import settings
from billing_core.infrastructure.database.session import get_db
from billing_core.infrastructure.database.repositories import BillingRepository
from billing_core.infrastructure.observability.metrics import record_saved
from billing_core.domain.exceptions import (
    ImmutableFieldError,
    InvalidSortFieldError,
    RecordNotFoundError,
    SequenceExhaustedError,
)
from billing_core.domain.models import Bucket, MonetaryRecord, RecordKind, SortDirection, SortSpec
from billing_core.domain.periods import CalendarConfig
from billing_core.domain.records import apply_edit, new_record
from billing_core.domain.reports import filter_records, sort_records
from billing_core.domain.sequence import assign_next_number

router = APIRouter()


def _record_from_request(body: InvoiceRequest, number: str, record_id: Optional[str] = None) -> MonetaryRecord:
    return new_record(
        kind=RecordKind.INVOICE,
        number=number,
        client_name=body.client_name,
        items=[item.to_domain() for item in body.items],
        start_date=body.date,
        due_date=body.due_date,
        paid_amount=body.paid_amount,
        discount=body.discount.to_domain() if body.discount else None,
        tax=body.tax.to_domain() if body.tax else None,
        status=body.status,
        record_id=record_id,
        notes=body.notes,
        address=body.address,
        tin_number=body.tin_number,
        terms_and_conditions=body.terms_and_conditions,
        payment_details=body.payment_details,
        payment_method=body.payment_method,
        payment_reference=body.payment_reference,
        cheque_bank_name=body.cheque_bank_name,
        cheque_number=body.cheque_number,
        cheque_date=body.cheque_date,
    )


@router.post("/invoices", response_model=RecordResponse, status_code=201)
def create_invoice(
    body: InvoiceRequest,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    now: datetime = Depends(get_now),
):
    """
    Create an invoice.

    Flow:
    1. Assign the next INV-YYYYMMDD-NNNN number for today
    2. Apply discount then tax to the subtotal
    3. Persist and return the settled record
    """
    request_id = get_request_id(request)
    repo = BillingRepository(db, owner_id)

    try:
        existing_numbers = repo.record_numbers(RecordKind.INVOICE)
        number = assign_next_number(settings.invoice_prefix, existing_numbers, now.date())

        record = _record_from_request(body, number)
        repo.create_record(record)
        return commit_record(db, record, "created", request_id, owner_id)

    except SequenceExhaustedError as e:
        db.rollback()
        logging.warning(f"Sequence exhausted: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/invoices", response_model=List[RecordResponse])
def list_invoices(
    bucket: Bucket = Query(Bucket.OVERALL),
    q: Optional[str] = Query(None, description="Search client name or invoice number"),
    sort: str = Query("start_date"),
    direction: SortDirection = Query(SortDirection.DESCENDING),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    calendar: CalendarConfig = Depends(get_calendar),
    now: datetime = Depends(get_now),
):
    repo = BillingRepository(db, owner_id)
    records = filter_records(repo.list_records(RecordKind.INVOICE), bucket, now, calendar, q)

    try:
        records = sort_records(records, SortSpec(field=sort, direction=direction), calendar)
    except InvalidSortFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [RecordResponse.from_domain(record) for record in records]


@router.get("/invoices/{record_id}", response_model=RecordResponse)
def get_invoice(
    record_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    repo = BillingRepository(db, owner_id)
    try:
        return RecordResponse.from_domain(repo.get_record(RecordKind.INVOICE, record_id))
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")


@router.put("/invoices/{record_id}", response_model=RecordResponse)
def update_invoice(
    record_id: str,
    body: InvoiceUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    request_id = get_request_id(request)
    repo = BillingRepository(db, owner_id)

    try:
        existing = repo.get_record(RecordKind.INVOICE, record_id)
        edited = _record_from_request(body, body.invoice_number or existing.number, record_id)
        record = apply_edit(existing, edited)
        repo.update_record(record)
        return commit_record(db, record, "updated", request_id, owner_id)

    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")

    except ImmutableFieldError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/invoices/{record_id}", status_code=204)
def delete_invoice(
    record_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    repo = BillingRepository(db, owner_id)
    try:
        repo.delete_record(RecordKind.INVOICE, record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")

    db.commit()
    record_saved(RecordKind.INVOICE.value, "deleted")
    return Response(status_code=204)
