"""/v1/job-orders - create, edit, list and delete job orders"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from billing_core.api.v1.common import commit_record
from billing_core.api.v1.schemas import JobOrderRequest, JobOrderUpdateRequest, MarkAllRequest, RecordResponse
from billing_core.api.dependencies import get_calendar, get_now, get_owner_id, get_request_id
from billing_core.config import settings
from billing_core.infrastructure.database.session import get_db
from billing_core.infrastructure.database.repositories import BillingRepository
from billing_core.infrastructure.observability.metrics import record_saved
from billing_core.domain.balance import mark_all_items
from billing_core.domain.exceptions import (
    ImmutableFieldError,
    InvalidSortFieldError,
    RecordNotFoundError,
    SequenceExhaustedError,
)
from billing_core.domain.models import Bucket, DerivedStatus, MonetaryRecord, RecordKind, SortDirection, SortSpec
from billing_core.domain.periods import CalendarConfig
from billing_core.domain.records import apply_edit, finalize_record, new_record
from billing_core.domain.reports import filter_records, sort_records
from billing_core.domain.sequence import assign_next_number

router = APIRouter()


def _record_from_request(body: JobOrderRequest, number: str, record_id: Optional[str] = None) -> MonetaryRecord:
    return new_record(
        kind=RecordKind.JOB_ORDER,
        number=number,
        client_name=body.client_name,
        items=[item.to_domain() for item in body.items],
        start_date=body.start_date,
        due_date=body.due_date,
        paid_amount=body.paid_amount,
        discount=body.discount.to_domain() if body.discount else None,
        status=DerivedStatus.CANCELLED if body.cancelled else None,
        record_id=record_id,
        notes=body.notes,
        contact_method=body.contact_method,
        contact_detail=body.contact_detail,
        payment_method=body.payment_method,
        payment_reference=body.payment_reference,
        cheque_bank_name=body.cheque_bank_name,
        cheque_number=body.cheque_number,
        cheque_date=body.cheque_date,
    )


@router.post("/job-orders", response_model=RecordResponse, status_code=201)
def create_job_order(
    body: JobOrderRequest,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    now: datetime = Depends(get_now),
):
    """
    Create a job order.

    Flow:
    1. Assign the next JO-YYYYMMDD-NNNN number for today
    2. Compute total and derived status from the items
    3. Persist and return the settled record
    """
    request_id = get_request_id(request)
    repo = BillingRepository(db, owner_id)

    try:
        existing_numbers = repo.record_numbers(RecordKind.JOB_ORDER)
        number = assign_next_number(settings.job_order_prefix, existing_numbers, now.date())

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


@router.get("/job-orders", response_model=List[RecordResponse])
def list_job_orders(
    bucket: Bucket = Query(Bucket.OVERALL),
    q: Optional[str] = Query(None, description="Search client name or JO number"),
    sort: str = Query("start_date"),
    direction: SortDirection = Query(SortDirection.DESCENDING),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    calendar: CalendarConfig = Depends(get_calendar),
    now: datetime = Depends(get_now),
):
    """Job orders started in the bucket, filtered and sorted for the table view"""
    repo = BillingRepository(db, owner_id)
    records = filter_records(repo.list_records(RecordKind.JOB_ORDER), bucket, now, calendar, q)

    try:
        records = sort_records(records, SortSpec(field=sort, direction=direction), calendar)
    except InvalidSortFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [RecordResponse.from_domain(record) for record in records]


@router.get("/job-orders/{record_id}", response_model=RecordResponse)
def get_job_order(
    record_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    repo = BillingRepository(db, owner_id)
    try:
        return RecordResponse.from_domain(repo.get_record(RecordKind.JOB_ORDER, record_id))
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Job order not found")


@router.put("/job-orders/{record_id}", response_model=RecordResponse)
def update_job_order(
    record_id: str,
    body: JobOrderUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Edit a job order; the number stays as assigned at creation"""
    request_id = get_request_id(request)
    repo = BillingRepository(db, owner_id)

    try:
        existing = repo.get_record(RecordKind.JOB_ORDER, record_id)
        edited = _record_from_request(body, body.job_order_number or existing.number, record_id)
        record = apply_edit(existing, edited)
        repo.update_record(record)
        return commit_record(db, record, "updated", request_id, owner_id)

    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Job order not found")

    except ImmutableFieldError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/job-orders/{record_id}/mark-all", response_model=RecordResponse)
def mark_all_job_order_items(
    record_id: str,
    body: MarkAllRequest,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Set every item to one payment status; marking all Paid records the full total as paid"""
    request_id = get_request_id(request)
    repo = BillingRepository(db, owner_id)

    try:
        existing = repo.get_record(RecordKind.JOB_ORDER, record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Job order not found")

    items, paid_amount = mark_all_items(existing.items, body.status, existing.discount, existing.tax)
    record = replace(existing, items=items)
    if paid_amount is not None:
        record = replace(record, paid_amount=paid_amount)
    record = finalize_record(record)

    try:
        repo.update_record(record)
        return commit_record(db, record, "updated", request_id, owner_id)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/job-orders/{record_id}", status_code=204)
def delete_job_order(
    record_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    repo = BillingRepository(db, owner_id)
    try:
        repo.delete_record(RecordKind.JOB_ORDER, record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Job order not found")

    db.commit()
    record_saved(RecordKind.JOB_ORDER.value, "deleted")
    return Response(status_code=204)
