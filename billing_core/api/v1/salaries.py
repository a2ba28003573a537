"""/v1/salaries - salary payments and the per-bucket total"""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from billing_core.api.v1.schemas import SalaryRequest, SalaryResponse, SalarySummaryResponse
from billing_core.api.dependencies import get_calendar, get_now, get_owner_id, get_request_id
from billing_core.infrastructure.database.session import get_db
from billing_core.infrastructure.database.repositories import BillingRepository
from billing_core.infrastructure.observability.metrics import record_saved
from billing_core.domain.models import Bucket
from billing_core.domain.periods import CalendarConfig
from billing_core.domain.records import new_salary_payment
from billing_core.domain.reports import summarize_salaries

router = APIRouter()


@router.post("/salaries", response_model=SalaryResponse, status_code=201)
def create_salary_payment(
    body: SalaryRequest,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    now: datetime = Depends(get_now),
):
    request_id = get_request_id(request)
    repo = BillingRepository(db, owner_id)

    payment = new_salary_payment(
        employee_name=body.employee_name,
        amount=body.amount,
        payment_date=body.payment_date or now,
        notes=body.notes,
    )
    repo.create_salary(payment)
    db.commit()

    record_saved("salary", "created")
    logging.info(
        "Salary payment recorded",
        extra={"request_id": request_id, "owner_id": owner_id, "amount": str(payment.amount)},
    )
    return SalaryResponse.from_domain(payment)


@router.get("/salaries", response_model=SalarySummaryResponse)
def list_salary_payments(
    bucket: Bucket = Query(Bucket.OVERALL),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    calendar: CalendarConfig = Depends(get_calendar),
    now: datetime = Depends(get_now),
):
    """Payments dated in the bucket, newest first, with their total"""
    repo = BillingRepository(db, owner_id)
    summary = summarize_salaries(repo.list_salaries(), bucket, now, calendar)

    return SalarySummaryResponse(
        bucket=bucket,
        payments=[SalaryResponse.from_domain(payment) for payment in summary.payments],
        total_paid=summary.total_paid,
    )
