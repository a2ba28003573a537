"""/v1/reports - bucketed summaries and chart series"""

import time
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from billing_core.api.v1.schemas import (
    ExpenseResponse,
    RecordResponse,
    ReportResponse,
    ReportSummarySchema,
    SeriesPointSchema,
    SeriesResponse,
)
from billing_core.api.dependencies import get_calendar, get_now, get_owner_id, get_request_id
from billing_core.infrastructure.database.session import get_db
from billing_core.infrastructure.database.repositories import BillingRepository
from billing_core.infrastructure.observability.logging import log_report_built
from billing_core.infrastructure.observability.metrics import report_duration_histogram
from billing_core.domain.exceptions import InvalidSortFieldError
from billing_core.domain.models import Bucket, RecordKind, SortDirection, SortSpec
from billing_core.domain.periods import CalendarConfig
from billing_core.domain.reports import build_report, sales_series

router = APIRouter()


@router.get("/reports/summary", response_model=ReportResponse)
def get_report_summary(
    request: Request,
    bucket: Bucket = Query(Bucket.TODAY),
    kind: RecordKind = Query(RecordKind.JOB_ORDER, description="Report over job orders or invoices"),
    q: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    direction: SortDirection = Query(SortDirection.DESCENDING),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    calendar: CalendarConfig = Depends(get_calendar),
    now: datetime = Depends(get_now),
):
    """
    Dashboard report for one bucket.

    Flow:
    1. Load the user's records and expenses
    2. Keep those dated in the bucket, filter and sort
    3. Settle every record and total the summary
    """
    request_id = get_request_id(request)
    start_time = time.time()
    repo = BillingRepository(db, owner_id)

    try:
        report = build_report(
            records=repo.list_records(kind),
            expenses=repo.list_expenses(),
            bucket=bucket,
            now=now,
            cal=calendar,
            query=q,
            sort=SortSpec(field=sort, direction=direction) if sort else None,
        )
    except InvalidSortFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))

    duration = time.time() - start_time
    report_duration_histogram.labels(bucket=bucket.value).observe(duration)
    log_report_built(
        request_id=request_id,
        owner_id=owner_id,
        bucket=bucket.value,
        record_count=len(report.rows),
        expense_count=len(report.expenses),
        duration_ms=round(duration * 1000, 2),
    )

    return ReportResponse(
        bucket=report.bucket,
        records=[RecordResponse.from_domain(row.record, row.figures) for row in report.rows],
        expenses=[ExpenseResponse.from_domain(expense) for expense in report.expenses],
        summary=ReportSummarySchema.from_domain(report.summary),
    )


@router.get("/reports/sales-series", response_model=SeriesResponse)
def get_sales_series(
    bucket: Bucket = Query(Bucket.TODAY),
    kind: RecordKind = Query(RecordKind.JOB_ORDER),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    calendar: CalendarConfig = Depends(get_calendar),
    now: datetime = Depends(get_now),
):
    """Sales, payments and expenses per hour / weekday / day / month of the bucket"""
    repo = BillingRepository(db, owner_id)
    points = sales_series(repo.list_records(kind), repo.list_expenses(), bucket, now, calendar)
    return SeriesResponse(bucket=bucket, points=[SeriesPointSchema.from_domain(point) for point in points])
