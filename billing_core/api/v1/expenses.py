"""/v1/expenses - operating expenses"""

import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from billing_core.api.v1.schemas import ExpenseRequest, ExpenseResponse
from billing_core.api.dependencies import get_calendar, get_now, get_owner_id, get_request_id
from billing_core.infrastructure.database.session import get_db
from billing_core.infrastructure.database.repositories import BillingRepository
from billing_core.infrastructure.observability.metrics import record_saved
from billing_core.domain.exceptions import InvalidSortFieldError, RecordNotFoundError
from billing_core.domain.models import Bucket, SortDirection, SortSpec
from billing_core.domain.periods import CalendarConfig
from billing_core.domain.records import new_expense
from billing_core.domain.reports import filter_expenses, sort_expenses

router = APIRouter()


@router.post("/expenses", response_model=ExpenseResponse, status_code=201)
def create_expense(
    body: ExpenseRequest,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    now: datetime = Depends(get_now),
):
    """Record an expense; the total is the sum of its items and the date defaults to now"""
    request_id = get_request_id(request)
    repo = BillingRepository(db, owner_id)

    expense = new_expense(
        description=body.description,
        category=body.category,
        items=[item.to_domain() for item in body.items],
        date=body.date or now,
    )
    repo.create_expense(expense)
    db.commit()

    record_saved("expense", "created")
    logging.info(
        "Expense recorded",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "category": expense.category.value,
            "total_amount": str(expense.total_amount),
        },
    )
    return ExpenseResponse.from_domain(expense)


@router.get("/expenses", response_model=List[ExpenseResponse])
def list_expenses(
    bucket: Bucket = Query(Bucket.OVERALL),
    q: Optional[str] = Query(None, description="Search description, category or item descriptions"),
    sort: str = Query("date"),
    direction: SortDirection = Query(SortDirection.DESCENDING),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
    calendar: CalendarConfig = Depends(get_calendar),
    now: datetime = Depends(get_now),
):
    repo = BillingRepository(db, owner_id)
    expenses = filter_expenses(repo.list_expenses(), bucket, now, calendar, q)

    try:
        expenses = sort_expenses(expenses, SortSpec(field=sort, direction=direction), calendar)
    except InvalidSortFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [ExpenseResponse.from_domain(expense) for expense in expenses]


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: str,
    body: ExpenseRequest,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    repo = BillingRepository(db, owner_id)

    try:
        existing = repo.get_expense(expense_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Expense not found")

    expense = new_expense(
        description=body.description,
        category=body.category,
        items=[item.to_domain() for item in body.items],
        date=body.date or existing.date,
        expense_id=existing.id,
    )
    repo.update_expense(expense)
    db.commit()

    record_saved("expense", "updated")
    return ExpenseResponse.from_domain(expense)


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    repo = BillingRepository(db, owner_id)
    try:
        repo.delete_expense(expense_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Expense not found")

    db.commit()
    record_saved("expense", "deleted")
    return Response(status_code=204)
