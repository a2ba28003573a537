"""Helpers shared by the job order and invoice endpoints"""

from sqlalchemy.orm import Session
from billing_core.api.v1.schemas import RecordResponse
from billing_core.domain.balance import settle_record
from billing_core.domain.models import MonetaryRecord
from billing_core.infrastructure.observability.logging import log_overpayment, log_record_saved
from billing_core.infrastructure.observability.metrics import record_saved


def commit_record(db: Session, record: MonetaryRecord, action: str, request_id: str, owner_id: str) -> RecordResponse:
    """Commit the session, record metrics/logs and build the response"""
    db.commit()

    figures = settle_record(record)
    record_saved(record.kind.value, action, figures)
    log_record_saved(
        request_id=request_id,
        owner_id=owner_id,
        kind=record.kind.value,
        number=record.number,
        action=action,
        total_amount=str(figures.breakdown.total),
        status=figures.status.value,
    )
    # Once per save, alongside the overpayment counter
    if figures.balance.overpaid:
        log_overpayment(
            request_id=request_id,
            owner_id=owner_id,
            kind=record.kind.value,
            number=record.number,
            total_amount=str(figures.breakdown.total),
            paid_amount=str(figures.balance.paid_amount),
        )
    return RecordResponse.from_domain(record, figures)
