"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from billing_core.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_record_saved(
    request_id: str,
    owner_id: str,
    kind: str,
    number: str,
    action: str,
    total_amount: str,
    status: str,
) -> None:
    """Log structured outcome of a create/update for audit"""
    logging.info(
        "Record saved",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "step": "record_saved",
            "kind": kind,
            "number": number,
            "action": action,
            "total_amount": total_amount,
            "status": status,
        },
    )


def log_report_built(
    request_id: str,
    owner_id: str,
    bucket: str,
    record_count: int,
    expense_count: int,
    duration_ms: float,
) -> None:
    """Log report size and build time"""
    logging.info(
        "Report built",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "step": "report_built",
            "bucket": bucket,
            "record_count": record_count,
            "expense_count": expense_count,
            "duration_ms": duration_ms,
        },
    )


def log_overpayment(
    request_id: str,
    owner_id: str,
    kind: str,
    number: str,
    total_amount: str,
    paid_amount: str,
) -> None:
    """Log a saved record whose paid amount exceeds its total (kept, not rejected)"""
    logging.warning(
        "Paid amount exceeds total",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "step": "record_saved",
            "warning": "inconsistent_state",
            "kind": kind,
            "number": number,
            "total_amount": total_amount,
            "paid_amount": paid_amount,
        },
    )
