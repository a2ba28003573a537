"""Prometheus metrics for record volume, balances and report latency"""

from typing import Optional
from prometheus_client import Counter, Histogram
from billing_core.domain.models import RecordFigures

# Record metrics
record_saved_counter = Counter(
    "billing_record_saved_total",
    "Records, expenses and salary payments saved",
    ["kind", "action"],  # job_order | invoice | expense | salary, created | updated | deleted
)

record_status_counter = Counter(
    "billing_record_status_total",
    "Derived status of saved records",
    ["status"],
)

overpayment_counter = Counter(
    "billing_overpayment_total",
    "Saved records whose paid amount exceeds the total",
)

# Report metrics
report_duration_histogram = Histogram(
    "billing_report_duration_seconds",
    "Time to build a report from the stored snapshot",
    ["bucket"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_saved(kind: str, action: str, figures: Optional[RecordFigures] = None) -> None:
    """Count a saved record and, for creates/updates, its status and overpayment"""
    record_saved_counter.labels(kind=kind, action=action).inc()

    if figures is None:
        return

    record_status_counter.labels(status=figures.status.value).inc()
    if figures.balance.overpaid:
        overpayment_counter.inc()
