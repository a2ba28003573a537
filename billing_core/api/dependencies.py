"""Dependency injection for FastAPI endpoints"""

from datetime import datetime
from fastapi import Depends, Header, Request
from billing_core.config import settings
from billing_core.domain.periods import CalendarConfig


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_owner_id(x_user_id: str = Header(..., min_length=1, description="Owner of the collections")) -> str:
    """Per-user scope for every collection"""
    return x_user_id


def get_calendar() -> CalendarConfig:
    """Calendar rules for report buckets"""
    return CalendarConfig.from_names(settings.week_start, settings.timezone)


def get_now(calendar: CalendarConfig = Depends(get_calendar)) -> datetime:
    """Reference time for buckets and new-record dates"""
    return datetime.now(calendar.tz)
