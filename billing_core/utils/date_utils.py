"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import List, Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def parse_timestamp(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse a stored date into a datetime.

    Accepts ISO 8601 strings (including a trailing 'Z' as written by
    JavaScript's toISOString), date and datetime objects. Empty values give None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_local(ts: datetime, tz: tzinfo) -> datetime:
    """Naive timestamps are taken as local wall time; aware ones are converted"""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=tz)
    return ts.astimezone(tz)


def start_of_day(ts: datetime) -> datetime:
    return ts.replace(hour=0, minute=0, second=0, microsecond=0)


def timestamp_or_epoch(value: Union[str, date, datetime, None], tz: tzinfo = timezone.utc) -> float:
    """
    Sort key for optional dates: absent dates sort as the Unix epoch.

    Naive values are read as wall time in `tz`, as the report buckets read them.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return EPOCH.timestamp()
    return to_local(parsed, tz).timestamp()
