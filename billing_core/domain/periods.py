"""Calendar bucketing of timestamped records for reports and charts"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo
from billing_core.domain.models import Bucket
from billing_core.utils.date_utils import generate_date_range, start_of_day, to_local

WEEKDAYS = {name.lower(): index for index, name in enumerate(calendar.day_name)}

PERIOD_BUCKETS = (Bucket.TODAY, Bucket.WEEK, Bucket.MONTH, Bucket.YEAR)


@dataclass(frozen=True)
class CalendarConfig:
    """
    Calendar rules for bucket boundaries.

    week_start uses Python weekday numbering (Monday=0 ... Sunday=6).
    Naive timestamps are read as wall time in `timezone`.
    """

    week_start: int = calendar.SUNDAY
    timezone: str = "UTC"

    @classmethod
    def from_names(cls, week_start: str, timezone: str) -> "CalendarConfig":
        try:
            weekday = WEEKDAYS[week_start.strip().lower()]
        except KeyError as e:
            raise ValueError(f"Unknown week start day: {week_start!r}") from e
        return cls(week_start=weekday, timezone=timezone)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def localize(self, ts: datetime) -> datetime:
        return to_local(ts, self.tz)


def bucket_interval(
    bucket: Bucket,
    now: datetime,
    cal: CalendarConfig,
) -> Optional[Tuple[datetime, datetime]]:
    """
    Half-open [start, end) window for a bucket around `now`.

    OVERALL has no bounds and returns None.
    """
    bucket = Bucket(bucket)
    if bucket is Bucket.OVERALL:
        return None

    day = start_of_day(cal.localize(now))

    if bucket is Bucket.TODAY:
        start, end = day, day + timedelta(days=1)
    elif bucket is Bucket.WEEK:
        offset = (day.weekday() - cal.week_start) % 7
        start = day - timedelta(days=offset)
        end = start + timedelta(days=7)
    elif bucket is Bucket.MONTH:
        start = day.replace(day=1)
        if start.month == 12:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
    else:
        start = day.replace(month=1, day=1)
        end = start.replace(year=start.year + 1)

    return start, end


def in_bucket(ts: Optional[datetime], bucket: Bucket, now: datetime, cal: CalendarConfig) -> bool:
    """Whether `ts` falls inside the bucket around `now`; records without a date only match OVERALL"""
    if Bucket(bucket) is Bucket.OVERALL:
        return True
    if ts is None:
        return False
    start, end = bucket_interval(bucket, now, cal)
    return start <= cal.localize(ts) < end


def bucket_membership(ts: datetime, now: datetime, cal: CalendarConfig) -> Dict[Bucket, bool]:
    return {bucket: in_bucket(ts, bucket, now, cal) for bucket in PERIOD_BUCKETS}


# Sub-buckets for charts


def hour_of_day(ts: datetime, cal: CalendarConfig) -> int:
    return cal.localize(ts).hour


def day_of_week(ts: datetime, cal: CalendarConfig) -> int:
    """0 is the configured first day of the week"""
    return (cal.localize(ts).weekday() - cal.week_start) % 7


def day_of_month(ts: datetime, cal: CalendarConfig) -> int:
    return cal.localize(ts).day


def month_of_year(ts: datetime, cal: CalendarConfig) -> int:
    return cal.localize(ts).month


def sub_bucket_key(ts: datetime, bucket: Bucket, cal: CalendarConfig) -> int:
    """
    Chart slot for a timestamp.

    today -> hour, week -> weekday, month -> day of month,
    year and overall -> month.
    """
    bucket = Bucket(bucket)
    if bucket is Bucket.TODAY:
        return hour_of_day(ts, cal)
    if bucket is Bucket.WEEK:
        return day_of_week(ts, cal)
    if bucket is Bucket.MONTH:
        return day_of_month(ts, cal)
    return month_of_year(ts, cal)


def sub_bucket_slots(bucket: Bucket, now: datetime, cal: CalendarConfig) -> List[Tuple[int, str]]:
    """Every (key, label) slot of a bucket's chart, in display order"""
    bucket = Bucket(bucket)
    if bucket is Bucket.TODAY:
        return [(hour, f"{hour:02d}:00") for hour in range(24)]
    if bucket is Bucket.WEEK:
        return [(i, calendar.day_abbr[(cal.week_start + i) % 7]) for i in range(7)]
    if bucket is Bucket.MONTH:
        start, end = bucket_interval(bucket, now, cal)
        days = generate_date_range(start.date(), (end - timedelta(days=1)).date())
        return [(d.day, str(d.day)) for d in days]
    return [(month, calendar.month_abbr[month]) for month in range(1, 13)]
