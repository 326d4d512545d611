# careerlog/timeline.py
from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1951, 1, 1, tzinfo=timezone.utc)


def ut_to_date(ut: float) -> datetime:
    """Convert simulated universal time (seconds since the epoch) to a UTC datetime."""
    return EPOCH + timedelta(seconds=ut)


def date_to_ut(dt: datetime) -> float:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH).total_seconds()


def add_months(dt: datetime, months: int) -> datetime:
    """
    Calendar month arithmetic; the day is clamped to the length of the
    target month (Jan 31 + 1 month -> Feb 28/29).
    """
    index = dt.year * 12 + (dt.month - 1) + int(months)
    year, month = divmod(index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def period_end(start_ut: float, months: int) -> float:
    return date_to_ut(add_months(ut_to_date(start_ut), months))


def iso_date(ut: float) -> str:
    """Round-trip ISO-8601 form with seven fractional digits and a ``Z`` suffix."""
    dt = ut_to_date(ut)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{dt.microsecond:06d}0Z"


def month_label(ut: float) -> str:
    return f"{ut_to_date(ut):%Y-%m}"
