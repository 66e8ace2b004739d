"""Date manipulation utilities"""

from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

_ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_between(start: datetime, end: datetime) -> int:
    """Whole days elapsed from start to end, truncated toward zero (negative if end is earlier)"""
    return int((ensure_aware(end) - ensure_aware(start)) / _ONE_DAY)


def add_days(from_date: datetime, days: int) -> datetime:
    return from_date + timedelta(days=days)


def add_months(from_date: datetime, months: int) -> datetime:
    """Calendar month arithmetic (Jan 31 + 1 month = Feb 28/29)"""
    return from_date + relativedelta(months=months)
