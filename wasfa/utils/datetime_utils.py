"""
Common date/time utility functions for consistent date/time handling across the application

Storage: All dates are stored in UTC
Display: Dates are formatted per display language when rendered into documents

Some backends (SQLite in tests) hand back naive datetimes; those are
treated as UTC everywhere through as_utc().
"""

from datetime import date, datetime, timedelta, timezone


def as_utc(dt: datetime) -> datetime:
    """
    Convert dt to tz-aware UTC.
    If dt is naive, we treat it as UTC.

    Args:
        dt: datetime object (naive or timezone-aware)

    Returns:
        datetime object in UTC timezone
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


def start_of_day(dt: datetime) -> datetime:
    return as_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(dt: datetime) -> datetime:
    """
    Start of the week containing dt. Weeks start on Sunday.
    """
    day = start_of_day(dt)
    # Python weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (day.weekday() + 1) % 7
    return day - timedelta(days=days_since_sunday)


def start_of_month(dt: datetime) -> datetime:
    return start_of_day(dt).replace(day=1)


def start_of_previous_month(dt: datetime) -> datetime:
    first = start_of_month(dt)
    return start_of_month(first - timedelta(days=1))


def start_of_year(dt: datetime) -> datetime:
    return start_of_day(dt).replace(month=1, day=1)


def to_date(dt: datetime) -> date:
    return as_utc(dt).date()
