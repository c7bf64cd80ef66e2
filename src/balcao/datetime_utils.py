"""
Datetime utilities.

Timestamps are persisted as naive UTC values; conversion to the store's local
timezone only happens when rendering.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the stored columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(value: date) -> datetime:
    return datetime.combine(value, time.min)


def end_of_day_exclusive(value: date) -> datetime:
    """Midnight of the following day, for `< end` range filters."""
    return datetime.combine(value + timedelta(days=1), time.min)


def to_local(value: datetime, timezone_name: str) -> datetime:
    """Convert a stored (naive UTC or aware) datetime to the given timezone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(timezone_name))


def format_br_datetime(value: datetime, timezone_name: str = "UTC") -> str:
    """dd/MM/yyyy HH:mm in the given timezone."""
    return to_local(value, timezone_name).strftime("%d/%m/%Y %H:%M")


def format_br_date(value: datetime, timezone_name: str = "UTC") -> str:
    return to_local(value, timezone_name).strftime("%d/%m/%Y")
