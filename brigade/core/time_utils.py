"""
Timezone-safe datetime utilities.

Entry timestamps are stored in UTC; calendar-day logic (streaks, monthly
counts, "today's entry") always uses the UTC date of a timestamp.
"""
from datetime import datetime, date, timezone
from typing import Union


def utc_now() -> datetime:
    """Return the current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return the current UTC calendar date."""
    return utc_now().date()


def ensure_utc(dt: datetime) -> datetime:
    """
    Convert any datetime to UTC.

    Naive datetimes are assumed to already be UTC.

    Example:
        >>> ensure_utc(datetime(2024, 1, 1, 12, 0)).tzinfo
        datetime.timezone.utc
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO 8601 string (``Z`` suffix accepted) to a UTC datetime.

    Example:
        >>> parse_iso_datetime("2024-01-01T12:00:00Z").hour
        12
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value.replace('Z', '+00:00')))


def calendar_date(value: Union[str, datetime, date]) -> date:
    """
    Truncate a timestamp to its UTC calendar date.

    Plain dates are returned unchanged.

    Example:
        >>> calendar_date("2024-03-01T23:30:00-05:00")
        datetime.date(2024, 3, 2)
    """
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, date):
        return value
    return parse_iso_datetime(value).date()
