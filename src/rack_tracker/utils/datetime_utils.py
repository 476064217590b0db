"""Datetime utilities for timezone-aware UTC timestamps.

Persisted records carry timestamps as ISO-8601 strings, so this module also
provides the conversions between those strings and aware datetimes.

Usage:
    from rack_tracker.utils.datetime_utils import utc_now, to_iso, parse_timestamp

    stamp = to_iso(utc_now())
    when = parse_timestamp(stamp)
"""

from datetime import datetime, timezone
from typing import Any, Optional, Tuple

# Sort key for records whose timestamp cannot be parsed
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_iso(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with millisecond precision.

    Example:
        >>> to_iso(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))
        '2025-03-01T12:00:00.000Z'
    """
    value = ensure_aware(value).astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a persisted timestamp into an aware datetime.

    Accepts datetimes and ISO-8601 strings (with or without a trailing "Z").

    Args:
        value: Raw timestamp from a record

    Returns:
        Aware datetime, or None if the value is missing or malformed
    """
    if isinstance(value, datetime):
        return ensure_aware(value)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_aware(datetime.fromisoformat(text))
    except ValueError:
        return None


def month_window(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    Get the half-open UTC window [start, end) covering a calendar month.

    Args:
        year: Four digit year
        month: Month number 1-12

    Returns:
        Tuple of (first instant of the month, first instant of the next month)

    Raises:
        ValueError: If month is outside 1-12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")

    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def current_month_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Window for the month containing `now` (defaults to the current UTC time)."""
    now = ensure_aware(now or utc_now()).astimezone(timezone.utc)
    return month_window(now.year, now.month)
