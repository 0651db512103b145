"""Instant parsing and formatting helpers.

All instants handled by the engine are absolute UTC timestamps. Naive values are
interpreted as UTC, aware values are converted.
"""

from datetime import UTC, datetime
from typing import Union

from dateutil import parser as dateutil_parser

InstantLike = Union[datetime, str]


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as a timezone-aware UTC datetime.

    Args:
        dt: Naive (assumed UTC) or aware datetime

    Returns:
        Aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_instant(value: InstantLike) -> datetime:
    """Parse an ISO-8601 instant string (or pass through a datetime) as UTC.

    Args:
        value: ISO-8601 string such as ``2026-03-15T10:00:00.000Z`` or a datetime

    Returns:
        Aware datetime in UTC

    Raises:
        ValueError: If the string is not a valid ISO-8601 instant
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(dateutil_parser.isoparse(value.strip()))


def format_instant(dt: datetime) -> str:
    """Format an instant the way the wire format expects (``...T10:00:00.000Z``)."""
    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_ical_utc(dt: datetime) -> str:
    """Format an instant as an iCalendar UTC date-time (``20260315T100000Z``)."""
    return ensure_utc(dt).strftime("%Y%m%dT%H%M%SZ")
