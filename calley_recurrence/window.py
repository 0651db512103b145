"""Generation window, duration clamping and the final overlap test."""

from datetime import datetime, timedelta
from typing import NamedTuple

from .datetime_utils import format_instant
from .models import RecurrableItem
from .protocols import WarningLogger

NEGATIVE_DURATION_MESSAGE = "Recurring event has endAt before startAt, clamping duration to 0"


class ExpansionWindow(NamedTuple):
    """Safe duration plus the widened window occurrences are generated in."""

    duration: timedelta
    gen_start: datetime
    gen_end: datetime


def resolve_window(
    item: RecurrableItem,
    query_start: datetime,
    query_end: datetime,
    logger: WarningLogger,
) -> ExpansionWindow:
    """Compute the item duration and the generation window for a query.

    The window starts ``duration`` before the query so occurrences that begin
    earlier but run into the query range are still generated. A negative stored
    duration is clamped to zero (with one warning) before widening; widening by a
    negative amount would shift the window forward and drop valid occurrences.
    """
    duration = item.raw_duration
    if duration < timedelta(0):
        logger.warn(
            {
                "itemId": item.id,
                "startAt": format_instant(item.start_at),
                "endAt": format_instant(item.end_at),
            },
            NEGATIVE_DURATION_MESSAGE,
        )
        duration = timedelta(0)
    return ExpansionWindow(duration=duration, gen_start=query_start - duration, gen_end=query_end)


def overlaps(start: datetime, end: datetime, query_start: datetime, query_end: datetime) -> bool:
    """Half-open overlap: an instance ending exactly at ``query_start`` does not overlap."""
    return start < query_end and end > query_start
