"""Occurrence generation for parsed recurrence rules.

The default generator maps a ``RecurrenceRule`` onto ``dateutil.rrule`` and walks
it lazily. dateutil already gives the calendar policies we want:

- monthly rules by day-of-month skip months without that day (no clamping)
- yearly rules anchored on Feb 29 only fire in leap years
- weekly rules with BYDAY emit every listed weekday of each active week
  (weeks start on WKST, Monday by default)
"""

from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Optional

from dateutil import rrule as du_rrule

from .config import DEFAULT_PREVIEW_COUNT
from .datetime_utils import ensure_utc
from .models import Frequency, RecurrenceRule
from .protocols import OccurrenceGenerator


_FREQUENCIES = {
    Frequency.DAILY: du_rrule.DAILY,
    Frequency.WEEKLY: du_rrule.WEEKLY,
    Frequency.MONTHLY: du_rrule.MONTHLY,
    Frequency.YEARLY: du_rrule.YEARLY,
}

# Indexed by Weekday.number (Monday is 0)
_WEEKDAYS = (
    du_rrule.MO,
    du_rrule.TU,
    du_rrule.WE,
    du_rrule.TH,
    du_rrule.FR,
    du_rrule.SA,
    du_rrule.SU,
)

_END_OF_TIME = datetime.max.replace(tzinfo=UTC)


def build_dateutil_rule(rule: RecurrenceRule, anchor: datetime) -> du_rrule.rrule:
    """Build a ``dateutil.rrule.rrule`` seeded at ``anchor``.

    Args:
        rule: Parsed recurrence rule
        anchor: Series start; its time-of-day is kept for every occurrence

    Returns:
        dateutil rrule producing aware UTC datetimes
    """
    kwargs: dict = {
        "dtstart": ensure_utc(anchor),
        "interval": rule.interval,
        "wkst": _WEEKDAYS[rule.week_start.number],
    }
    if rule.by_month_weekday_ordinal is not None:
        n, weekday = rule.by_month_weekday_ordinal
        kwargs["byweekday"] = _WEEKDAYS[weekday.number](n)
    elif rule.by_weekday:
        kwargs["byweekday"] = [_WEEKDAYS[day.number] for day in sorted(rule.by_weekday, key=lambda d: d.number)]
    if rule.by_month_day is not None:
        kwargs["bymonthday"] = rule.by_month_day
    if rule.count is not None:
        kwargs["count"] = rule.count
    if rule.until is not None:
        kwargs["until"] = ensure_utc(rule.until)
    return du_rrule.rrule(_FREQUENCIES[rule.frequency], **kwargs)


class DateutilOccurrenceGenerator:
    """Occurrence generator backed by ``dateutil.rrule``.

    Stateless; every call builds a fresh rrule so the same instance can be shared
    between concurrent expansions.
    """

    def generate(
        self,
        rule: RecurrenceRule,
        anchor: datetime,
        window_start: datetime,
        window_end: datetime,
        hard_cap: int,
    ) -> Iterator[datetime]:
        """Yield ascending occurrence starts inside ``[window_start, window_end]``.

        Stops, in order of precedence, when COUNT is exhausted, when UNTIL is
        passed, when a candidate lies beyond ``window_end`` or once ``hard_cap``
        instants have been yielded. COUNT is counted from the anchor, so
        occurrences before the window still use up the count.
        """
        if hard_cap <= 0:
            return
        window_start = ensure_utc(window_start)
        window_end = ensure_utc(window_end)
        if window_end < window_start:
            return

        emitted = 0
        for occurrence in build_dateutil_rule(rule, anchor).xafter(window_start, inc=True):
            occurrence = ensure_utc(occurrence)
            if occurrence > window_end:
                break
            yield occurrence
            emitted += 1
            if emitted >= hard_cap:
                break


def preview_occurrences(
    rule: RecurrenceRule,
    anchor: datetime,
    limit: int = DEFAULT_PREVIEW_COUNT,
    generator: Optional[OccurrenceGenerator] = None,
) -> list[datetime]:
    """Return the first ``limit`` occurrences of a rule, starting at the anchor.

    Used to show a "next occurrences" preview while a rule is being authored.
    """
    generator = generator or DateutilOccurrenceGenerator()
    return list(generator.generate(rule, anchor, anchor, _END_OF_TIME, limit))
