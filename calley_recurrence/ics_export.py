"""iCalendar (RFC 5545) export of a single calendar item, including its recurrence."""

import logging
import re
from typing import Optional

from icalendar import Calendar, Event, vRecur

from .config import ExpansionConfig
from .models import RecurrableItem
from .rrule_parser import parse_rrule

logger = logging.getLogger(__name__)

_HTML_TAG = re.compile(r"<[^>]+>")


def _strip_html(text: str) -> str:
    return _HTML_TAG.sub("", text).strip()


def build_vevent(item: RecurrableItem, uid_domain: str) -> Event:
    """Build the VEVENT component for ``item``.

    Timed items use UTC DATE-TIME values; all-day items use DATE values. The RRULE
    is normalized through the rule parser and left out if it cannot be parsed.
    """
    event = Event()
    event.add("uid", f"{item.id}@{uid_domain}")

    if item.is_all_day:
        event.add("dtstart", item.start_at.date())
        event.add("dtend", item.end_at.date())
    else:
        event.add("dtstart", item.start_at)
        event.add("dtend", item.end_at)

    event.add("dtstamp", item.updated_at)
    event.add("created", item.created_at)
    event.add("last-modified", item.updated_at)
    event.add("summary", item.title)

    if item.description:
        event.add("description", _strip_html(item.description))
    if item.location:
        event.add("location", item.location)

    if item.rrule:
        rule = parse_rrule(item.rrule)
        if rule:
            event.add("rrule", vRecur.from_ical(rule.to_rrule_string()))
        else:
            logger.warning("Omitting unparsable RRULE from export of %s: %s", item.id, rule.reason)

    if item.ex_dates:
        event.add("exdate", sorted(item.ex_dates))

    event.add("status", "CONFIRMED")
    return event


def export_item_ics(item: RecurrableItem, config: Optional[ExpansionConfig] = None) -> str:
    """Render ``item`` as a standalone VCALENDAR document.

    Args:
        item: Calendar item (series parents keep their RRULE and EXDATEs)
        config: Supplies PRODID and the UID domain

    Returns:
        CRLF-delimited, line-folded iCalendar text
    """
    config = config or ExpansionConfig()

    calendar = Calendar()
    calendar.add("prodid", config.ics_prodid)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")
    calendar.add("method", "PUBLISH")
    calendar.add_component(build_vevent(item, config.uid_domain))

    return calendar.to_ical().decode("utf-8")
