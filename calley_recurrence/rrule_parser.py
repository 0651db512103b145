"""RRULE parsing and validation.

Two entry points with different failure behavior:

- ``validate_rrule`` raises ``InvalidRRuleError`` and is meant for rules a user
  is actively authoring.
- ``parse_rrule`` never raises. It returns a falsy ``ParseFailure`` marker so
  batch expansion can skip a corrupt series and keep going.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime, time
from typing import Optional, Union

from .datetime_utils import parse_instant
from .errors import InvalidRRuleError, RRuleParseError
from .models import Frequency, RecurrenceRule, Weekday


_BYDAY_TOKEN = re.compile(r"^([+-]?\d{1,2})?(MO|TU|WE|TH|FR|SA|SU)$")
_ICAL_DATE = re.compile(r"^\d{8}$")
_ICAL_DATETIME = re.compile(r"^(\d{8}T\d{6})(Z?)$")

_SUPPORTED_KEYS = {"FREQ", "INTERVAL", "BYDAY", "BYMONTHDAY", "COUNT", "UNTIL", "WKST"}


@dataclass(frozen=True)
class ParseFailure:
    """Marker returned by ``parse_rrule`` for rules that cannot be expanded."""

    rule: str
    reason: str

    def __bool__(self) -> bool:
        return False


ParseResult = Union[RecurrenceRule, ParseFailure]


def parse_rrule(rule: Optional[str]) -> ParseResult:
    """Parse an RRULE string without raising.

    Args:
        rule: RRULE text, e.g. ``"FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE"``

    Returns:
        The parsed RecurrenceRule, or a ParseFailure describing why it was rejected
    """
    try:
        return _parse(rule or "")
    except RRuleParseError as e:
        return ParseFailure(rule=rule or "", reason=e.message)


def validate_rrule(rule: Optional[str]) -> None:
    """Validate a user-authored RRULE string.

    Raises:
        InvalidRRuleError: With status_code 422 and code INVALID_RRULE
    """
    try:
        _parse(rule or "")
    except RRuleParseError as e:
        raise InvalidRRuleError(f"Invalid recurrence rule: {e.message}") from e


def _parse(rule: str) -> RecurrenceRule:
    text = rule.strip()
    if text[:6].upper() == "RRULE:":
        text = text[6:].strip()
    if not text:
        raise RRuleParseError("empty rule")

    attributes: dict[str, str] = {}
    for part in text.split(";"):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            raise RRuleParseError(f"malformed attribute {part!r}")
        key, value = part.split("=", 1)
        key = key.strip().upper()
        if key in attributes:
            raise RRuleParseError(f"duplicate {key}")
        attributes[key] = value.strip().upper()

    if "FREQ" not in attributes:
        raise RRuleParseError("missing FREQ")
    try:
        frequency = Frequency(attributes["FREQ"])
    except ValueError:
        raise RRuleParseError(f"invalid FREQ value {attributes['FREQ']!r}") from None

    unsupported = sorted(set(attributes) - _SUPPORTED_KEYS)
    if unsupported:
        raise RRuleParseError(f"unsupported attribute {', '.join(unsupported)}")

    if "COUNT" in attributes and "UNTIL" in attributes:
        raise RRuleParseError("COUNT and UNTIL are mutually exclusive")

    by_weekday: frozenset[Weekday] = frozenset()
    ordinal: Optional[tuple[int, Weekday]] = None
    if "BYDAY" in attributes:
        by_weekday, ordinal = _parse_byday(attributes["BYDAY"], frequency)

    if "WKST" in attributes and attributes["WKST"] not in Weekday.__members__:
        raise RRuleParseError(f"invalid WKST value {attributes['WKST']!r}")

    by_month_day = None
    if "BYMONTHDAY" in attributes:
        if "BYDAY" in attributes:
            raise RRuleParseError("BYMONTHDAY cannot be combined with BYDAY")
        by_month_day = _parse_int(attributes["BYMONTHDAY"], "BYMONTHDAY")
        if by_month_day == 0 or not -31 <= by_month_day <= 31:
            raise RRuleParseError(f"BYMONTHDAY out of range: {by_month_day}")

    return RecurrenceRule(
        frequency=frequency,
        interval=_parse_positive(attributes["INTERVAL"], "INTERVAL") if "INTERVAL" in attributes else 1,
        by_weekday=by_weekday,
        by_month_weekday_ordinal=ordinal,
        by_month_day=by_month_day,
        count=_parse_positive(attributes["COUNT"], "COUNT") if "COUNT" in attributes else None,
        until=_parse_until(attributes["UNTIL"]) if "UNTIL" in attributes else None,
        week_start=Weekday(attributes["WKST"]) if "WKST" in attributes else Weekday.MO,
    )


def _parse_byday(
    value: str, frequency: Frequency
) -> tuple[frozenset[Weekday], Optional[tuple[int, Weekday]]]:
    """Parse BYDAY as a plain weekday list or a single positional weekday."""
    tokens = [token.strip() for token in value.split(",") if token.strip()]
    if not tokens:
        raise RRuleParseError("empty BYDAY")

    weekdays: list[Weekday] = []
    positional: list[tuple[int, Weekday]] = []
    for token in tokens:
        match = _BYDAY_TOKEN.match(token)
        if not match:
            raise RRuleParseError(f"invalid BYDAY value {token!r}")
        weekday = Weekday(match.group(2))
        if match.group(1) is None:
            weekdays.append(weekday)
            continue
        n = int(match.group(1))
        if n == 0 or not -5 <= n <= 5:
            raise RRuleParseError(f"BYDAY ordinal out of range in {token!r}")
        positional.append((n, weekday))

    if not positional:
        return frozenset(weekdays), None
    if len(tokens) > 1:
        raise RRuleParseError("positional BYDAY must be a single entry")
    if frequency is not Frequency.MONTHLY:
        raise RRuleParseError("positional BYDAY is only supported with FREQ=MONTHLY")
    return frozenset(), positional[0]


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise RRuleParseError(f"{name} must be an integer, got {value!r}") from None


def _parse_positive(value: str, name: str) -> int:
    number = _parse_int(value, name)
    if number < 1:
        raise RRuleParseError(f"{name} must be positive, got {number}")
    return number


def _parse_until(value: str) -> datetime:
    """Parse UNTIL as an absolute UTC instant.

    A date-only UNTIL covers the whole day, so it becomes 23:59:59 UTC.
    Floating date-times are read as UTC.
    """
    if _ICAL_DATE.match(value):
        try:
            day = datetime.strptime(value, "%Y%m%d").date()
        except ValueError:
            raise RRuleParseError(f"invalid UNTIL value {value!r}") from None
        return datetime.combine(day, time(23, 59, 59), tzinfo=UTC)

    match = _ICAL_DATETIME.match(value)
    if match:
        try:
            return datetime.strptime(match.group(1), "%Y%m%dT%H%M%S").replace(tzinfo=UTC)
        except ValueError:
            raise RRuleParseError(f"invalid UNTIL value {value!r}") from None

    try:
        return parse_instant(value)
    except (ValueError, OverflowError):
        raise RRuleParseError(f"invalid UNTIL value {value!r}") from None
