"""Recurrence expansion orchestration.

Turns series parents into concrete instances for a half-open query range:

1. Non-recurring items and materialized exception rows pass through untouched.
2. Each series rule is parsed; a rule that cannot be parsed yields no instances
   and expansion continues with the next item.
3. Occurrences are generated in a window widened by the series duration.
4. EXDATEs drop occurrences, exception overrides modify them.
5. The overlap test against the original query range runs after overrides, so a
   moved occurrence is judged by where it ended up.
6. Surviving instances are capped per series; excluded and non-overlapping
   candidates do not count towards the cap.

The expander holds no per-call state and its only side effect is the injected
warning logger, so one instance can serve concurrent requests.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional, Union

from .config import ExpansionConfig
from .datetime_utils import InstantLike, parse_instant
from .exception_resolver import SKIP, ExceptionIndex, build_exception_index, resolve_occurrence
from .models import ExceptionOverride, ExpandedInstance, RecurrableItem
from .protocols import OccurrenceGenerator, WarningLogger
from .recurrence_logging import StdlibWarningLogger
from .rrule_generator import DateutilOccurrenceGenerator, preview_occurrences
from .rrule_parser import parse_rrule, validate_rrule
from .window import overlaps, resolve_window

ItemLike = Union[RecurrableItem, Mapping[str, Any]]
ExceptionLike = Union[ExceptionOverride, Mapping[str, Any]]
ExpansionOutput = list[Union[RecurrableItem, ExpandedInstance]]


class RecurrenceExpander:
    """Expands recurring items into instances within a query range.

    Args:
        config: Expansion settings (per-series cap). Defaults to ExpansionConfig()
        logger: Warning sink for clamped negative durations
        generator: Occurrence generator; defaults to the dateutil-backed one
    """

    def __init__(
        self,
        config: Optional[ExpansionConfig] = None,
        logger: Optional[WarningLogger] = None,
        generator: Optional[OccurrenceGenerator] = None,
    ):
        self.config = config or ExpansionConfig()
        self.logger = logger or StdlibWarningLogger()
        self.generator = generator or DateutilOccurrenceGenerator()

    def expand(
        self,
        items: Iterable[ItemLike],
        query_start: InstantLike,
        query_end: InstantLike,
        exceptions: Iterable[ExceptionLike] = (),
    ) -> ExpansionOutput:
        """Expand every series parent in ``items`` for ``[query_start, query_end)``.

        Results are grouped per item in input order; instances of one series are
        in ascending occurrence order. No ordering holds across items.

        Args:
            items: Calendar items (models or camelCase wire dicts)
            query_start: Inclusive range start (datetime or ISO-8601 string)
            query_end: Exclusive range end (datetime or ISO-8601 string)
            exceptions: Exception overrides for any of the series

        Returns:
            Pass-through items and expanded instances
        """
        start = parse_instant(query_start)
        end = parse_instant(query_end)
        index = build_exception_index(_coerce(ExceptionOverride, exc) for exc in exceptions)

        result: ExpansionOutput = []
        for raw_item in items:
            item = _coerce(RecurrableItem, raw_item)
            if not item.is_recurring_parent:
                result.append(item)
                continue
            result.extend(self.expand_series(item, start, end, index))
        return result

    def expand_series(
        self,
        parent: RecurrableItem,
        query_start: datetime,
        query_end: datetime,
        exceptions: ExceptionIndex,
    ) -> list[ExpandedInstance]:
        """Expand one series parent. Returns an empty list for unusable rules."""
        rule = parse_rrule(parent.rrule)
        if not rule:
            return []

        window = resolve_window(parent, query_start, query_end, self.logger)
        ex_dates = frozenset(parent.ex_dates)
        cap = self.config.max_instances_per_series
        instances: list[ExpandedInstance] = []
        if cap <= 0:
            return instances

        try:
            candidates = self.generator.generate(
                rule,
                parent.start_at,
                window.gen_start,
                window.gen_end,
                max(self.config.max_candidates_per_series, cap),
            )
            for candidate in candidates:
                fields = resolve_occurrence(candidate, parent, ex_dates, exceptions, window.duration)
                if fields is SKIP:
                    continue
                if not overlaps(fields["start_at"], fields["end_at"], query_start, query_end):
                    continue
                instances.append(ExpandedInstance(**fields, instance_date=candidate))
                if len(instances) >= cap:
                    break
        except (ValueError, OverflowError):
            # Rules dateutil cannot iterate (dates past year 9999, UNTIL/DTSTART
            # mismatches) contribute nothing, like unparsable ones.
            return []

        return instances

    def preview(
        self,
        rrule: str,
        anchor: InstantLike,
        limit: Optional[int] = None,
    ) -> list[datetime]:
        """Return the first occurrences of a rule being authored.

        Unlike ``expand``, an invalid rule is reported to the caller.

        Args:
            rrule: RRULE text
            anchor: Proposed series start
            limit: Number of occurrences; defaults to ``config.preview_count``

        Raises:
            InvalidRRuleError: If the rule cannot be used
        """
        validate_rrule(rrule)
        rule = parse_rrule(rrule)
        count = self.config.preview_count if limit is None else limit
        return preview_occurrences(rule, parse_instant(anchor), count, self.generator)


def expand_recurring_items(
    items: Iterable[ItemLike],
    query_start: InstantLike,
    query_end: InstantLike,
    exceptions: Iterable[ExceptionLike] = (),
    logger: Optional[WarningLogger] = None,
    config: Optional[ExpansionConfig] = None,
) -> ExpansionOutput:
    """Expand recurring items with a one-off expander.

    Convenience wrapper around ``RecurrenceExpander(config, logger).expand(...)``.
    """
    return RecurrenceExpander(config=config, logger=logger).expand(items, query_start, query_end, exceptions)


def _coerce(model: Any, value: Any) -> Any:
    if isinstance(value, model):
        return value
    return model.model_validate(value)
