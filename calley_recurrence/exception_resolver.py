"""ExDate and exception override resolution for single occurrences."""

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any, Union

from .models import NON_NULLABLE_FIELDS, ExceptionOverride, RecurrableItem

_TIME_FIELDS = frozenset({"start_at", "end_at"})

ExceptionIndex = Mapping[tuple[str, datetime], ExceptionOverride]


class _Skip:
    """Sentinel for an occurrence removed by an EXDATE."""

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _Skip()


def build_exception_index(exceptions: Iterable[ExceptionOverride]) -> dict[tuple[str, datetime], ExceptionOverride]:
    """Key overrides by ``(parent_id, original_date)``.

    Matching is by exact timestamp, so two overrides on the same day for
    different occurrence times stay distinct. The last override for a key wins.
    """
    return {(exc.parent_id, exc.original_date): exc for exc in exceptions}


def resolve_occurrence(
    candidate: datetime,
    base: RecurrableItem,
    ex_dates: frozenset[datetime],
    exceptions: ExceptionIndex,
    duration: timedelta,
) -> Union[_Skip, dict[str, Any]]:
    """Resolve one generated occurrence against ExDates and overrides.

    Args:
        candidate: Generated (pre-override) occurrence start
        base: The series parent
        ex_dates: Excluded occurrence starts, exact timestamps
        exceptions: Overrides indexed by ``(parent_id, original_date)``
        duration: Clamped, non-negative series duration

    Returns:
        ``SKIP`` if the occurrence is excluded, otherwise a dict of instance field
        values (base fields with any overrides applied)
    """
    if candidate in ex_dates:
        return SKIP

    fields = base.model_dump()
    override = exceptions.get((base.id, candidate))
    if override is None:
        fields["start_at"] = candidate
        fields["end_at"] = candidate + duration
        return fields

    explicit = override.overrides.explicit()
    start_at: datetime = explicit.get("start_at") or candidate
    end_at: datetime = explicit.get("end_at") or start_at + duration
    if end_at < start_at:
        end_at = start_at
    fields["start_at"] = start_at
    fields["end_at"] = end_at

    for name, value in explicit.items():
        if name in _TIME_FIELDS:
            continue
        if value is None and name in NON_NULLABLE_FIELDS:
            continue
        fields[name] = value
    return fields
