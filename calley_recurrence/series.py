"""Series editing helpers for "this instance" and "this and following" scopes.

These return new model objects for the caller to persist; nothing here touches
storage.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Optional

from .datetime_utils import InstantLike, format_ical_utc, parse_instant
from .errors import SeriesEditError
from .models import NON_NULLABLE_FIELDS, ExceptionOverride, OverrideFields, RecurrableItem

logger = logging.getLogger(__name__)

_END_CONDITION = re.compile(r";?\s*(UNTIL|COUNT)=[^;]*", re.IGNORECASE)

# Fields a new series inherits from its parent unless the change set overrides them
_SERIES_FIELDS = (
    "owner_id",
    "category_id",
    "title",
    "description",
    "location",
    "is_all_day",
    "color",
    "visibility",
    "rrule",
)


def _require_parent(item: RecurrableItem) -> None:
    if not item.is_recurring_parent:
        raise SeriesEditError(f"Item {item.id} is not a recurring series parent")


def exclude_instance(parent: RecurrableItem, instance_date: InstantLike) -> RecurrableItem:
    """Return a copy of ``parent`` with one occurrence added to its EXDATEs.

    Raises:
        SeriesEditError: If ``parent`` is not a recurring series parent
    """
    _require_parent(parent)
    excluded = parse_instant(instance_date)
    if excluded in parent.ex_dates:
        return parent
    return parent.model_copy(update={"ex_dates": [*parent.ex_dates, excluded]})


def truncate_rrule_before(rule: str, split_at: InstantLike) -> str:
    """End a rule just before ``split_at``.

    Any existing COUNT or UNTIL is removed and replaced with an UNTIL one second
    before the split instant, so the occurrence at ``split_at`` is no longer part
    of the series.
    """
    until = parse_instant(split_at) - timedelta(seconds=1)
    stripped = _END_CONDITION.sub("", rule.strip()).strip(";")
    return f"{stripped};UNTIL={format_ical_utc(until)}"


def split_series(
    parent: RecurrableItem,
    instance_date: InstantLike,
    changes: Optional[Mapping[str, Any]] = None,
) -> tuple[RecurrableItem, RecurrableItem]:
    """Split a series at ``instance_date`` ("this and following" edit).

    Args:
        parent: Series parent to split
        instance_date: Occurrence start where the new series begins
        changes: Field changes for the new series (snake_case or camelCase keys)

    Returns:
        ``(truncated_parent, new_series)``. The new series gets a fresh id and
        keeps the parent's duration unless the changes set start/end.

    Raises:
        SeriesEditError: If ``parent`` is not a recurring series parent
    """
    _require_parent(parent)
    split_at = parse_instant(instance_date)
    truncated = parent.model_copy(update={"rrule": truncate_rrule_before(parent.rrule or "", split_at)})

    updates = OverrideFields.model_validate(dict(changes or {})).explicit()
    new_fields: dict[str, Any] = {name: getattr(parent, name) for name in _SERIES_FIELDS}
    for name, value in updates.items():
        if name in ("start_at", "end_at"):
            continue
        if value is None and name in NON_NULLABLE_FIELDS:
            continue
        new_fields[name] = value
    if changes and "rrule" in changes:
        new_fields["rrule"] = changes["rrule"]

    start_at = updates.get("start_at") or split_at
    end_at = updates.get("end_at") or start_at + max(parent.raw_duration, timedelta(0))
    new_series = RecurrableItem(
        id=uuid.uuid4().hex,
        start_at=start_at,
        end_at=max(end_at, start_at),
        **new_fields,
    )

    logger.info(
        "Recurring series %s split at %s into new series %s",
        parent.id,
        split_at.isoformat(),
        new_series.id,
    )
    return truncated, new_series


def build_exception(
    parent: RecurrableItem,
    instance_date: InstantLike,
    fields: Mapping[str, Any],
    exception_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ExceptionOverride:
    """Create an override for one occurrence of ``parent`` ("this instance" edit).

    Raises:
        SeriesEditError: If ``parent`` is not a recurring series parent
    """
    _require_parent(parent)
    extra: dict[str, Any] = {}
    if now is not None:
        extra = {"created_at": now, "updated_at": now}
    return ExceptionOverride(
        id=exception_id or uuid.uuid4().hex,
        parent_id=parent.id,
        owner_id=parent.owner_id,
        original_date=parse_instant(instance_date),
        overrides=OverrideFields.model_validate(dict(fields)),
        **extra,
    )
