"""Data models for recurring calendar items, exception overrides and expanded instances."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SerializationInfo,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .datetime_utils import ensure_utc, format_ical_utc, format_instant

_INSTANT_FIELDS = ("start_at", "end_at", "original_date", "created_at", "updated_at", "deleted_at")

# Override fields that cannot be cleared; an explicit None keeps the base value
NON_NULLABLE_FIELDS = frozenset({"title", "category_id", "visibility", "is_all_day"})


def _now_utc() -> datetime:
    return datetime.now(UTC)


class Frequency(str, Enum):
    """Supported RRULE frequencies."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class Weekday(str, Enum):
    """RFC 5545 weekday codes."""

    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"
    SU = "SU"

    @property
    def number(self) -> int:
        """Weekday number matching ``datetime.weekday()`` (Monday is 0)."""
        return list(Weekday).index(self)


@dataclass(frozen=True)
class RecurrenceRule:
    """A parsed RRULE. Never persisted; rebuilt from the rule string on every call."""

    frequency: Frequency
    interval: int = 1
    by_weekday: frozenset[Weekday] = frozenset()
    by_month_weekday_ordinal: Optional[tuple[int, Weekday]] = None
    by_month_day: Optional[int] = None
    count: Optional[int] = None
    until: Optional[datetime] = None
    week_start: Weekday = Weekday.MO

    @property
    def is_bounded(self) -> bool:
        """True when the rule ends by itself (COUNT or UNTIL)."""
        return self.count is not None or self.until is not None

    def to_rrule_string(self) -> str:
        """Serialize back to RRULE text (without the ``RRULE:`` prefix)."""
        parts = [f"FREQ={self.frequency.value}"]
        if self.interval != 1:
            parts.append(f"INTERVAL={self.interval}")
        if self.by_month_weekday_ordinal is not None:
            ordinal, weekday = self.by_month_weekday_ordinal
            parts.append(f"BYDAY={ordinal}{weekday.value}")
        elif self.by_weekday:
            days = sorted(self.by_weekday, key=lambda day: day.number)
            parts.append("BYDAY=" + ",".join(day.value for day in days))
        if self.by_month_day is not None:
            parts.append(f"BYMONTHDAY={self.by_month_day}")
        if self.count is not None:
            parts.append(f"COUNT={self.count}")
        if self.until is not None:
            parts.append(f"UNTIL={format_ical_utc(self.until)}")
        if self.week_start is not Weekday.MO:
            parts.append(f"WKST={self.week_start.value}")
        return ";".join(parts)


class _WireModel(BaseModel):
    """Base for models exchanged with callers as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump as the camelCase, ISO-string wire shape."""
        return self.model_dump(mode="json", by_alias=True)


class RecurrableItem(_WireModel):
    """A calendar item that may carry a recurrence rule.

    Rows with ``parent_id`` set are materialized exception rows and are never
    re-expanded, even if they carry an ``rrule``.
    """

    id: str = Field(..., description="Item ID")
    owner_id: str = Field(..., description="Owning user ID")
    category_id: str = Field(..., description="Category (calendar) ID")
    title: str = Field(..., description="Item title")
    description: Optional[str] = Field(default=None, description="Free-form description")
    location: Optional[str] = Field(default=None, description="Location text")

    start_at: datetime = Field(..., description="Start instant (UTC)")
    end_at: datetime = Field(..., description="End instant (UTC)")
    is_all_day: bool = Field(default=False, description="All-day flag")

    color: Optional[str] = Field(default=None, description="Display color override")
    visibility: str = Field(default="private", description="Visibility level")

    # Recurrence
    rrule: Optional[str] = Field(default=None, description="RFC 5545 RRULE for series parents")
    ex_dates: list[datetime] = Field(default_factory=list, description="Excluded occurrence starts")
    parent_id: Optional[str] = Field(default=None, description="Series parent for exception rows")
    original_date: Optional[datetime] = Field(
        default=None, description="Original occurrence start for exception rows"
    )

    # Metadata
    created_at: datetime = Field(default_factory=_now_utc, description="Creation time")
    updated_at: datetime = Field(default_factory=_now_utc, description="Last modification time")
    deleted_at: Optional[datetime] = Field(default=None, description="Soft deletion time")

    @field_validator(*_INSTANT_FIELDS)
    @classmethod
    def normalize_instant(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @field_validator("ex_dates")
    @classmethod
    def normalize_ex_dates(cls, value: list[datetime]) -> list[datetime]:
        return [ensure_utc(dt) for dt in value]

    @field_serializer(*_INSTANT_FIELDS, when_used="json-unless-none")
    def serialize_instant(self, dt: datetime) -> str:
        return format_instant(dt)

    @field_serializer("ex_dates", when_used="json")
    def serialize_ex_dates(self, value: list[datetime]) -> list[str]:
        return [format_instant(dt) for dt in value]

    @property
    def is_recurring_parent(self) -> bool:
        """True for series parents that the engine should expand."""
        return bool(self.rrule) and self.parent_id is None

    @property
    def raw_duration(self) -> timedelta:
        """``end_at - start_at`` as stored, possibly negative."""
        return self.end_at - self.start_at


class ExpandedInstance(RecurrableItem):
    """One materialized occurrence of a series.

    ``instance_date`` is the generated occurrence start before any override was
    applied. It stays the identity key even when an override moved the instance.
    """

    is_recurring_instance: Literal[True] = True
    instance_date: datetime = Field(..., description="Pre-override occurrence start")

    @field_validator("instance_date")
    @classmethod
    def normalize_instance_date(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_serializer("instance_date", when_used="json")
    def serialize_instance_date(self, dt: datetime) -> str:
        return format_instant(dt)


class OverrideFields(_WireModel):
    """Fields an exception override may replace.

    Only fields explicitly present in the input count as overrides; an explicit
    ``None`` (e.g. clearing the location) is an override, an absent key is not.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    is_all_day: Optional[bool] = None
    category_id: Optional[str] = None
    color: Optional[str] = None
    visibility: Optional[str] = None

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_instant(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @field_serializer("start_at", "end_at", when_used="json-unless-none")
    def serialize_instant(self, dt: datetime) -> str:
        return format_instant(dt)

    def explicit(self) -> dict[str, Any]:
        """Return only the fields that were explicitly provided."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ExceptionOverride(_WireModel):
    """Per-occurrence modification of a series, keyed by the original occurrence start."""

    id: str
    parent_id: str
    owner_id: str
    original_date: datetime
    overrides: OverrideFields = Field(
        default_factory=OverrideFields,
        validation_alias=AliasChoices("fields", "overrides"),
        serialization_alias="fields",
    )
    created_at: datetime = Field(default_factory=_now_utc)
    updated_at: datetime = Field(default_factory=_now_utc)

    @field_validator("original_date", "created_at", "updated_at")
    @classmethod
    def normalize_instant(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_serializer("original_date", "created_at", "updated_at", when_used="json")
    def serialize_instant(self, dt: datetime) -> str:
        return format_instant(dt)

    @field_serializer("overrides")
    def serialize_overrides(self, value: OverrideFields, info: SerializationInfo) -> dict[str, Any]:
        # Unset keys are not overrides and must not round-trip as explicit nulls
        return value.model_dump(mode=info.mode, by_alias=bool(info.by_alias), exclude_unset=True)
