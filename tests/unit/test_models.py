"""Unit tests for the wire models and datetime helpers."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from calley_recurrence.datetime_utils import ensure_utc, format_ical_utc, format_instant, parse_instant
from calley_recurrence.models import ExceptionOverride, OverrideFields, RecurrableItem, Weekday

pytestmark = pytest.mark.unit


class TestDatetimeUtils:
    def test_naive_is_utc(self) -> None:
        assert ensure_utc(datetime(2026, 3, 15, 10)) == datetime(2026, 3, 15, 10, tzinfo=UTC)

    def test_aware_is_converted(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        converted = ensure_utc(datetime(2026, 3, 15, 12, tzinfo=plus_two))
        assert converted == datetime(2026, 3, 15, 10, tzinfo=UTC)
        assert converted.utcoffset() == timedelta(0)

    @pytest.mark.parametrize(
        "raw",
        ["2026-03-15T10:00:00.000Z", "2026-03-15T10:00:00Z", "2026-03-15T11:00:00+01:00", " 2026-03-15T10:00:00 "],
    )
    def test_parse_instant(self, raw: str) -> None:
        assert parse_instant(raw) == datetime(2026, 3, 15, 10, tzinfo=UTC)

    def test_parse_instant_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_instant("not a date")

    def test_formatting(self) -> None:
        dt = datetime(2026, 3, 15, 10, 5, 7, 123456, tzinfo=UTC)
        assert format_instant(dt) == "2026-03-15T10:05:07.123Z"
        assert format_ical_utc(dt) == "20260315T100507Z"


class TestRecurrableItem:
    def test_wire_round_trip_shape(self, make_item) -> None:
        item = make_item(exDates=["2026-03-17T10:00:00+00:00"])

        wire = item.to_wire()

        assert wire["startAt"] == "2026-03-15T10:00:00.000Z"
        assert wire["exDates"] == ["2026-03-17T10:00:00.000Z"]
        assert wire["ownerId"] == item.owner_id
        assert wire["deletedAt"] is None
        assert RecurrableItem.model_validate(wire) == item

    def test_snake_case_construction(self) -> None:
        item = RecurrableItem(
            id="a",
            owner_id="o",
            category_id="c",
            title="t",
            start_at=datetime(2026, 3, 15, 10),
            end_at=datetime(2026, 3, 15, 11),
        )
        assert item.start_at.tzinfo is not None
        assert item.created_at.tzinfo is not None
        assert item.is_recurring_parent is False
        assert item.raw_duration == timedelta(hours=1)

    def test_missing_required_field(self) -> None:
        with pytest.raises(ValidationError):
            RecurrableItem.model_validate({"id": "a", "title": "t"})

    def test_recurring_parent_flag(self, make_item) -> None:
        assert make_item().is_recurring_parent is True
        assert make_item(parentId="p").is_recurring_parent is False
        assert make_item(rrule=None).is_recurring_parent is False


class TestOverrideFields:
    def test_explicit_tracks_presence(self) -> None:
        fields = OverrideFields.model_validate({"title": "x", "location": None})
        assert fields.explicit() == {"title": "x", "location": None}

    def test_empty_has_no_overrides(self) -> None:
        assert OverrideFields().explicit() == {}

    def test_unknown_keys_ignored(self) -> None:
        assert OverrideFields.model_validate({"rrule": "FREQ=DAILY"}).explicit() == {}

    def test_exception_accepts_fields_or_overrides_key(self, make_exception) -> None:
        by_fields = make_exception(fields={"title": "a"})
        by_overrides = ExceptionOverride.model_validate(
            {
                "id": "x",
                "parentId": "p",
                "ownerId": "o",
                "originalDate": "2026-03-17T10:00:00.000Z",
                "overrides": {"title": "a"},
            }
        )
        assert by_fields.overrides.explicit() == by_overrides.overrides.explicit() == {"title": "a"}


def test_weekday_number_matches_datetime_weekday() -> None:
    # 2026-03-16 is a Monday
    for offset, weekday in enumerate(Weekday):
        assert weekday.number == offset
        assert (datetime(2026, 3, 16) + timedelta(days=offset)).weekday() == weekday.number
