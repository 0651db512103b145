"""Unit tests for series editing helpers."""

from datetime import UTC, datetime, timedelta

import pytest

from calley_recurrence.errors import SeriesEditError
from calley_recurrence.series import build_exception, exclude_instance, split_series, truncate_rrule_before

pytestmark = pytest.mark.unit


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


class TestExcludeInstance:
    def test_adds_exdate_without_mutating(self, make_item) -> None:
        parent = make_item()

        updated = exclude_instance(parent, "2026-03-17T10:00:00.000Z")

        assert updated.ex_dates == [utc(2026, 3, 17, 10)]
        assert parent.ex_dates == []

    def test_already_excluded_is_noop(self, make_item) -> None:
        parent = make_item(exDates=["2026-03-17T10:00:00.000Z"])
        assert exclude_instance(parent, utc(2026, 3, 17, 10)) is parent

    def test_excluded_instance_disappears_from_expansion(self, expander, make_item) -> None:
        updated = exclude_instance(make_item(), "2026-03-16T10:00:00.000Z")

        result = expander.expand([updated], "2026-03-16T00:00:00Z", "2026-03-17T00:00:00Z")

        assert result == []

    @pytest.mark.parametrize("overrides", [{"rrule": None}, {"parentId": "someparent"}])
    def test_rejects_non_parent(self, make_item, overrides) -> None:
        with pytest.raises(SeriesEditError) as exc_info:
            exclude_instance(make_item(**overrides), "2026-03-17T10:00:00.000Z")
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "VALIDATION_ERROR"


@pytest.mark.parametrize(
    "rule,expected",
    [
        ("FREQ=DAILY", "FREQ=DAILY;UNTIL=20260320T095959Z"),
        ("FREQ=DAILY;COUNT=10", "FREQ=DAILY;UNTIL=20260320T095959Z"),
        ("FREQ=WEEKLY;UNTIL=20270101T000000Z;BYDAY=MO", "FREQ=WEEKLY;BYDAY=MO;UNTIL=20260320T095959Z"),
        ("UNTIL=20270101;FREQ=MONTHLY", "FREQ=MONTHLY;UNTIL=20260320T095959Z"),
    ],
)
def test_truncate_rrule_before(rule: str, expected: str) -> None:
    assert truncate_rrule_before(rule, "2026-03-20T10:00:00.000Z") == expected


class TestSplitSeries:
    def test_split_produces_two_series(self, make_item) -> None:
        parent = make_item(location="Room 1")

        truncated, new_series = split_series(parent, "2026-03-20T10:00:00.000Z", {"title": "Renamed"})

        assert truncated.id == parent.id
        assert truncated.rrule == "FREQ=DAILY;UNTIL=20260320T095959Z"
        assert new_series.id != parent.id
        assert new_series.title == "Renamed"
        assert new_series.location == "Room 1"
        assert new_series.rrule == "FREQ=DAILY"
        assert new_series.start_at == utc(2026, 3, 20, 10)
        assert new_series.end_at == utc(2026, 3, 20, 11)
        assert new_series.parent_id is None
        assert new_series.ex_dates == []

    def test_split_with_new_time_and_rule(self, make_item) -> None:
        _, new_series = split_series(
            make_item(),
            "2026-03-20T10:00:00.000Z",
            {"startAt": "2026-03-20T14:00:00.000Z", "rrule": "FREQ=WEEKLY"},
        )

        assert new_series.start_at == utc(2026, 3, 20, 14)
        assert new_series.end_at - new_series.start_at == timedelta(hours=1)
        assert new_series.rrule == "FREQ=WEEKLY"

    def test_null_title_change_is_ignored(self, make_item) -> None:
        _, new_series = split_series(make_item(title="Keep"), "2026-03-20T10:00:00.000Z", {"title": None})
        assert new_series.title == "Keep"

    def test_expansions_do_not_overlap(self, expander, make_item) -> None:
        truncated, new_series = split_series(make_item(), "2026-03-18T10:00:00.000Z")

        old = expander.expand([truncated], "2026-03-15T00:00:00Z", "2026-03-21T00:00:00Z")
        new = expander.expand([new_series], "2026-03-15T00:00:00Z", "2026-03-21T00:00:00Z")

        assert [i.start_at.day for i in old] == [15, 16, 17]
        assert [i.start_at.day for i in new] == [18, 19, 20]

    def test_rejects_non_parent(self, make_item) -> None:
        with pytest.raises(SeriesEditError):
            split_series(make_item(rrule=None), "2026-03-20T10:00:00.000Z")


class TestBuildException:
    def test_builds_override_for_occurrence(self, make_item) -> None:
        parent = make_item()
        now = utc(2026, 3, 10, 8)

        exception = build_exception(
            parent, "2026-03-17T10:00:00.000Z", {"title": "One-off", "location": None}, exception_id="exc1", now=now
        )

        assert exception.id == "exc1"
        assert exception.parent_id == parent.id
        assert exception.owner_id == parent.owner_id
        assert exception.original_date == utc(2026, 3, 17, 10)
        assert exception.overrides.explicit() == {"title": "One-off", "location": None}
        assert exception.created_at == exception.updated_at == now

    def test_override_applies_in_expansion(self, expander, make_item) -> None:
        parent = make_item()
        exception = build_exception(parent, "2026-03-17T10:00:00.000Z", {"title": "One-off"})

        result = expander.expand([parent], "2026-03-17T00:00:00Z", "2026-03-18T00:00:00Z", [exception])

        assert result[0].title == "One-off"

    def test_wire_shape_keeps_only_explicit_fields(self, make_item) -> None:
        exception = build_exception(make_item(), "2026-03-17T10:00:00.000Z", {"isAllDay": True}, exception_id="e")

        wire = exception.to_wire()

        assert wire["fields"] == {"isAllDay": True}
        assert wire["originalDate"] == "2026-03-17T10:00:00.000Z"
        assert wire["parentId"] == "testevent12345678901234567"

    def test_rejects_non_parent(self, make_item) -> None:
        with pytest.raises(SeriesEditError):
            build_exception(make_item(rrule=None), "2026-03-17T10:00:00.000Z", {})
