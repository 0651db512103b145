"""Shared fixtures for calley_recurrence tests.

Fixtures stay small and deterministic: all instants are fixed UTC timestamps
and the warning logger is a mock, so no test depends on wall-clock time or on
global logging state.
"""

from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from calley_recurrence.expander import RecurrenceExpander
from calley_recurrence.models import ExceptionOverride, RecurrableItem

TEST_OWNER_ID = "testuser12345678901234567"
TEST_CATEGORY_ID = "testcategory1234567890123"
TEST_ITEM_ID = "testevent12345678901234567"


def pytest_configure(config: Any) -> None:
    """Register markers used across the suite."""
    config.addinivalue_line("markers", "unit: Fast unit tests")


@pytest.fixture
def warning_logger() -> MagicMock:
    """Mock implementing the expander's ``warn(context, message)`` interface."""
    return MagicMock(spec=["warn"])


@pytest.fixture
def expander(warning_logger: MagicMock) -> RecurrenceExpander:
    """Expander with default config and the mock warning logger injected."""
    return RecurrenceExpander(logger=warning_logger)


@pytest.fixture
def make_item() -> Callable[..., RecurrableItem]:
    """Factory for recurring items; keyword overrides use camelCase wire keys.

    Defaults describe a daily one-hour series anchored Sunday 2026-03-15 10:00Z.
    """

    def _make(**overrides: Any) -> RecurrableItem:
        data: dict[str, Any] = {
            "id": TEST_ITEM_ID,
            "ownerId": TEST_OWNER_ID,
            "categoryId": TEST_CATEGORY_ID,
            "title": "Recurring Event",
            "description": None,
            "location": None,
            "startAt": "2026-03-15T10:00:00.000Z",
            "endAt": "2026-03-15T11:00:00.000Z",
            "isAllDay": False,
            "color": None,
            "visibility": "private",
            "rrule": "FREQ=DAILY",
            "exDates": [],
            "parentId": None,
            "originalDate": None,
            "createdAt": "2026-03-01T00:00:00.000Z",
            "updatedAt": "2026-03-01T00:00:00.000Z",
            "deletedAt": None,
        }
        data.update(overrides)
        return RecurrableItem.model_validate(data)

    return _make


@pytest.fixture
def make_exception() -> Callable[..., ExceptionOverride]:
    """Factory for exception overrides of the default test series (Mar 17 occurrence)."""

    def _make(**overrides: Any) -> ExceptionOverride:
        data: dict[str, Any] = {
            "id": "exception1234567890123456",
            "parentId": TEST_ITEM_ID,
            "ownerId": TEST_OWNER_ID,
            "originalDate": "2026-03-17T10:00:00.000Z",
            "fields": {},
            "createdAt": "2026-03-01T00:00:00.000Z",
            "updatedAt": "2026-03-01T00:00:00.000Z",
        }
        data.update(overrides)
        return ExceptionOverride.model_validate(data)

    return _make
