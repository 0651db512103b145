"""Protocol definitions for the expander's collaborators.

The expander receives these as constructor arguments instead of reaching for
module-level singletons, so callers (and tests) can swap implementations.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterator
from typing import Any, Protocol

from .models import RecurrenceRule


class WarningLogger(Protocol):
    """Structured warning sink used by the expander."""

    def warn(self, context: dict[str, Any], message: str) -> None:
        """Emit a warning.

        Args:
            context: Structured fields describing the condition
            message: Human readable message
        """
        ...


class OccurrenceGenerator(Protocol):
    """Produces candidate occurrence starts for one parsed rule."""

    def generate(
        self,
        rule: RecurrenceRule,
        anchor: datetime.datetime,
        window_start: datetime.datetime,
        window_end: datetime.datetime,
        hard_cap: int,
    ) -> Iterator[datetime.datetime]:
        """Yield ascending occurrence starts inside ``[window_start, window_end]``.

        Args:
            rule: Parsed recurrence rule
            anchor: The series' own start instant (first occurrence seed)
            window_start: Earliest start to emit (inclusive)
            window_end: Latest start to emit (inclusive)
            hard_cap: Maximum number of instants to emit

        Returns:
            Iterator of aware UTC datetimes
        """
        ...
