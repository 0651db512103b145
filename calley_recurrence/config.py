"""Configuration for recurrence expansion."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

MAX_INSTANCES_PER_SERIES = 1000
# Candidates generated per series, counting ones later dropped by EXDATE or overlap
MAX_CANDIDATES_PER_SERIES = 10 * MAX_INSTANCES_PER_SERIES
DEFAULT_PREVIEW_COUNT = 5
DEFAULT_ICS_PRODID = "-//Calley//Calley Calendar//EN"
DEFAULT_UID_DOMAIN = "calley.app"


@dataclass(frozen=True)
class ExpansionConfig:
    """Configuration for recurrence expansion.

    Consolidates expansion settings with explicit defaults. The per-series cap
    limits returned instances and is independent of any request limit; the
    candidate bound limits generator work for series whose occurrences are
    mostly excluded.
    """

    max_instances_per_series: int = MAX_INSTANCES_PER_SERIES
    max_candidates_per_series: int = MAX_CANDIDATES_PER_SERIES
    preview_count: int = DEFAULT_PREVIEW_COUNT

    # iCalendar export
    ics_prodid: str = DEFAULT_ICS_PRODID
    uid_domain: str = DEFAULT_UID_DOMAIN

    @classmethod
    def from_settings(cls, settings: Any) -> ExpansionConfig:
        """Extract expansion configuration from a settings object.

        Args:
            settings: Configuration object with expansion attributes

        Returns:
            ExpansionConfig with values from settings or defaults
        """
        return cls(
            max_instances_per_series=getattr(settings, "max_instances_per_series", MAX_INSTANCES_PER_SERIES),
            max_candidates_per_series=getattr(
                settings, "max_candidates_per_series", MAX_CANDIDATES_PER_SERIES
            ),
            preview_count=getattr(settings, "preview_count", DEFAULT_PREVIEW_COUNT),
            ics_prodid=getattr(settings, "ics_prodid", DEFAULT_ICS_PRODID),
            uid_domain=getattr(settings, "uid_domain", DEFAULT_UID_DOMAIN),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ExpansionConfig:
        """Build configuration from environment variables.

        Recognizes:
        - CALLEY_RECURRENCE_MAX_INSTANCES -> 'max_instances_per_series' (positive int)
        - CALLEY_RECURRENCE_PREVIEW_COUNT -> 'preview_count' (positive int)
        - CALLEY_RECURRENCE_ICS_PRODID -> 'ics_prodid'

        Invalid values are ignored and the default is kept.
        """
        env = os.environ if environ is None else environ
        return cls(
            max_instances_per_series=_positive_int(
                env, "CALLEY_RECURRENCE_MAX_INSTANCES", MAX_INSTANCES_PER_SERIES
            ),
            preview_count=_positive_int(env, "CALLEY_RECURRENCE_PREVIEW_COUNT", DEFAULT_PREVIEW_COUNT),
            ics_prodid=env.get("CALLEY_RECURRENCE_ICS_PRODID") or DEFAULT_ICS_PRODID,
        )


def _positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.debug("Ignoring non-integer %s=%r", key, raw)
        return default
    if value < 1:
        logger.debug("Ignoring non-positive %s=%r", key, raw)
        return default
    return value
