"""calley_recurrence - recurrence expansion engine for Calley calendar items.

Expands items carrying an RFC 5545 RRULE into concrete instances for a query
range, applying EXDATEs and per-instance exception overrides.
"""

__version__ = "0.1.0"

from .config import MAX_INSTANCES_PER_SERIES, ExpansionConfig
from .errors import InvalidRRuleError, RecurrenceError, RRuleParseError, SeriesEditError
from .expander import RecurrenceExpander, expand_recurring_items
from .ics_export import export_item_ics
from .models import (
    ExceptionOverride,
    ExpandedInstance,
    Frequency,
    OverrideFields,
    RecurrableItem,
    RecurrenceRule,
    Weekday,
)
from .recurrence_logging import StdlibWarningLogger, configure_recurrence_logging
from .rrule_generator import DateutilOccurrenceGenerator, preview_occurrences
from .rrule_parser import ParseFailure, parse_rrule, validate_rrule
from .series import build_exception, exclude_instance, split_series, truncate_rrule_before

__all__ = [
    "MAX_INSTANCES_PER_SERIES",
    "DateutilOccurrenceGenerator",
    "ExceptionOverride",
    "ExpandedInstance",
    "ExpansionConfig",
    "Frequency",
    "InvalidRRuleError",
    "OverrideFields",
    "ParseFailure",
    "RRuleParseError",
    "RecurrableItem",
    "RecurrenceError",
    "RecurrenceExpander",
    "RecurrenceRule",
    "SeriesEditError",
    "StdlibWarningLogger",
    "Weekday",
    "build_exception",
    "configure_recurrence_logging",
    "exclude_instance",
    "expand_recurring_items",
    "export_item_ics",
    "parse_rrule",
    "preview_occurrences",
    "split_series",
    "truncate_rrule_before",
    "validate_rrule",
]
