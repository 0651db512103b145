"""
Logging configuration for calley_recurrence.

Provides the stdlib adapter used as the expander's injected warning logger and a
helper to configure package log levels for services embedding the engine.
"""

import logging
import os
from typing import Any, Optional

# Third-party libraries whose debug output is not useful next to expansion logs
_NOISY_LOGGERS: dict[str, int] = {
    "dateutil": logging.WARNING,
    "icalendar": logging.INFO,
}

_PACKAGE_LOGGERS = [
    "calley_recurrence",
    "calley_recurrence.expander",
    "calley_recurrence.config",
    "calley_recurrence.series",
    "calley_recurrence.ics_export",
]


class StdlibWarningLogger:
    """Adapt a ``logging.Logger`` to the expander's ``warn(context, message)`` interface.

    The context is attached to the record as ``extra={"context": ...}`` and also
    rendered into the message so plain formatters still show it.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("calley_recurrence.expander")

    def warn(self, context: dict[str, Any], message: str) -> None:
        self.logger.warning("%s %s", message, context, extra={"context": context})


def configure_recurrence_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure log levels for calley_recurrence modules.

    Args:
        debug_mode: Whether to enable debug logging for calley_recurrence modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        CALLEY_RECURRENCE_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        CALLEY_RECURRENCE_LOG_LEVEL: Override package log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("CALLEY_RECURRENCE_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("CALLEY_RECURRENCE_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    package_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        package_level = getattr(logging, env_log_level)

    logger_config = dict(_NOISY_LOGGERS)
    for module in _PACKAGE_LOGGERS:
        logger_config[module] = package_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger("calley_recurrence").debug(
        "calley_recurrence logging configured at %s", logging.getLevelName(package_level)
    )


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {}
    for logger_name in ["calley_recurrence", *_NOISY_LOGGERS]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
