"""Exception hierarchy for recurrence handling.

Only rule validation (``validate_rrule``) and the series editing helpers raise
to callers. Expansion itself degrades per series and never raises these.
"""

from typing import Any


class RecurrenceError(Exception):
    """Base exception for all recurrence errors.

    Carries an HTTP-mappable ``status_code`` and machine readable ``code`` so an
    outer request layer can translate any subclass into an error response.
    """

    status_code: int = 500
    code: str = "RECURRENCE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error into a response body payload."""
        return {"error": {"code": self.code, "message": self.message}}


class RRuleParseError(RecurrenceError):
    """An RRULE string could not be parsed into a supported rule."""

    status_code = 422
    code = "INVALID_RRULE"


class InvalidRRuleError(RRuleParseError):
    """A user-authored RRULE failed validation.

    Raised when:
    - The rule is empty or does not contain FREQ
    - FREQ is not one of DAILY, WEEKLY, MONTHLY, YEARLY
    - Any supported attribute carries a malformed value

    Should result in HTTP 422 Unprocessable Entity response.
    """


class SeriesEditError(RecurrenceError):
    """A series editing helper was called with an item that is not a recurring parent.

    Should result in HTTP 400 Bad Request response.
    """

    status_code = 400
    code = "VALIDATION_ERROR"
