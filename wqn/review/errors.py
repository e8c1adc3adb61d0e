"""
Review engine error taxonomy.

Every error is a local, recoverable condition returned to the caller. The
``message`` attribute is safe to show to the user as-is.
"""

from __future__ import annotations


class ReviewEngineError(Exception):
    """Base class for review engine errors."""

    default_message = "Review session request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ReviewEngineError):
    """Session, problem set or referenced problem is absent."""

    default_message = "Not found"


class AccessDeniedError(NotFoundError):
    """Raised when the acting user may not see a problem set.

    Subclasses NotFoundError so callers cannot tell a private set apart from
    a missing one.
    """

    default_message = "Problem set not found or access denied"


class NoMatchingProblemsError(ReviewEngineError):
    """Composer produced an empty sequence."""

    default_message = "No problems match the current filters"


class InvalidInputError(ReviewEngineError):
    """Malformed ids, configs or out-of-range values."""

    default_message = "Invalid input"


class InvalidProblemIdError(InvalidInputError):
    """Problem id is malformed or not part of the session."""

    default_message = "Invalid problem ID"
