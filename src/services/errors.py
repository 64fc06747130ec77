"""Domain exceptions raised inside services.

Each carries the :class:`ErrorKind` it maps to and whether the caller may
retry. Services convert them to result models at their public boundary.
"""

from typing import Optional

from src.models.results import ErrorKind


class PatriotThanksError(Exception):
    """Base exception for service errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM_UNAVAILABLE
    retryable: bool = False

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class InputValidationError(PatriotThanksError):
    """Missing or malformed user input."""

    kind = ErrorKind.VALIDATION


class AuthorizationError(PatriotThanksError):
    """Caller lacks the capability required for the action."""

    kind = ErrorKind.AUTHORIZATION


class NotFoundError(PatriotThanksError):
    """Referenced record does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(PatriotThanksError):
    """Action is not allowed in the record's current state."""

    kind = ErrorKind.CONFLICT


class UpstreamUnavailableError(PatriotThanksError):
    """External service or data store failed."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE
    retryable = True


class UpstreamTimeoutError(UpstreamUnavailableError):
    """External service or data store did not answer in time."""

    kind = ErrorKind.UPSTREAM_TIMEOUT


class RateLimitExceededError(InputValidationError):
    """Caller exceeded the request budget for an action."""

    retryable = True


class ReviewInProgressError(ConflictError):
    """Another reviewer holds the lock on the same request."""

    retryable = True
