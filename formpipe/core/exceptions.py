from __future__ import annotations

"""Centralized, structured exception hierarchy for Formpipe.

Each exception carries a machine-readable `code` for programmatic handling and
a human-readable `message` for logging and for the JSON error body returned by
the API layer.

The hierarchy maps onto the submission pipeline:
- `BackendUnavailableError` never leaves the rate limiter (it is converted into
  a fail-open decision there).
- `RateLimitExceededError`, `SubmissionValidationError` and
  `MalformedRequestError` are user-visible and map to 429/400 responses.
- `MailTransportError` signals that the vetted payload could not be handed off.
"""

from typing import TYPE_CHECKING, Final, List, Optional

if TYPE_CHECKING:
    from formpipe.domain.validation.constraint_validator import ValidationFailure

__all__: Final = [
    "FormpipeError",
    "BackendUnavailableError",
    "RateLimitExceededError",
    "SubmissionValidationError",
    "MalformedRequestError",
    "MailTransportError",
]


class FormpipeError(Exception):
    """Base exception class for all custom errors in the Formpipe gateway.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Storage errors (never surfaced to the submitter)
# ---------------------------------------------------------------------------


class BackendUnavailableError(FormpipeError):
    """Raised by a rate-limit backend when its store cannot be reached or used.

    The rate limiter catches this (and any other backend exception) and fails
    open, so it never maps to an HTTP response.
    """

    def __init__(
        self,
        message: str = "Rate limit backend unavailable",
        code: str = "backend_unavailable",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Submitter-facing errors
# ---------------------------------------------------------------------------


class RateLimitExceededError(FormpipeError):
    """Raised when a client exhausted its submissions for the current window.

    Maps to a `429 Too Many Requests` with a `Retry-After` header.
    """

    def __init__(
        self,
        retry_after: int,
        message: str = "Too many requests. Please try again later.",
        code: str = "rate_limit_exceeded",
    ):
        self.retry_after = retry_after
        super().__init__(message, code)


class SubmissionValidationError(FormpipeError):
    """Raised when submitted fields violate the configured constraints.

    Maps to a `400 Bad Request` whose body lists every failure in order.
    """

    def __init__(
        self,
        failures: List["ValidationFailure"],
        message: str = "Submitted fields failed validation",
        code: str = "validation_failed",
    ):
        self.failures = failures
        super().__init__(message, code)


class MalformedRequestError(FormpipeError):
    """Raised when the request body cannot be decoded into a field map.

    This short-circuits before the rate check, so it never consumes a slot.
    """

    def __init__(
        self,
        message: str = "Invalid JSON payload",
        code: str = "malformed_request",
        detail: Optional[str] = None,
    ):
        self.detail = detail
        super().__init__(message, code)


class MailTransportError(FormpipeError):
    """Raised when the mail-transport collaborator fails to deliver.

    Maps to a `500 Internal Server Error`.
    """

    def __init__(self, message: str, code: str = "mail_transport_error"):
        super().__init__(message, code)
