from __future__ import annotations

"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for the gateway's exceptions,
translating them into the JSON response shapes the contact form frontend
expects (`{"success": false, ...}`).
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from formpipe.core.exceptions import (
    FormpipeError,
    MailTransportError,
    MalformedRequestError,
    RateLimitExceededError,
    SubmissionValidationError,
)

__all__ = [
    "malformed_request_error_handler",
    "submission_validation_error_handler",
    "rate_limit_exceeded_error_handler",
    "mail_transport_error_handler",
    "formpipe_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


async def malformed_request_error_handler(request: Request, exc: MalformedRequestError) -> JSONResponse:
    """Handles `MalformedRequestError`, returning a `400 Bad Request`.

    The body is rejected before the rate check, so no submission slot is used.

    Args:
        request: The incoming `Request` object.
        exc: The `MalformedRequestError` instance.

    Returns:
        A `JSONResponse` with a 400 status code and the error message.
    """
    logger.info("malformed_submission", path=request.url.path, detail=exc.detail)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": exc.message},
    )


async def submission_validation_error_handler(
    request: Request, exc: SubmissionValidationError
) -> JSONResponse:
    """Handles `SubmissionValidationError`, returning a `400 Bad Request`.

    Every failure is listed in order as `{field, value, rules, message}`.

    Args:
        request: The incoming `Request` object.
        exc: The `SubmissionValidationError` instance.

    Returns:
        A `JSONResponse` with a 400 status code and the failure list.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "errors": [failure.to_dict() for failure in exc.failures]},
    )


async def rate_limit_exceeded_error_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    """Handles `RateLimitExceededError`, returning a `429` with `Retry-After`.

    Args:
        request: The incoming `Request` object.
        exc: The `RateLimitExceededError` instance.

    Returns:
        A `JSONResponse` with a 429 status code and a retry hint.
    """
    logger.warning("submission_rate_limited", path=request.url.path, retry_after=exc.retry_after)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"success": False, "error": exc.message, "retryAfter": exc.retry_after},
        headers={
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(exc.retry_after),
        },
    )


async def mail_transport_error_handler(request: Request, exc: MailTransportError) -> JSONResponse:
    """Handles `MailTransportError`, returning a `500 Internal Server Error`."""
    logger.error("mail_transport_failed", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": exc.message},
    )


async def formpipe_error_handler(request: Request, exc: FormpipeError) -> JSONResponse:
    """Handles any other `FormpipeError`, returning a generic `500`."""
    logger.error("unhandled_formpipe_error", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(MalformedRequestError, malformed_request_error_handler)
    app.add_exception_handler(SubmissionValidationError, submission_validation_error_handler)
    app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_error_handler)
    app.add_exception_handler(MailTransportError, mail_transport_error_handler)
    app.add_exception_handler(FormpipeError, formpipe_error_handler)
