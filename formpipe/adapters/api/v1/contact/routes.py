"""Contact form submission endpoint.

The route stays thin: it resolves the client address, hands the raw body to
the AdmissionGate and maps the outcome. Rejections are raised as domain
exceptions and turned into responses by `formpipe.core.handlers`.

Request body::

    {"replyTo": "jane@example.com",
     "fields": [{"key": "subject", "value": "Hello"}, {"key": "message", "value": "..."}]}
"""

import time

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from formpipe.adapters.api.v1.contact.schemas import (
    ErrorResponse,
    RateLimitedResponse,
    SubmissionSuccessResponse,
    ValidationErrorResponse,
)
from formpipe.core.exceptions import RateLimitExceededError, SubmissionValidationError
from formpipe.domain.submission.admission import RejectionReason
from formpipe.domain.submission.client_identity import resolve_client_address
from formpipe.infrastructure.dependency_injection.submission_dependencies import SubmissionServicesDep

logger = structlog.get_logger(__name__)


async def submit_contact(request: Request, services: SubmissionServicesDep) -> JSONResponse:
    """Validate a contact form submission and forward it by email.

    Raises:
        MalformedRequestError: Body is not a submission object (400)
        RateLimitExceededError: Client used up its submissions for the window (429)
        SubmissionValidationError: Fields violate the configured rules (400)
        MailTransportError: The email could not be sent (500)
    """
    cfg = services.settings
    deadline = time.monotonic() + cfg.REQUEST_DEADLINE_SECONDS
    client_address = resolve_client_address(
        request.headers, request.client.host if request.client else None
    )

    body = await request.body()
    outcome = await services.gate.admit(body, client_address, deadline=deadline)

    if outcome.reason is RejectionReason.RATE_LIMITED:
        raise RateLimitExceededError(retry_after=outcome.retry_after or 1)
    if outcome.reason is RejectionReason.VALIDATION_FAILED:
        raise SubmissionValidationError(outcome.failures)

    email = services.composer.compose(outcome.sanitized_fields)
    await services.mail_transport.send(
        from_address=str(cfg.EMAIL_FROM_EMAIL),
        to_address=str(cfg.EMAIL_TO_EMAIL),
        reply_to=email.reply_to,
        subject=email.subject,
        html_body=email.html_body,
        plain_text_body=email.plain_text_body,
    )

    headers = outcome.decision.to_http_headers() if outcome.decision else {}
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=SubmissionSuccessResponse().model_dump(),
        headers=headers,
    )


def create_contact_router(path: str = "/contact") -> APIRouter:
    router = APIRouter()
    router.add_api_route(
        path,
        submit_contact,
        methods=["POST"],
        response_model=SubmissionSuccessResponse,
        status_code=status.HTTP_200_OK,
        summary="Submit the contact form",
        responses={
            400: {"model": ValidationErrorResponse, "description": "Invalid JSON payload or field validation failed"},
            429: {"model": RateLimitedResponse, "description": "Too many submissions from this client"},
            500: {"model": ErrorResponse, "description": "Message could not be sent"},
        },
    )
    return router
