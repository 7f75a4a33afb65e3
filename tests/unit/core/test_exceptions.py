"""Tests for the exception hierarchy."""

import pytest

from formpipe.core.exceptions import (
    BackendUnavailableError,
    FormpipeError,
    MailTransportError,
    MalformedRequestError,
    RateLimitExceededError,
    SubmissionValidationError,
)


pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "exc,code",
    [
        (BackendUnavailableError(), "backend_unavailable"),
        (RateLimitExceededError(retry_after=5), "rate_limit_exceeded"),
        (SubmissionValidationError([]), "validation_failed"),
        (MalformedRequestError(), "malformed_request"),
        (MailTransportError("smtp down"), "mail_transport_error"),
    ],
)
def test_codes_and_hierarchy(exc, code):
    assert isinstance(exc, FormpipeError)
    assert exc.code == code
    assert str(exc) == exc.message


def test_payload_attributes():
    assert RateLimitExceededError(retry_after=12).retry_after == 12
    assert MalformedRequestError(detail="bad").message == "Invalid JSON payload"
    assert SubmissionValidationError(["x"]).failures == ["x"]
