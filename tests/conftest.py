import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient

from formpipe.core.application import create_application
from formpipe.core.config.settings import Settings
from formpipe.domain.validation.constraints import ConstraintSet
from formpipe.infrastructure.dependency_injection.submission_dependencies import build_submission_services
from formpipe.infrastructure.rate_limiting.memory_backend import InMemoryRateLimitRepository
from formpipe.infrastructure.services.email.logging_transport import LoggingMailTransport


class FakeClock:
    """Wall clock stand-in returning whole seconds that tests advance by hand."""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> float:
        return float(self.now)

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def contact_rules():
    return {
        "replyTo": {"required": True, "isEmail": True},
        "subject": {"required": True, "minLength": 3, "maxLength": 50},
        "message": {"required": True, "minLength": 10},
        "phoneNumber": {"phoneValidationMode": "e164"},
    }


@pytest.fixture
def constraint_set(contact_rules):
    return ConstraintSet.from_config(contact_rules)


@pytest.fixture
def test_settings(contact_rules, tmp_path):
    return Settings(
        APP_ENV="test",
        FORM_RULES=contact_rules,
        RATE_LIMIT_BACKEND="memory",
        RATE_LIMIT_PER_WINDOW=3,
        RATE_LIMIT_WINDOW_SECONDS=60,
        RATE_LIMIT_STORAGE_DIR=str(tmp_path / "rate_limits"),
        EMAIL_FROM_EMAIL="noreply@example.com",
        EMAIL_TO_EMAIL="inbox@example.com",
    )


@pytest.fixture
def mail_transport():
    return LoggingMailTransport()


@pytest.fixture
def submission_services(test_settings, mail_transport, clock):
    return build_submission_services(
        test_settings,
        repository=InMemoryRateLimitRepository(),
        mail_transport=mail_transport,
        clock=clock,
    )


@pytest.fixture
def client(test_settings, submission_services):
    app = create_application(test_settings, services=submission_services)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_payload():
    return {
        "replyTo": "jane.doe@example.com",
        "fields": [
            {"key": "subject", "value": "Project inquiry"},
            {"key": "message", "value": "Hello,\nI would like a quote for <b>two</b> sites."},
            {"key": "phoneNumber", "value": "+14155552671"},
        ],
    }
