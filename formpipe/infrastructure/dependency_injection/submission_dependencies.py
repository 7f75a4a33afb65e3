"""Dependency wiring for the submission endpoint.

The application builds one `SubmissionServices` bundle at startup (see
`formpipe.core.lifecycle`) and stores it on `app.state`. Routes receive it
through `get_submission_services`, which tests replace with
`app.dependency_overrides` or by passing a prepared bundle to
`create_application`.
"""

import time
from dataclasses import dataclass
from typing import Annotated, Callable, Optional

from fastapi import Depends, Request

from formpipe.core.config.settings import Settings
from formpipe.domain.interfaces.email import MailTransport
from formpipe.domain.rate_limiting.repositories import RateLimitRepository
from formpipe.domain.rate_limiting.services import BackendFailureTally, RateLimiter
from formpipe.domain.submission.admission import AdmissionGate
from formpipe.domain.submission.composer import EmailComposer
from formpipe.domain.validation.constraint_validator import ConstraintValidator
from formpipe.infrastructure.rate_limiting.factory import create_rate_limit_repository
from formpipe.infrastructure.services.email.smtp_transport import create_mail_transport


@dataclass
class SubmissionServices:
    settings: Settings
    rate_limiter: RateLimiter
    gate: AdmissionGate
    composer: EmailComposer
    mail_transport: MailTransport
    failure_tally: BackendFailureTally


def build_submission_services(
    app_settings: Settings,
    repository: Optional[RateLimitRepository] = None,
    mail_transport: Optional[MailTransport] = None,
    clock: Callable[[], float] = time.time,
) -> SubmissionServices:
    """Assemble the admission pipeline from settings.

    Args:
        app_settings: Application settings.
        repository: Rate limit storage; defaults to the one RATE_LIMIT_BACKEND selects.
        mail_transport: Mail transport; defaults to logging in test mode, SMTP otherwise.
        clock: Wall clock used by the rate limiter.
    """
    tally = BackendFailureTally()
    rate_limiter = RateLimiter(
        repository or create_rate_limit_repository(app_settings),
        operation_timeout=app_settings.RATE_LIMIT_OPERATION_TIMEOUT,
        clock=clock,
        on_backend_failure=tally,
    )
    validator = ConstraintValidator(
        app_settings.build_constraint_set(),
        phone_field=app_settings.FORM_PHONE_FIELD,
    )
    gate = AdmissionGate(
        rate_limiter,
        validator,
        limit=app_settings.RATE_LIMIT_PER_WINDOW,
        window_seconds=app_settings.RATE_LIMIT_WINDOW_SECONDS,
        key_salt=app_settings.RATE_LIMIT_KEY_SALT,
    )
    return SubmissionServices(
        settings=app_settings,
        rate_limiter=rate_limiter,
        gate=gate,
        composer=EmailComposer(default_subject=app_settings.FORM_DEFAULT_SUBJECT),
        mail_transport=mail_transport or create_mail_transport(app_settings),
        failure_tally=tally,
    )


def get_submission_services(request: Request) -> SubmissionServices:
    return request.app.state.submission_services


SubmissionServicesDep = Annotated[SubmissionServices, Depends(get_submission_services)]
