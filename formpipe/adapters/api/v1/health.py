from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from pydantic import BaseModel

from formpipe.infrastructure.dependency_injection.submission_dependencies import SubmissionServicesDep

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    services: Dict[str, Any]
    timestamp: datetime


@router.get("", response_model=HealthResponse)
async def health_check(services: SubmissionServicesDep) -> HealthResponse:
    """
    Report rate limit backend health and fail-open counts.

    The gateway keeps accepting submissions while the backend is down, so an
    unhealthy backend degrades the status instead of failing it.
    """
    rate_limit = await services.rate_limiter.health_check()
    rate_limit["fail_open_events"] = services.failure_tally.total
    if services.failure_tally.last_error:
        rate_limit["last_failure"] = services.failure_tally.last_error

    return HealthResponse(
        status="ok" if rate_limit.get("healthy") else "degraded",
        env=services.settings.APP_ENV,
        services={
            "rate_limit": rate_limit,
            "mail_transport": {"name": services.mail_transport.name},
        },
        timestamp=datetime.now(timezone.utc),
    )
