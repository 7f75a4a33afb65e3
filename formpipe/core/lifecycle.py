"""Application lifecycle management.

This module handles application startup and shutdown: it assembles the
submission services, runs periodic cleanup of expired rate windows for the
memory and file backends, and closes the rate limit store on shutdown.
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI

from formpipe.core.config.settings import Settings
from formpipe.core.logging import logger
from formpipe.domain.rate_limiting.services import RateLimiter
from formpipe.infrastructure.dependency_injection.submission_dependencies import (
    build_submission_services,
)


async def run_window_cleanup(rate_limiter: RateLimiter, window_seconds: int) -> None:
    """Purge expired rate windows once per window length, forever."""
    while True:
        await asyncio.sleep(window_seconds)
        await rate_limiter.cleanup_expired(window_seconds)


def create_lifespan_manager(app_settings: Settings):
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "submission_services", None) is None:
            app.state.submission_services = build_submission_services(app_settings)
        services = app.state.submission_services
        logger.info(
            "application_startup",
            env=app_settings.APP_ENV,
            version=app_settings.VERSION,
            rate_limit_backend=services.rate_limiter.backend_name,
            mail_transport=services.mail_transport.name,
        )

        cleanup_task = None
        if services.rate_limiter.backend_name in ("memory", "file"):
            cleanup_task = asyncio.create_task(
                run_window_cleanup(services.rate_limiter, app_settings.RATE_LIMIT_WINDOW_SECONDS)
            )

        yield

        if cleanup_task is not None:
            cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await cleanup_task
        await services.rate_limiter.close()
        logger.info("application_shutdown", env=app_settings.APP_ENV)

    return lifespan
