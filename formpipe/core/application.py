"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a properly configured FastAPI application
with middleware, exception handlers, and routers registered.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from formpipe.adapters.api.v1 import create_api_router
from formpipe.core.config.settings import Settings, settings as default_settings
from formpipe.core.handlers import register_exception_handlers
from formpipe.core.lifecycle import create_lifespan_manager
from formpipe.core.middleware import configure_middleware
from formpipe.infrastructure.dependency_injection.submission_dependencies import SubmissionServices


def create_application(
    app_settings: Optional[Settings] = None,
    services: Optional[SubmissionServices] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; defaults to the application singleton.
        services: Prebuilt submission services. When omitted they are built
            from settings at startup.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    cfg = app_settings or default_settings
    app = FastAPI(
        title=cfg.PROJECT_NAME,
        version=cfg.VERSION,
        description="Contact form submission gateway with rate limiting and field validation.",
        docs_url="/docs" if cfg.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if cfg.DEBUG else None,
        lifespan=create_lifespan_manager(cfg),
        default_response_class=JSONResponse,
    )
    app.state.settings = cfg
    app.state.submission_services = services

    configure_middleware(app, cfg)
    register_exception_handlers(app)
    app.include_router(create_api_router(cfg.FORM_ENDPOINT_PATH), prefix="/api/v1")

    return app
