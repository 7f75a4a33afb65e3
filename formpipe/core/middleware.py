"""Middleware configuration for the FastAPI application.

CORS is the only middleware: the contact form is posted cross-origin from the
site that embeds it, and preflight `OPTIONS` requests are answered here.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formpipe.core.config.settings import Settings


def configure_middleware(app: FastAPI, app_settings: Settings) -> None:
    """Configure all middleware for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance
        app_settings (Settings): Settings providing ALLOWED_ORIGINS
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["Retry-After", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )
