"""Main application settings and configuration management.

This module composes the settings from the different modules (app, redis, rate
limiting, email, form) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, email test mode enabled
- Test: Uses .env.test, email test mode enabled
- Staging/Production: Uses .env.staging/.env.production, emails are sent
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .email import EmailSettings
from .form import FormSettings
from .rate_limit import RateLimitSettings
from .redis import RedisSettings

logger = logging.getLogger(__name__)


class Settings(AppSettings, RedisSettings, RateLimitSettings, EmailSettings, FormSettings):
    """The main settings class that aggregates all application configurations.

    Usage:
        - Access settings via the singleton instance `settings` throughout the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Args:
            env: Environment name
        """
        if env in ("development", "test"):
            self.EMAIL_TEST_MODE = True
        if env == "development":
            self.DEBUG = True

        logger.info(
            "Application running in %s environment (email test mode: %s, rate limit backend: %s)",
            env,
            self.EMAIL_TEST_MODE,
            self.RATE_LIMIT_BACKEND,
        )


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if not Path(".env").exists():
        logger.warning(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


# Singleton instance used across the application.
settings = create_settings()
