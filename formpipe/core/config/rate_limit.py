"""
Rate limiting settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitSettings(BaseSettings):
    """
    Defines how submissions are rate limited per client.

    RATE_LIMIT_BACKEND selects the store:
        - "redis": shared counter, correct across processes and hosts.
        - "memory": in-process map, correct within a single worker only.
        - "file": one locked JSON file per client, correct across processes on
          a single host.
    """
    RATE_LIMIT_BACKEND: str = Field(default="memory", pattern="^(redis|memory|file)$")
    RATE_LIMIT_PER_WINDOW: int = Field(default=5, ge=1)
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=60, ge=1)
    RATE_LIMIT_STORAGE_DIR: str = "var/rate_limits"
    RATE_LIMIT_OPERATION_TIMEOUT: float = Field(default=2.0, gt=0, le=10)
    RATE_LIMIT_LOCK_TIMEOUT: float = Field(default=1.0, gt=0, le=10)
    RATE_LIMIT_KEY_SALT: str = "formpipe_rl"
    REQUEST_DEADLINE_SECONDS: float = Field(default=5.0, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )
