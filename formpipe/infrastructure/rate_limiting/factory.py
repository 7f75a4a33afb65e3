"""Builds the rate limit repository selected by RATE_LIMIT_BACKEND."""

from typing import Optional

import structlog

from formpipe.core.config.settings import Settings, settings as default_settings
from formpipe.domain.rate_limiting.repositories import RateLimitRepository
from formpipe.infrastructure.rate_limiting.file_backend import FileRateLimitRepository
from formpipe.infrastructure.rate_limiting.memory_backend import InMemoryRateLimitRepository
from formpipe.infrastructure.rate_limiting.redis_backend import RedisRateLimitRepository
from formpipe.infrastructure.redis import create_redis_client

logger = structlog.get_logger(__name__)


def create_rate_limit_repository(app_settings: Optional[Settings] = None) -> RateLimitRepository:
    cfg = app_settings or default_settings
    backend = cfg.RATE_LIMIT_BACKEND

    if backend == "redis":
        repository: RateLimitRepository = RedisRateLimitRepository(create_redis_client(cfg))
    elif backend == "file":
        repository = FileRateLimitRepository(cfg.RATE_LIMIT_STORAGE_DIR, lock_timeout=cfg.RATE_LIMIT_LOCK_TIMEOUT)
    elif backend == "memory":
        repository = InMemoryRateLimitRepository()
    else:
        raise ValueError(f"Unsupported rate limit backend: {backend}")

    logger.info("Rate limit repository selected", backend=repository.name)
    return repository
