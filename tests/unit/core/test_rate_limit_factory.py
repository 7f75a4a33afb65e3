"""Tests for choosing the rate limit repository from settings."""

import pytest

from formpipe.core.config.settings import Settings
from formpipe.infrastructure.rate_limiting.factory import create_rate_limit_repository
from formpipe.infrastructure.rate_limiting.file_backend import FileRateLimitRepository
from formpipe.infrastructure.rate_limiting.memory_backend import InMemoryRateLimitRepository
from formpipe.infrastructure.rate_limiting.redis_backend import RedisRateLimitRepository


pytestmark = pytest.mark.unit


class TestCreateRateLimitRepository:
    def test_memory(self):
        repository = create_rate_limit_repository(Settings(RATE_LIMIT_BACKEND="memory"))
        assert isinstance(repository, InMemoryRateLimitRepository)

    def test_file(self, tmp_path):
        settings = Settings(RATE_LIMIT_BACKEND="file", RATE_LIMIT_STORAGE_DIR=str(tmp_path), RATE_LIMIT_LOCK_TIMEOUT=0.5)
        repository = create_rate_limit_repository(settings)
        assert isinstance(repository, FileRateLimitRepository)
        assert repository.storage_dir == tmp_path
        assert repository.lock_timeout == 0.5

    def test_redis_client_is_lazy(self):
        repository = create_rate_limit_repository(Settings(RATE_LIMIT_BACKEND="redis", REDIS_HOST="nowhere.invalid"))
        assert isinstance(repository, RedisRateLimitRepository)
        assert repository.name == "redis"
