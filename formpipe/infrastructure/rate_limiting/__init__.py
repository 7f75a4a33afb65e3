"""Rate limit repository implementations (Redis, in-process memory, locked files)."""

from .factory import create_rate_limit_repository
from .file_backend import FileRateLimitRepository
from .memory_backend import InMemoryRateLimitRepository
from .redis_backend import RedisRateLimitRepository

__all__ = [
    "create_rate_limit_repository",
    "FileRateLimitRepository",
    "InMemoryRateLimitRepository",
    "RedisRateLimitRepository",
]
