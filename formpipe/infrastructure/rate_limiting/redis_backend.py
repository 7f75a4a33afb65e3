"""
Redis rate limit repository.

Windows are stored as Redis hashes `{start, count}` and updated by a single Lua
script, so the read-check-increment-write sequence is atomic on the server and
correct across any number of worker processes or hosts. The TTL is set only
when a fresh window is written, with a buffer past the window length.
"""

from typing import Any, Dict, Optional

import structlog
from redis.asyncio import Redis
from redis.exceptions import NoScriptError, RedisError

from formpipe.core.exceptions import BackendUnavailableError
from formpipe.domain.rate_limiting.repositories import RateLimitRepository
from formpipe.domain.rate_limiting.value_objects import Decision

logger = structlog.get_logger(__name__)

TTL_BUFFER_SECONDS = 60

# Returns {window_start, count, state} where state is 2 for a fresh window,
# 1 for an incremented window and 0 when the limit is already reached.
FIXED_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local limit = tonumber(ARGV[2])
local window = tonumber(ARGV[3])
local ttl = tonumber(ARGV[4])
local start = tonumber(redis.call('HGET', key, 'start'))
local count = tonumber(redis.call('HGET', key, 'count'))
if start == nil or count == nil or now - start >= window then
    redis.call('HSET', key, 'start', now, 'count', 1)
    redis.call('EXPIRE', key, ttl)
    return {now, 1, 2}
end
if count >= limit then
    return {start, count, 0}
end
count = redis.call('HINCRBY', key, 'count', 1)
return {start, count, 1}
"""


class RedisRateLimitRepository(RateLimitRepository):
    """
    A concrete implementation of RateLimitRepository using Redis for persistence.
    """

    name = "redis"

    def __init__(self, redis_client: Redis, key_prefix: str = "formpipe:rl:"):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._fixed_window_sha: Optional[str] = None

    def _storage_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def _register_scripts(self) -> str:
        """Register the Lua script with Redis once per repository."""
        if self._fixed_window_sha is None:
            self._fixed_window_sha = await self.redis.script_load(FIXED_WINDOW_SCRIPT)
        return self._fixed_window_sha

    async def _run_script(self, *args: Any) -> Any:
        sha = await self._register_scripts()
        try:
            return await self.redis.evalsha(sha, 1, *args)
        except NoScriptError:
            # Script cache was flushed (restart or SCRIPT FLUSH); load it again.
            self._fixed_window_sha = None
            sha = await self._register_scripts()
            return await self.redis.evalsha(sha, 1, *args)

    async def check_and_consume(self, key: str, limit: int, window_seconds: int, now: int) -> Decision:
        ttl = window_seconds + TTL_BUFFER_SECONDS
        try:
            result = await self._run_script(self._storage_key(key), now, limit, window_seconds, ttl)
        except RedisError as e:
            raise BackendUnavailableError(f"Redis rate limit call failed: {e}") from e

        try:
            window_start, count, state = (int(part) for part in result)
        except (TypeError, ValueError) as e:
            raise BackendUnavailableError(f"Unexpected Redis script result: {result!r}") from e

        if state == 2:
            return Decision.allow(limit - 1, window_seconds)
        reset_in = window_seconds - (now - window_start)
        if state == 0:
            return Decision.block(reset_in)
        return Decision.allow(limit - count, reset_in)

    async def reset(self, key: str) -> None:
        try:
            await self.redis.delete(self._storage_key(key))
        except RedisError as e:
            raise BackendUnavailableError(f"Redis reset failed: {e}") from e

    async def cleanup_expired(self, now: int, window_seconds: int) -> int:
        """Redis expires windows through their TTL; nothing to remove here."""
        return 0

    async def close(self) -> None:
        await self.redis.aclose()

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self.redis.ping()
        except RedisError as e:
            logger.warning("Redis health check failed", error=str(e))
            return {"healthy": False, "error": str(e)}
        return {"healthy": True}
