"""
In-process rate limit repository.

Windows live in a dict owned by the repository instance. The
read-check-increment-write cycle for a key runs under one lock from a fixed
pool of striped locks chosen by the key's hash, so memory for locks stays
constant however many clients are seen, and unrelated clients rarely wait on
each other. State is not shared between worker processes; use the Redis or
file repository for that.
"""

import threading
from typing import Any, Dict, List

from formpipe.domain.rate_limiting.repositories import RateLimitRepository, apply_window
from formpipe.domain.rate_limiting.value_objects import Decision, RateWindow

LOCK_STRIPES = 64


class InMemoryRateLimitRepository(RateLimitRepository):
    name = "memory"

    def __init__(self, lock_stripes: int = LOCK_STRIPES):
        if lock_stripes < 1:
            raise ValueError("lock_stripes must be positive")
        self._windows: Dict[str, RateWindow] = {}
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(lock_stripes)]

    def _lock_for(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]

    def consume(self, key: str, limit: int, window_seconds: int, now: int) -> Decision:
        """Synchronous window step; safe to call from several threads at once."""
        with self._lock_for(key):
            to_store, decision = apply_window(self._windows.get(key), now, limit, window_seconds)
            if to_store is not None:
                self._windows[key] = to_store
            return decision

    async def check_and_consume(self, key: str, limit: int, window_seconds: int, now: int) -> Decision:
        return self.consume(key, limit, window_seconds, now)

    async def reset(self, key: str) -> None:
        with self._lock_for(key):
            self._windows.pop(key, None)

    async def cleanup_expired(self, now: int, window_seconds: int) -> int:
        removed = 0
        # Snapshot: consume() may insert keys while this loop runs.
        for key in list(self._windows):
            with self._lock_for(key):
                window = self._windows.get(key)
                if window is not None and window.is_expired(now, window_seconds):
                    del self._windows[key]
                    removed += 1
        return removed

    async def health_check(self) -> Dict[str, Any]:
        return {"healthy": True, "tracked_clients": len(self._windows)}
