"""
Rate Limiting Domain Services

The RateLimiter is the single entry point to rate state. It picks up the
current time, delegates the window step to the injected repository, and turns
any storage failure into a fail-open decision so that submissions keep flowing
when the store is down.
"""

from __future__ import annotations

import asyncio
import time
from collections import Counter
from typing import Any, Callable, Dict, Optional

import structlog

from .repositories import RateLimitRepository
from .value_objects import Decision

logger = structlog.get_logger(__name__)

BackendFailureHook = Callable[[str, BaseException], None]


class RateLimiter:
    """
    Per-client fixed window limiter over a pluggable repository.

    Availability is preferred over strict enforcement: a backend that raises or
    exceeds its time budget never blocks a request. Such failures are logged and
    reported to the optional `on_backend_failure` hook.
    """

    def __init__(
        self,
        repository: RateLimitRepository,
        operation_timeout: float = 2.0,
        clock: Callable[[], float] = time.time,
        on_backend_failure: Optional[BackendFailureHook] = None,
    ):
        self.repository = repository
        self.operation_timeout = operation_timeout
        self._clock = clock
        self._on_backend_failure = on_backend_failure

    @property
    def backend_name(self) -> str:
        return self.repository.name

    def now(self) -> int:
        return int(self._clock())

    async def check_and_consume(
        self,
        client_key: str,
        limit: int,
        window_seconds: int = 60,
        timeout: Optional[float] = None,
    ) -> Decision:
        """
        Check the client's window and consume one slot when allowed.

        Args:
            client_key: Derived (hashed) client key
            limit: Maximum requests per window
            window_seconds: Window length in seconds
            timeout: Time budget for the backend call; defaults to the
                limiter's operation timeout. A budget that is already spent
                fails open immediately.

        Returns:
            Decision for the request; never raises for backend failures.
        """
        if limit < 1:
            raise ValueError("limit must be positive")
        if window_seconds < 1:
            raise ValueError("window_seconds must be positive")

        budget = self.operation_timeout if timeout is None else min(timeout, self.operation_timeout)
        if budget <= 0:
            return self._fail_open(
                client_key, limit, window_seconds, asyncio.TimeoutError("request deadline exceeded")
            )

        try:
            decision = await asyncio.wait_for(
                self.repository.check_and_consume(client_key, limit, window_seconds, self.now()),
                timeout=budget,
            )
        except Exception as e:
            return self._fail_open(client_key, limit, window_seconds, e)

        if not decision.allowed:
            logger.warning(
                "rate_limit_exceeded",
                backend=self.backend_name,
                client_key=client_key[:16],
                reset_in_seconds=decision.reset_in_seconds,
            )
        return decision

    async def reset(self, client_key: str) -> bool:
        """Administrative reset of a client's window; returns False on storage failure."""
        try:
            await asyncio.wait_for(self.repository.reset(client_key), timeout=self.operation_timeout)
            return True
        except Exception as e:
            logger.error("rate_limit_reset_failed", backend=self.backend_name, error=str(e))
            return False

    async def cleanup_expired(self, window_seconds: int = 60) -> int:
        """Purge windows that expired; returns the number removed, 0 on storage failure."""
        try:
            removed = await self.repository.cleanup_expired(self.now(), window_seconds)
        except Exception as e:
            logger.warning("rate_window_cleanup_failed", backend=self.backend_name, error=str(e))
            return 0
        if removed:
            logger.debug("rate_window_cleanup", backend=self.backend_name, removed=removed)
        return removed

    async def close(self) -> None:
        try:
            await self.repository.close()
        except Exception as e:
            logger.error("rate_limit_close_failed", backend=self.backend_name, error=str(e))

    async def health_check(self) -> Dict[str, Any]:
        try:
            status = await asyncio.wait_for(self.repository.health_check(), timeout=self.operation_timeout)
        except Exception as e:
            return {"backend": self.backend_name, "healthy": False, "error": str(e)}
        return {"backend": self.backend_name, **status}

    def _fail_open(
        self,
        client_key: str,
        limit: int,
        window_seconds: int,
        error: BaseException,
    ) -> Decision:
        logger.warning(
            "rate_limit_backend_failed_open",
            backend=self.backend_name,
            client_key=client_key[:16],
            error_type=type(error).__name__,
            error=str(error),
        )
        if self._on_backend_failure is not None:
            try:
                self._on_backend_failure(self.backend_name, error)
            except Exception as hook_error:
                logger.error("rate_limit_failure_hook_error", error=str(hook_error))
        return Decision.open_fallback(limit, window_seconds)


class BackendFailureTally:
    """Counts fail-open events per backend; pass an instance as `on_backend_failure`."""

    def __init__(self):
        self.counts: Counter[str] = Counter()
        self.last_error: Optional[str] = None

    def __call__(self, backend_name: str, error: BaseException) -> None:
        self.counts[backend_name] += 1
        self.last_error = f"{type(error).__name__}: {error}"

    @property
    def total(self) -> int:
        return sum(self.counts.values())
