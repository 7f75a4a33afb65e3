"""
Rate Limiting Domain Repositories

Repository interface for the storage that holds rate windows. Implementations
live in `formpipe.infrastructure.rate_limiting` (Redis, in-process memory,
locked files); the domain only depends on this contract.

Every implementation must serialize the read-check-increment-write sequence
per client key, and must signal storage problems by raising. The RateLimiter
service converts those failures into fail-open decisions.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from .value_objects import Decision, RateWindow


def apply_window(
    current: Optional[RateWindow],
    now: int,
    limit: int,
    window_seconds: int,
) -> Tuple[Optional[RateWindow], Decision]:
    """
    Reset-on-expiry window step shared by every backend.

    Args:
        current: The stored window, or None when the key has no window.
        now: Current time in whole epoch seconds.
        limit: Maximum requests per window.
        window_seconds: Window length.

    Returns:
        Tuple of the window to store (None when nothing must be written) and
        the decision for this request.
    """
    if current is None or current.is_expired(now, window_seconds):
        return RateWindow.opened_at(now), Decision.allow(limit - 1, window_seconds)

    reset_in = window_seconds - current.elapsed(now)
    if current.count >= limit:
        return None, Decision.block(reset_in)

    return current.incremented(), Decision.allow(limit - current.count - 1, reset_in)


class RateLimitRepository(ABC):
    """
    Storage contract for rate windows.

    Implementations handle the specific storage technology and the locking or
    atomicity it needs; the window rules themselves come from `apply_window`
    (or an equivalent atomic script).
    """

    name: str = "abstract"

    @abstractmethod
    async def check_and_consume(
        self,
        key: str,
        limit: int,
        window_seconds: int,
        now: int,
    ) -> Decision:
        """
        Evaluate and, when allowed, record one request for a key.

        Args:
            key: The derived client key
            limit: Maximum requests per window
            window_seconds: Window length
            now: Current time in whole epoch seconds

        Returns:
            Decision for the request

        Raises:
            BackendUnavailableError: When the store cannot be used
        """

    @abstractmethod
    async def reset(self, key: str) -> None:
        """
        Discard the stored window for a key.

        Args:
            key: The derived client key
        """

    @abstractmethod
    async def cleanup_expired(self, now: int, window_seconds: int) -> int:
        """
        Remove windows that expired, to keep storage bounded.

        Args:
            now: Current time in whole epoch seconds
            window_seconds: Window length

        Returns:
            Number of windows removed
        """

    async def close(self) -> None:
        """Release connections or handles held by the repository."""

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the storage.

        Returns:
            Health status information
        """
