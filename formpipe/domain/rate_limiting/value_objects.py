"""
Rate Limiting Value Objects

Immutable value objects representing core concepts in the rate limiting domain.

Value Objects:
- RateWindow: Start and request count of one client's current window
- Decision: Outcome of one check-and-consume call
- derive_client_key: One-way key derivation from a client network address

Design Principles:
- Immutability: All value objects are immutable after creation
- Validation: Business rules enforced at construction time
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True, slots=True)
class RateWindow:
    """
    A fixed window that starts at the client's first request and resets on expiry.

    Business Rules:
    - A window may only be incremented while it is still open
      (now - window_start < window_seconds)
    - An expired window is replaced, never incremented
    """
    window_start: int
    count: int

    def __post_init__(self):
        if self.count < 1:
            raise ValueError("A stored window always holds at least one request")

    def elapsed(self, now: int) -> int:
        return now - self.window_start

    def is_expired(self, now: int, window_seconds: int) -> bool:
        return self.elapsed(now) >= window_seconds

    def incremented(self) -> RateWindow:
        return RateWindow(window_start=self.window_start, count=self.count + 1)

    @classmethod
    def opened_at(cls, now: int) -> RateWindow:
        return cls(window_start=now, count=1)

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.window_start, "count": self.count}

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> RateWindow:
        """Rebuild a window from its stored form; raises ValueError on bad data."""
        try:
            return cls(window_start=int(data["start"]), count=int(data["count"]))
        except (KeyError, TypeError, OverflowError) as e:
            raise ValueError(f"Invalid stored rate window: {data!r}") from e


@dataclass(frozen=True, slots=True)
class Decision:
    """
    Result of a rate limit check.

    `fail_open` marks decisions produced because the backend could not be used;
    they always allow the request.
    """
    allowed: bool
    remaining: int
    reset_in_seconds: int
    fail_open: bool = False

    @classmethod
    def allow(cls, remaining: int, reset_in_seconds: int) -> Decision:
        return cls(allowed=True, remaining=remaining, reset_in_seconds=max(1, reset_in_seconds))

    @classmethod
    def block(cls, reset_in_seconds: int) -> Decision:
        return cls(allowed=False, remaining=0, reset_in_seconds=max(1, reset_in_seconds))

    @classmethod
    def open_fallback(cls, limit: int, window_seconds: int) -> Decision:
        """Factory for decisions taken when the backend failed (fail open)"""
        return cls(
            allowed=True,
            remaining=limit,
            reset_in_seconds=window_seconds,
            fail_open=True,
        )

    def to_http_headers(self) -> Dict[str, str]:
        """Convert the decision to rate limit response headers.

        - X-RateLimit-Remaining: requests left in the window
        - X-RateLimit-Reset: seconds until the window resets
        - Retry-After: seconds to wait (only when blocked)
        """
        headers = {
            "X-RateLimit-Remaining": str(max(0, self.remaining)),
            "X-RateLimit-Reset": str(self.reset_in_seconds),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.reset_in_seconds)
        return headers


def derive_client_key(client_address: str, salt: str = "formpipe_rl") -> str:
    """
    Derive the rate limiting key for a client address.

    The key is a salted SHA-256 digest so that raw addresses are never stored
    and the key space stays bounded.
    """
    digest = hashlib.sha256(f"{salt}:{client_address}".encode("utf-8")).hexdigest()
    return f"{salt}_{digest}"
