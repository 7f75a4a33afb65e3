"""Rate Limiting Domain Module

Fixed window rate limiting keyed by a hashed client identifier:

- Value Objects: RateWindow, Decision and client key derivation
- Repositories: Storage contract plus the shared window step (`apply_window`)
- Domain Services: RateLimiter, the only entry point to rate state
"""

from .repositories import RateLimitRepository, apply_window
from .services import BackendFailureTally, RateLimiter
from .value_objects import Decision, RateWindow, derive_client_key

__all__ = [
    "Decision",
    "RateWindow",
    "derive_client_key",
    "apply_window",
    "RateLimitRepository",
    "RateLimiter",
    "BackendFailureTally",
]
