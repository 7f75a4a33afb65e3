"""
Redis Connection Module

Provides the asynchronous Redis client used by the distributed rate limiting
backend. Connect and socket timeouts are bounded by REDIS_CONNECT_TIMEOUT so a
slow or unreachable store surfaces as an error instead of blocking a request;
the rate limiter converts such errors into fail-open decisions.

**Security Note**: Use a `rediss://` URL (REDIS_SSL) when Redis is reached over
an untrusted network, and never log the assembled URL since it may carry the
password.

Functions:
    create_redis_client: Builds a client from the application settings.
"""

from typing import Optional

import structlog
from redis.asyncio import Redis

from formpipe.core.config.settings import Settings, settings as default_settings

logger = structlog.get_logger(__name__)


def create_redis_client(app_settings: Optional[Settings] = None) -> Redis:
    """
    Create an asynchronous Redis client.

    The client connects lazily on first use, so creating it never fails even
    when Redis is down.

    Args:
        app_settings: Settings to read the connection from; defaults to the
            application singleton.

    Returns:
        Redis: An asynchronous Redis client instance.
    """
    cfg = app_settings or default_settings
    client = Redis.from_url(
        cfg.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=cfg.REDIS_CONNECT_TIMEOUT,
        socket_timeout=cfg.REDIS_CONNECT_TIMEOUT,
    )
    logger.debug("Redis client created", host=cfg.REDIS_HOST, port=cfg.REDIS_PORT, ssl=cfg.REDIS_SSL)
    return client
