"""
Redis Connection Module

This module provides the asynchronous Redis client backing the shared
rate-limit windows when ``RATE_LIMIT_BACKEND=redis``. One client (and its
connection pool) is created at startup and closed on shutdown.

**Security Note**: Use ``rediss://`` (REDIS_SSL=true) when connecting over an
untrusted network. Never log the connection URL, it may contain the password.

Functions:
    create_redis_client: Builds a client from the application settings.
    close_redis_client: Closes a client created by `create_redis_client`.
"""

from typing import Optional

import structlog
from redis.asyncio import Redis

from recovery_guard.core.config.settings import settings

logger = structlog.get_logger(__name__)


def create_redis_client(url: Optional[str] = None) -> Redis:
    """
    Creates an asynchronous Redis client.

    Args:
        url: Connection URL, defaults to ``settings.REDIS_URL``.

    Returns:
        Redis: A client decoding responses to ``str``.
    """
    client = Redis.from_url(url or settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    logger.debug("redis_client_created")
    return client


async def close_redis_client(client: Redis) -> None:
    await client.aclose()
    logger.debug("redis_client_closed")
