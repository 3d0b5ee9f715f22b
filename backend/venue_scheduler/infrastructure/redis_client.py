"""
Redis client for the durable record store backend.
Separated from scheduling logic for clean architecture.
"""

from typing import Optional

import redis.asyncio as redis
from venue_scheduler.core.config import get_settings
from venue_scheduler.core.logging import get_logger

logger = get_logger(__name__)

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create the shared Redis connection, verifying it with PING."""
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            await client.ping()
        except Exception as e:
            logger.error("redis_connection_failed", url=settings.REDIS_URL, error=str(e))
            await client.aclose()
            raise
        logger.info("redis_connected", url=settings.REDIS_URL)
        _redis_client = client

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
