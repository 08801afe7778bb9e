"""
Redis client singleton for booking draft autosave.

Redis Key Patterns:
    - Companion roster: booking:{owner_id}:{product_id}:companions
    - TTL: ROSTER_CACHE_TTL_SECONDS (24 hours by default)
"""

import logging
from functools import lru_cache

import redis.asyncio as redis
from redis import ConnectionError as RedisConnectionError

from shared.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_redis_client() -> "redis.Redis[str]":
    """
    Get cached Redis client instance.

    Returns:
        Redis async client configured with connection pool and retry logic

    Note:
        Uses @lru_cache to ensure only one Redis connection is created.
    """
    settings = get_settings()

    try:
        client = redis.from_url(
            settings.REDIS_URL,
            max_connections=10,
            decode_responses=True,
            retry_on_timeout=True,
            health_check_interval=30,
        )

        logger.info(f"Redis client initialized: {settings.REDIS_URL}")
        return client

    except RedisConnectionError as e:
        logger.error(
            f"Redis connection failed: {e}. Roster autosave unavailable.",
            exc_info=True
        )
        raise


async def close_redis_client() -> None:
    """
    Close Redis connection gracefully.

    Note:
        Should be called during application shutdown.
    """
    try:
        client = get_redis_client()
        await client.close()
        logger.info("Redis client closed")
    except Exception as e:
        logger.warning(f"Error closing Redis client: {e}")
