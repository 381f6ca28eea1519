# foodmap/db/redis.py
import logging

import redis.asyncio as redis
from foodmap.core.config import get_settings

logger = logging.getLogger(__name__)

redis_client: redis.Redis | None = None


async def connect():
    """
    Connect Redis when REDIS_URL is set.
    Redis only backs the store read cache, so a missing or unreachable server
    is logged and the app runs without it.
    """
    global redis_client
    settings = get_settings()
    if not settings.REDIS_URL:
        logger.info("No REDIS_URL configured, store cache disabled")
        redis_client = None
        return

    try:
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        await redis_client.ping()
        logger.info("Redis connected")
    except Exception as e:
        logger.warning("Failed to connect to Redis, store cache disabled: %s", e)
        redis_client = None


async def disconnect():
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis disconnected")


def get_redis() -> redis.Redis | None:
    """None when Redis is not configured or unavailable."""
    return redis_client
