import logging

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


async def init_redis(redis_url: str) -> aioredis.Redis | None:
    """Create an async Redis client for action event publishing.

    Returns ``None`` when Redis is unreachable: events are best-effort, so the
    gateway keeps serving discovery and dispatch without them.
    """
    client = aioredis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )
    try:
        await client.ping()
    except aioredis.RedisError:
        logger.warning("Redis unavailable at %s; action events disabled", redis_url, exc_info=True)
        await client.aclose()
        return None
    return client


async def close_redis(client: aioredis.Redis | None) -> None:
    """Close the async Redis client connection, if one was opened."""
    if client is not None:
        await client.aclose()
