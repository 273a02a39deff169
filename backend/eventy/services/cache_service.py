"""
Redis caching for the public catalog reads.

What we cache:
  - Event listing responses, keyed by search term and pagination
    ("events:list:search=jazz&page=1&size=20")
  - The top-booked ranking ("events:top:limit=3&confirmed=False")

Invalidation:
  - Any event create/update/delete and any booking create/cancel deletes
    every "events:*" key; bookings move the top-booked counts
  - TTL expiry as a safety net

Redis is optional. When it is disabled or unreachable every call degrades
to a miss and the database answers.
"""

import json
from typing import Any, Optional

import redis.asyncio as redis
from eventy.core.config import get_settings
from eventy.core.metrics import record_cache_operation
from eventy.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

CACHE_PREFIX = "events:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def make_event_list_key(search: Optional[str], page: Optional[int], page_size: int) -> str:
    term = (search or "").strip().lower()
    return f"{CACHE_PREFIX}list:search={term}&page={page or 'all'}&size={page_size}"


def make_top_booked_key(limit: int, confirmed_only: bool) -> str:
    return f"{CACHE_PREFIX}top:limit={limit}&confirmed={confirmed_only}"


async def get_cached(key: str) -> Optional[Any]:
    """Return the cached JSON value for key, or None on miss/error."""
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached(key: str, data: Any) -> None:
    """Cache a JSON-serialisable value with the configured TTL."""
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """Delete every cached catalog response."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{CACHE_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
