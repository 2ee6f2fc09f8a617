"""
Redis caching service for the seat listing.

CACHING STRATEGY
================

What we cache:
  - The full seat listing (JSON-serialized SeatResponse list)
  - Cache key: "seats:list"

Why:
  - Every floor-plan render starts with the seat list
  - Seats change rarely (admin edits, blocking, layout moves)

Invalidation strategy:
  - Every seat mutation (create, update, delete, block, unblock, layout)
    deletes all "seats:*" keys
  - TTL-based expiry as safety net (5 minutes)

What we do NOT cache:
  - Availability or bookings. Those must be read from the database at
    decision time, and stale availability would only produce 409s later.

Redis is optional: when disabled or unreachable every call degrades to a
cache miss and the database answers.
"""

import json
from typing import Optional

import redis.asyncio as redis
from deskbooking.core.config import get_settings
from deskbooking.core.logging import get_logger
from deskbooking.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

SEAT_LIST_KEY = "seats:list"

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


async def get_cached_seats() -> Optional[list[dict]]:
    """Retrieve the cached seat listing."""
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(SEAT_LIST_KEY)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=SEAT_LIST_KEY)
            return json.loads(data)
        logger.debug("cache_miss", key=SEAT_LIST_KEY)
    except Exception as e:
        logger.error("cache_get_error", key=SEAT_LIST_KEY, error=str(e))

    return None


async def set_cached_seats(seats: list[dict]) -> None:
    """Cache the seat listing with TTL."""
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(SEAT_LIST_KEY, settings.REDIS_CACHE_TTL, json.dumps(seats, default=str))
        record_cache_operation("set", hit=False)
        logger.debug("cache_set", key=SEAT_LIST_KEY, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=SEAT_LIST_KEY, error=str(e))


async def invalidate_seat_cache() -> None:
    """Drop every cached seat key after a seat mutation."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match="seats:*", count=100):
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
