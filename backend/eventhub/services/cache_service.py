"""
Redis caching for the published events listing.

CACHING STRATEGY
================

What we cache:
  - The join tab source list (all published, join-tab-visible events),
    JSON-serialized under a single key: "events:published"

Why:
  - It is the only anonymous read and by far the most frequent one
  - It changes only when an organizer publishes, hides, edits or re-images

Invalidation:
  - The routes for those four actions delete the key after a successful write
  - TTL is the safety net for writes that bypass the API

The time-based join tab cutoff is applied after the cache, so a cached list
never shows an expired event.

Redis is optional: every helper degrades to a no-op when it is disabled or
unreachable.
"""

import json
from typing import Optional

import redis.asyncio as redis
from eventhub.core.config import get_settings
from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

PUBLISHED_EVENTS_KEY = "events:published"

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
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


async def get_cached_published_events() -> Optional[list[dict]]:
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(PUBLISHED_EVENTS_KEY)
        record_cache_operation("get", hit=data is not None)
        if data:
            return json.loads(data)
    except Exception as e:
        logger.error("cache_get_error", key=PUBLISHED_EVENTS_KEY, error=str(e))

    return None


async def set_cached_published_events(events: list[dict]) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(PUBLISHED_EVENTS_KEY, settings.REDIS_CACHE_TTL, json.dumps(events, default=str))
    except Exception as e:
        logger.error("cache_set_error", key=PUBLISHED_EVENTS_KEY, error=str(e))


async def invalidate_published_events() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        deleted = await client.delete(PUBLISHED_EVENTS_KEY)
        logger.info("cache_invalidated", key=PUBLISHED_EVENTS_KEY, keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Redis statistics for the health endpoint."""
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
