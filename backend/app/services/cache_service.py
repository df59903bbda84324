"""
Redis caching service for event listings.

CACHING STRATEGY
================

What we cache:
  - Event listing responses (filtered, paginated, JSON-serialized)
  - Key pattern: "events:list:{sha1 of the normalized query}"

Invalidation:
  - Any ticket sale, cancellation or event creation deletes every
    "events:list:*" key (sold counts and the catalog change)
  - TTL expiry as a safety net

Single-event reads are never cached: they carry live `sold` counts and
bump the view counter on every read.

Redis is optional. When it is disabled or unreachable every function here
degrades to a no-op and the database answers.
"""

import hashlib
import json
from typing import Any, Optional

import redis.asyncio as redis
from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.metrics import record_cache_operation, redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
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
        except redis.RedisError as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            await client.aclose()
            return None
        _redis_client = client
        logger.info("redis_connected", url=settings.REDIS_URL)

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def make_event_list_key(**params: Any) -> str:
    normalized = json.dumps(
        {k: v for k, v in sorted(params.items()) if v is not None},
        sort_keys=True,
        default=str,
    )
    digest = hashlib.sha1(normalized.encode("utf-8")).hexdigest()
    return f"{EVENT_LIST_PREFIX}{digest}"


async def get_cached_events(key: str) -> Optional[dict]:
    """Retrieve cached event list response."""
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(key)
    except redis.RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_events(key: str, data: dict) -> None:
    """Cache event list response with TTL."""
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except redis.RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """Delete all cached event listings (SCAN over the key prefix)."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except redis.RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for the health endpoint."""
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
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}
