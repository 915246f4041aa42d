"""Redis cache for aggregate reports.

Keys:
- agg:<report>  JSON rows of one report (tags, top_stores), expiring after
  AGGREGATE_CACHE_TTL_SECONDS

Redis is optional. Until `init_redis()` succeeds every call raises
RuntimeError, which the report services treat as a cache miss.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from store_directory.settings import get_settings

PREFIX_AGGREGATES = "agg:"

_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Connect and ping; raises if Redis is unreachable."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


def _aggregate_key(name: str) -> str:
    return f"{PREFIX_AGGREGATES}{name}"


async def get_aggregate_cache(name: str) -> list[dict[str, Any]] | None:
    """Cached rows of report `name` ("tags", "top_stores"), or None on a miss."""
    value = await _get_redis().get(_aggregate_key(name))
    if value is None:
        return None
    return json.loads(value)


async def set_aggregate_cache(name: str, rows: list[dict[str, Any]]) -> None:
    ttl = get_settings().aggregate_cache_ttl_seconds
    await _get_redis().setex(_aggregate_key(name), ttl, json.dumps(rows, default=str))


async def clear_aggregate_cache() -> None:
    """Drop every cached report."""
    client = _get_redis()
    keys = [key async for key in client.scan_iter(match=f"{PREFIX_AGGREGATES}*")]
    if keys:
        await client.delete(*keys)
