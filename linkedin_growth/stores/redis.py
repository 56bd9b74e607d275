"""Redis store for caching and short-lived locks.

Handles:
- Caching with TTL policies
- Locks (prevent duplicate syncs for the same user)

TTL policies:
- DMA snapshot responses: 15 minutes
- Post Pulse payload per user: 24 hours
- AI insight texts: 24 hours
- Post sync lock: 5 minutes
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from linkedin_growth.settings import get_settings

# TTL constants (in seconds)
TTL_SNAPSHOT = 900  # 15 minutes
TTL_POST_PULSE = 86400  # 24 hours
TTL_AI_INSIGHT = 86400  # 24 hours
TTL_SYNC_LOCK = 300  # 5 minutes

# Key prefixes
PREFIX_SNAPSHOT = "dma:snapshot:"
PREFIX_POST_PULSE = "postpulse:"
PREFIX_AI_INSIGHT = "ai:insight:"
PREFIX_LOCK = "lock:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_delete(key: str) -> None:
    """Delete value from cache.

    Args:
        key: Cache key.
    """
    await _get_redis().delete(key)


async def cache_get_json(key: str) -> dict[str, Any] | None:
    """Get JSON value from cache.

    Args:
        key: Cache key.

    Returns:
        Parsed JSON dict or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Set JSON value in cache.

    Args:
        key: Cache key.
        value: Dict to cache as JSON.
        ttl: Time-to-live in seconds.
    """
    await cache_set(key, json.dumps(value), ttl)


# ============================================================
# Specialized cache operations
# ============================================================


async def get_snapshot_cache(token_fingerprint: str, domain: str) -> dict[str, Any] | None:
    """Get cached DMA snapshot payload for a token + domain."""
    return await cache_get_json(f"{PREFIX_SNAPSHOT}{token_fingerprint}:{domain}")


async def set_snapshot_cache(token_fingerprint: str, domain: str, payload: dict[str, Any]) -> None:
    """Cache DMA snapshot payload for a token + domain (TTL 15 minutes)."""
    await cache_set_json(f"{PREFIX_SNAPSHOT}{token_fingerprint}:{domain}", payload, TTL_SNAPSHOT)


async def get_post_pulse_cache(user_key: str) -> dict[str, Any] | None:
    """Get cached Post Pulse payload for a user."""
    return await cache_get_json(f"{PREFIX_POST_PULSE}{user_key}")


async def set_post_pulse_cache(user_key: str, payload: dict[str, Any]) -> None:
    """Cache Post Pulse payload for a user (TTL 24 hours)."""
    await cache_set_json(f"{PREFIX_POST_PULSE}{user_key}", payload, TTL_POST_PULSE)


async def delete_post_pulse_cache(user_key: str) -> None:
    """Drop cached Post Pulse payload for a user."""
    await cache_delete(f"{PREFIX_POST_PULSE}{user_key}")


async def get_ai_insight_cache(prompt_hash: str) -> str | None:
    """Get cached AI insight text by prompt hash."""
    return await cache_get(f"{PREFIX_AI_INSIGHT}{prompt_hash}")


async def set_ai_insight_cache(prompt_hash: str, text: str) -> None:
    """Cache AI insight text by prompt hash (TTL 24 hours)."""
    await cache_set(f"{PREFIX_AI_INSIGHT}{prompt_hash}", text, TTL_AI_INSIGHT)


# ============================================================
# Locks
# ============================================================


async def acquire_lock(key: str, ttl: int = TTL_SYNC_LOCK) -> bool:
    """Acquire a lock.

    Args:
        key: Lock key (e.g., "sync:<user_id>").
        ttl: Lock timeout in seconds.

    Returns:
        True if lock acquired, False if already locked.
    """
    lock_key = f"{PREFIX_LOCK}{key}"
    # SET NX (only if not exists) with TTL
    result = await _get_redis().set(lock_key, "1", nx=True, ex=ttl)
    return result is not None


async def release_lock(key: str) -> None:
    """Release a lock.

    Args:
        key: Lock key.
    """
    await cache_delete(f"{PREFIX_LOCK}{key}")
