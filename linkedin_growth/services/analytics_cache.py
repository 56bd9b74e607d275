"""Postgres-backed cache of computed reports.

Complements the short-lived Redis caches: a computed dashboard/analytics/algo
report is stored per user and time range until `expires_at`, and every read
that serves a row bumps its `hit_count`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import AnalyticsCache, User
from linkedin_growth.settings import get_settings

logger = logging.getLogger("uvicorn.error")


def _as_aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


async def _find(session: AsyncSession, user: User, cache_key: str, time_range: str) -> AnalyticsCache | None:
    result = await session.execute(
        select(AnalyticsCache).where(
            AnalyticsCache.user_id == user.id,
            AnalyticsCache.cache_key == cache_key,
            AnalyticsCache.time_range == time_range,
        )
    )
    return result.scalar_one_or_none()


async def get_cached_report(
    session: AsyncSession,
    user: User,
    cache_key: str,
    time_range: str = "all",
    now: datetime | None = None,
) -> dict[str, Any] | None:
    """Return the cached payload if present and not expired."""
    now = now or datetime.now(timezone.utc)
    row = await _find(session, user, cache_key, time_range)
    if row is None or _as_aware(row.expires_at) <= now:
        return None

    try:
        payload = json.loads(row.payload_json)
    except json.JSONDecodeError:
        logger.warning(f"[analytics_cache] corrupt payload key={cache_key} user={user.user_id}")
        return None

    row.hit_count = (row.hit_count or 0) + 1
    await session.flush()
    return payload


async def store_report(
    session: AsyncSession,
    user: User,
    cache_key: str,
    payload: dict[str, Any],
    time_range: str = "all",
    ttl_seconds: int | None = None,
    now: datetime | None = None,
) -> AnalyticsCache:
    """Insert or replace the cached payload; resets `hit_count`."""
    now = now or datetime.now(timezone.utc)
    if ttl_seconds is None:
        ttl_seconds = get_settings().report_cache_ttl_seconds

    row = await _find(session, user, cache_key, time_range)
    if row is None:
        row = AnalyticsCache(user_id=user.id, cache_key=cache_key, time_range=time_range)
        session.add(row)

    row.data_type = cache_key
    row.payload_json = json.dumps(payload, default=str)
    row.expires_at = now + timedelta(seconds=ttl_seconds)
    row.hit_count = 0

    await session.flush()
    return row
