"""Retention cleanup, run from cron via scripts/cleanup_expired.py.

- analytics_cache rows past expires_at are deleted
- comment_cache rows older than COMMENT_CACHE_RETENTION_DAYS are deleted
- unused suggested_comments older than SUGGESTION_RETENTION_DAYS are deleted
- pending invitations past expires_at are marked expired
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import AnalyticsCache, CommentCache, InvitationStatus, SuggestedComment, SynergyInvitation
from linkedin_growth.settings import get_settings

logger = logging.getLogger("uvicorn.error")


@dataclass
class CleanupStats:
    analytics_cache_deleted: int = 0
    comment_cache_deleted: int = 0
    suggestions_deleted: int = 0
    invitations_expired: int = 0


async def clean_expired_data(session: AsyncSession, now: datetime | None = None) -> CleanupStats:
    now = now or datetime.now(timezone.utc)
    settings = get_settings()
    stats = CleanupStats()

    result = await session.execute(delete(AnalyticsCache).where(AnalyticsCache.expires_at < now))
    stats.analytics_cache_deleted = result.rowcount or 0

    comment_cutoff = now - timedelta(days=settings.comment_cache_retention_days)
    result = await session.execute(delete(CommentCache).where(CommentCache.fetched_at < comment_cutoff))
    stats.comment_cache_deleted = result.rowcount or 0

    suggestion_cutoff = now - timedelta(days=settings.suggestion_retention_days)
    result = await session.execute(
        delete(SuggestedComment).where(
            SuggestedComment.created_at < suggestion_cutoff,
            SuggestedComment.used.is_(False),
        )
    )
    stats.suggestions_deleted = result.rowcount or 0

    result = await session.execute(
        update(SynergyInvitation)
        .where(
            SynergyInvitation.status == InvitationStatus.PENDING,
            SynergyInvitation.expires_at < now,
        )
        .values(status=InvitationStatus.EXPIRED)
    )
    stats.invitations_expired = result.rowcount or 0

    logger.info(f"[maintenance] cleanup done: {stats}")
    return stats
