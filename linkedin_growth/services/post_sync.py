"""Post cache sync.

Pulls the member's MEMBER_SHARE_INFO snapshot and upserts every post into
`post_cache` keyed by (user_id, post_urn). Partner feeds read from this cache,
so they never need the partner's DMA token. The member's own comments
(ALL_COMMENTS) go to `comment_cache`, keyed by comment_urn.

Only one sync per user runs at a time (Redis lock, 5 minutes). When Redis is
not available the sync runs unlocked.
"""

from __future__ import annotations

from datetime import datetime, timezone
import hashlib
import json
import logging
import re
from urllib.parse import unquote

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import CommentCache, PostCache, SyncStatus, User
from linkedin_growth.schemas.postpulse import PostData
from linkedin_growth.schemas.users import SyncResult, SyncStatusResponse
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.post_pulse import is_repurpose_eligible, posts_from_snapshot
from linkedin_growth.services.snapshot import (
    MediaType,
    Record,
    SnapshotDomain,
    parse_datetime,
    snapshot_records,
    to_epoch_ms,
)
from linkedin_growth.stores.redis import acquire_lock, release_lock

logger = logging.getLogger("uvicorn.error")

# Sync keeps a full year of history, unlike the 90-day Post Pulse view.
SYNC_MAX_AGE_DAYS = 365

_HASHTAG_RE = re.compile(r"#(\w+)")
_ACTIVITY_RE = re.compile(r"urn:li:(?:activity|ugcPost|share):\d+")


def engagement_rate(likes: int, comments: int, shares: int, impressions: int = 0) -> float:
    """Engagement as a percentage of impressions, or interactions / 10 without them."""
    interactions = likes + comments + shares
    if impressions > 0:
        return round(interactions / impressions * 100, 2)
    return round(interactions / 10, 2)


def performance_tier(rate: float) -> str:
    if rate >= 10:
        return "viral"
    if rate >= 5:
        return "high"
    if rate >= 2:
        return "average"
    return "low"


def extract_hashtags(text: str) -> list[str]:
    """Unique lowercase hashtags in order of appearance."""
    seen: list[str] = []
    for tag in _HASHTAG_RE.findall(text or ""):
        tag = tag.lower()
        if tag not in seen:
            seen.append(tag)
    return seen


def _media_type(value: str) -> MediaType:
    try:
        return MediaType(value.upper())
    except ValueError:
        return MediaType.TEXT


def _apply_post(row: PostCache, post: PostData, now: datetime) -> None:
    rate = engagement_rate(post.likes, post.comments, post.shares, post.impressions)
    row.content = post.text
    row.media_type = _media_type(post.media_type)
    row.media_url = post.media_url or post.document_url
    row.linkedin_url = post.linkedin_url
    row.hashtags_json = json.dumps(extract_hashtags(post.text))
    row.created_at_ms = post.created_at
    row.likes = post.likes
    row.comments = post.comments
    row.shares = post.shares
    row.impressions = post.impressions
    row.engagement_rate = rate
    row.performance_tier = performance_tier(rate)
    row.repurpose_eligible = is_repurpose_eligible(post.created_at, now)
    row.fetched_at = now


async def _try_acquire(key: str) -> bool | None:
    """True/False from Redis, None when Redis is unavailable."""
    try:
        return await acquire_lock(key)
    except RuntimeError:
        logger.warning("[post_sync] Redis unavailable, syncing without lock")
        return None


async def _try_release(key: str) -> None:
    try:
        await release_lock(key)
    except RuntimeError:
        return


def comment_keys(record: Record) -> tuple[str, str, str] | None:
    """(comment_urn, post_urn, message) for an ALL_COMMENTS record, None without a message.

    Snapshot comments carry no id, so the urn is a hash of date, link and message.
    """
    message = record.get("Message") or record.get("message")
    if not isinstance(message, str) or not message.strip():
        return None
    link = str(record.get("Link") or record.get("link") or "")
    raw_date = str(record.get("Date") or record.get("date") or "")

    m = _ACTIVITY_RE.search(unquote(link))
    post_urn = m.group(0) if m else link
    digest = hashlib.sha256(f"{raw_date}|{link}|{message}".encode("utf-8")).hexdigest()
    return f"comment_{digest[:24]}", post_urn, message


async def _sync_comments(
    session: AsyncSession,
    user: User,
    client: LinkedInDMAClient,
    now: datetime,
) -> int:
    """Upsert the member's own comments; a missing snapshot leaves the cache as is."""
    payload = await client.fetch_snapshot(SnapshotDomain.ALL_COMMENTS, use_cache=False)
    if payload is None:
        logger.warning(f"[post_sync] comment snapshot unavailable user={user.user_id}")
        return 0

    records = snapshot_records(payload, SnapshotDomain.ALL_COMMENTS) or snapshot_records(payload)
    result = await session.execute(select(CommentCache).where(CommentCache.author_user_id == user.id))
    existing = {row.comment_urn: row for row in result.scalars().all()}

    stored = 0
    for record in records:
        keys = comment_keys(record)
        if keys is None:
            continue
        comment_urn, post_urn, record_message = keys
        row = existing.get(comment_urn)
        if row is None:
            row = CommentCache(author_user_id=user.id, comment_urn=comment_urn)
            session.add(row)
            existing[comment_urn] = row
        dt = parse_datetime(record.get("Date") or record.get("date"))
        row.post_urn = post_urn[:200]
        row.message = record_message.strip()
        row.created_at_ms = to_epoch_ms(dt or now)
        row.fetched_at = now
        stored += 1
    return stored


async def _sync_posts(
    session: AsyncSession,
    user: User,
    client: LinkedInDMAClient,
    now: datetime,
) -> SyncResult:
    payload = await client.fetch_snapshot(SnapshotDomain.MEMBER_SHARE_INFO, use_cache=False)
    if payload is None:
        user.posts_sync_status = SyncStatus.FAILED
        await session.flush()
        logger.warning(f"[post_sync] share snapshot unavailable user={user.user_id}")
        return SyncResult(status="failed", message="Could not fetch posts from LinkedIn")

    posts = posts_from_snapshot(payload, now, max_age_days=SYNC_MAX_AGE_DAYS)

    result = await session.execute(select(PostCache).where(PostCache.user_id == user.id))
    existing = {row.post_urn: row for row in result.scalars().all()}

    inserted = updated = 0
    for post in posts:
        row = existing.get(post.id)
        if row is None:
            row = PostCache(user_id=user.id, post_urn=post.id)
            session.add(row)
            existing[post.id] = row
            inserted += 1
        else:
            updated += 1
        _apply_post(row, post, now)

    comments_stored = await _sync_comments(session, user, client, now)

    user.posts_sync_status = SyncStatus.COMPLETED
    user.last_posts_sync = now
    await session.flush()

    logger.info(
        f"[post_sync] user={user.user_id} found={len(posts)} inserted={inserted} "
        f"updated={updated} comments={comments_stored}"
    )
    return SyncResult(
        status="completed",
        posts_found=len(posts),
        inserted=inserted,
        updated=updated,
        comments_stored=comments_stored,
        synced_at=now,
    )


async def sync_user_posts(
    session: AsyncSession,
    user: User,
    client: LinkedInDMAClient,
    now: datetime | None = None,
) -> SyncResult:
    """Refresh `post_cache` and `comment_cache` for `user` from their snapshots.

    The SYNCING status is committed before LinkedIn is called so other
    sessions can see it. An unexpected error rolls back the partial upsert,
    commits FAILED and re-raises.
    """
    now = now or datetime.now(timezone.utc)
    user_key = user.user_id
    lock_key = f"sync:{user_key}"

    locked = await _try_acquire(lock_key)
    if locked is False:
        return SyncResult(status="in_progress", message="A sync is already running for this user")

    try:
        user.posts_sync_status = SyncStatus.SYNCING
        await session.commit()
        try:
            return await _sync_posts(session, user, client, now)
        except Exception:
            logger.exception(f"[post_sync] sync failed user={user_key}")
            await session.rollback()
            user.posts_sync_status = SyncStatus.FAILED
            await session.commit()
            raise
    finally:
        if locked:
            await _try_release(lock_key)


async def get_sync_status(
    session: AsyncSession,
    user: User,
    now: datetime | None = None,
) -> SyncStatusResponse:
    """Sync state, cached post count and newest cached post date for `user`."""
    result = await session.execute(
        select(func.count(PostCache.id), func.max(PostCache.created_at_ms)).where(PostCache.user_id == user.id)
    )
    posts_count, latest_ms = result.one()

    status = user.posts_sync_status or SyncStatus.PENDING
    return SyncStatusResponse(
        status=status.value,
        last_sync=user.last_posts_sync,
        posts_count=posts_count or 0,
        latest_post_date=datetime.fromtimestamp(latest_ms / 1000, tz=timezone.utc) if latest_ms else None,
        timestamp=now or datetime.now(timezone.utc),
    )
