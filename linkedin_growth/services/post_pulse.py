"""Post Pulse: recent posts with repurpose readiness.

Posts come from the MEMBER_SHARE_INFO snapshot, limited to the last 90 days.
A post becomes repurposable after a 42-day cool-down:
- < 42 days: too-soon
- 42-45 days: close
- > 45 days: ready

The extracted post list is cached per user in Redis for 24 hours (filters are
applied on every request, so cached lists serve any filter combination).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import re
import time
from typing import Any

from pydantic import ValidationError

from linkedin_growth.schemas.postpulse import (
    EngagementCounts,
    PostData,
    PostPulseFilters,
    PostPulseMetadata,
    PostPulsePost,
    PostPulseResponse,
    RepurposeDraft,
    RepurposeStatus,
)
from linkedin_growth.services.linkedin_client import LinkedInAPIError, LinkedInDMAClient
from linkedin_growth.services.snapshot import (
    Record,
    SnapshotDomain,
    parse_count,
    parse_datetime,
    snapshot_records,
    to_epoch_ms,
)
from linkedin_growth.stores.redis import delete_post_pulse_cache, get_post_pulse_cache, set_post_pulse_cache

logger = logging.getLogger("uvicorn.error")

MAX_POST_AGE_DAYS = 90
REPURPOSE_CLOSE_DAYS = 42
REPURPOSE_READY_AFTER_DAYS = 45

_ACTIVITY_RE = re.compile(r"activity[-:](\d+)")


class PostNotFoundError(LookupError):
    pass


def _first(record: Record, *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _post_id(record: Record) -> str:
    """ShareId, then the activity id in the share link, then a content hash."""
    explicit = _first(record, "ShareId", "Id")
    if explicit:
        return str(explicit)
    link = _first(record, "ShareLink", "PostUrl")
    if isinstance(link, str):
        m = _ACTIVITY_RE.search(link)
        if m:
            return f"urn:li:activity:{m.group(1)}"
    raw_date = _first(record, "Date", "CreatedDate", "Timestamp") or ""
    text = _first(record, "ShareCommentary", "Commentary", "Text") or ""
    digest = hashlib.sha256(f"{raw_date}|{text}".encode("utf-8")).hexdigest()
    return f"post_{digest[:16]}"


def post_from_record(record: Record, index: int, now: datetime) -> PostData | None:
    """Convert one MEMBER_SHARE_INFO record; undated posts are stamped `now`."""
    dt = parse_datetime(_first(record, "Date", "CreatedDate", "Timestamp"))
    created_at = to_epoch_ms(dt or now)
    text = _first(record, "ShareCommentary", "Commentary", "Text") or ""
    media_url = _first(record, "MediaUrl", "Media")
    document_url = _first(record, "DocumentUrl", "Document")
    link = _first(record, "ShareLink", "PostUrl")
    media_type = _first(record, "MediaType", "mediaType")

    try:
        return PostData(
            id=_post_id(record),
            text=str(text),
            created_at=created_at,
            likes=parse_count(_first(record, "LikesCount", "Likes")),
            comments=parse_count(_first(record, "CommentsCount", "Comments")),
            shares=parse_count(_first(record, "SharesCount", "Shares")),
            impressions=parse_count(_first(record, "Impressions", "Views")),
            views=parse_count(_first(record, "Views", "Impressions")),
            media_url=str(media_url) if media_url else None,
            document_url=str(document_url) if document_url else None,
            linkedin_url=str(link) if link else None,
            media_type=str(media_type) if media_type else ("IMAGE" if media_url else "TEXT"),
        )
    except ValidationError:
        logger.warning(f"[postpulse] skipping malformed share record index={index}")
        return None


def posts_from_snapshot(
    payload: Any,
    now: datetime | None = None,
    max_age_days: int = MAX_POST_AGE_DAYS,
) -> list[PostData]:
    """Extract posts from MEMBER_SHARE_INFO, dropping old ones, oldest first."""
    now = now or datetime.now(timezone.utc)
    cutoff_ms = to_epoch_ms(now - timedelta(days=max_age_days))

    # Fall back to the first element when none is labelled MEMBER_SHARE_INFO.
    records = snapshot_records(payload, SnapshotDomain.MEMBER_SHARE_INFO) or snapshot_records(payload)

    posts: list[PostData] = []
    for index, record in enumerate(records):
        post = post_from_record(record, index, now)
        if post is None or post.created_at < cutoff_ms:
            continue
        posts.append(post)

    posts.sort(key=lambda p: p.created_at)
    return posts


def _matches_type(post: PostData, post_type: str) -> bool:
    if post_type == "text":
        return not post.media_url and not post.document_url
    if post_type in ("image", "video"):
        # Snapshot records do not distinguish image from video URLs.
        return bool(post.media_url)
    if post_type == "document":
        return bool(post.document_url)
    return True


_SORT_KEYS = {
    "recent": (lambda p: p.created_at, True),
    "oldest": (lambda p: p.created_at, False),
    "likes": (lambda p: p.likes, True),
    "comments": (lambda p: p.comments, True),
    "views": (lambda p: p.views, True),
}


def filter_posts(
    posts: list[PostData],
    time_filter: str = "all",
    post_type: str = "all",
    sort_by: str = "oldest",
    now: datetime | None = None,
) -> list[PostData]:
    """Apply the time window, type filter and sort (default oldest first)."""
    now = now or datetime.now(timezone.utc)
    window_days = {"7d": 7, "30d": 30}.get(time_filter)
    cutoff_ms = to_epoch_ms(now - timedelta(days=window_days)) if window_days else None

    filtered = [
        p
        for p in posts
        if (cutoff_ms is None or p.created_at >= cutoff_ms) and _matches_type(p, post_type)
    ]
    key, reverse = _SORT_KEYS.get(sort_by, _SORT_KEYS["oldest"])
    return sorted(filtered, key=key, reverse=reverse)


def repurpose_status(created_at_ms: int, now: datetime | None = None) -> RepurposeStatus:
    now = now or datetime.now(timezone.utc)
    days = max(0, (to_epoch_ms(now) - created_at_ms) // 86_400_000)

    if days < REPURPOSE_CLOSE_DAYS:
        return RepurposeStatus(
            status="too-soon",
            label="Too Soon",
            days_since_posted=days,
            days_until_ready=REPURPOSE_READY_AFTER_DAYS + 1 - days,
            can_repost=False,
        )
    if days <= REPURPOSE_READY_AFTER_DAYS:
        return RepurposeStatus(
            status="close",
            label="Close",
            days_since_posted=days,
            days_until_ready=REPURPOSE_READY_AFTER_DAYS + 1 - days,
            can_repost=False,
        )
    return RepurposeStatus(
        status="ready",
        label="Ready to Repurpose",
        days_since_posted=days,
        days_until_ready=0,
        can_repost=True,
    )


def is_repurpose_eligible(created_at_ms: int, now: datetime | None = None) -> bool:
    return repurpose_status(created_at_ms, now).status == "ready"


def build_repurpose_draft(post: PostData, now: datetime | None = None) -> RepurposeDraft:
    return RepurposeDraft(
        text=post.text,
        original_date=datetime.fromtimestamp(post.created_at / 1000, tz=timezone.utc),
        engagement=EngagementCounts(likes=post.likes, comments=post.comments, shares=post.shares),
        media_url=post.media_url,
        document_url=post.document_url,
        repurpose=repurpose_status(post.created_at, now),
    )


# ============================================================
# Cached loading
# ============================================================


async def _try_get_cached_posts(user_key: str) -> tuple[list[PostData], datetime] | None:
    try:
        payload = await get_post_pulse_cache(user_key)
    except RuntimeError:
        return None
    if not payload:
        return None
    try:
        posts = [PostData.model_validate(p) for p in payload.get("posts", [])]
        cached_at = datetime.fromisoformat(str(payload["timestamp"]))
    except (KeyError, ValueError, ValidationError):
        return None
    return posts, cached_at


async def _try_drop_cached_posts(user_key: str) -> None:
    try:
        await delete_post_pulse_cache(user_key)
    except RuntimeError:
        return


async def _try_set_cached_posts(user_key: str, posts: list[PostData], cached_at: datetime) -> None:
    try:
        await set_post_pulse_cache(
            user_key,
            {
                "posts": [p.model_dump(by_alias=True) for p in posts],
                "timestamp": cached_at.isoformat(),
            },
        )
    except RuntimeError:
        return


async def get_post_pulse(
    client: LinkedInDMAClient,
    filters: PostPulseFilters,
    *,
    user_key: str | None = None,
    force_refresh: bool = False,
    now: datetime | None = None,
) -> PostPulseResponse:
    """Load (cached) posts, then filter, sort and annotate with repurpose status.

    Raises:
        LinkedInAPIError: When the share snapshot cannot be fetched.
    """
    start = time.monotonic()
    now = now or datetime.now(timezone.utc)
    user_key = user_key or client.fingerprint

    if force_refresh:
        await _try_drop_cached_posts(user_key)
    cached = None if force_refresh else await _try_get_cached_posts(user_key)
    if cached is not None:
        posts, timestamp = cached
        is_cached = True
        logger.info(f"[postpulse] serving {len(posts)} posts from cache")
    else:
        payload = await client.fetch_snapshot(SnapshotDomain.MEMBER_SHARE_INFO, use_cache=not force_refresh)
        if payload is None:
            raise LinkedInAPIError("Failed to fetch MEMBER_SHARE_INFO snapshot", status_code=502)
        posts = posts_from_snapshot(payload, now)
        timestamp = now
        is_cached = False
        await _try_set_cached_posts(user_key, posts, timestamp)

    selected = filter_posts(posts, filters.time_filter, filters.post_type, filters.sort_by, now)
    return PostPulseResponse(
        posts=[
            PostPulsePost(**p.model_dump(), repurpose=repurpose_status(p.created_at, now))
            for p in selected
        ],
        total=len(selected),
        filters=filters,
        is_cached=is_cached,
        timestamp=timestamp,
        metadata=PostPulseMetadata(
            fetch_time_ms=int((time.monotonic() - start) * 1000),
            data_source="cache" if is_cached else "member_share_info",
            total_posts_found=len(posts),
        ),
    )


async def get_repurpose_draft(
    client: LinkedInDMAClient,
    post_id: str,
    *,
    user_key: str | None = None,
    now: datetime | None = None,
) -> RepurposeDraft:
    """Look up one post from the (cached) Post Pulse list and build its draft.

    Raises:
        PostNotFoundError: No post with this id in the last 90 days.
        LinkedInAPIError: When the share snapshot cannot be fetched.
    """
    response = await get_post_pulse(client, PostPulseFilters(), user_key=user_key, now=now)
    for post in response.posts:
        if post.id == post_id:
            return build_repurpose_draft(post, now)
    raise PostNotFoundError(f"Post {post_id} not found")
