"""Deep-dive analytics over a time range of posts.

Pure functions; the reports layer fetches snapshots and attaches the AI narrative.

Time ranges: "7d", "30d", "90d" (anything else falls back to 90 days).
Engagement for distributions is likes + comments; per-post totals in the
engagement analysis also include shares.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
import re
from typing import Any

from linkedin_growth.schemas.analytics import (
    AnalyticsMetadata,
    AnalyticsReport,
    AudienceInsights,
    BestPost,
    DayCount,
    EngagedPost,
    EngagementDistribution,
    HashtagTrend,
    HourCount,
    NamedShare,
    PerformanceMetrics,
    TimeBasedInsights,
    TrendPoint,
)
from linkedin_growth.services.snapshot import (
    Record,
    parse_record_date,
    record_comments,
    record_engagement,
    record_likes,
    record_media_type,
    record_shares,
    record_text,
    to_epoch_ms,
)

TIME_RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_TIME_RANGE_DAYS = 90

TOP_ENGAGED_POSTS = 10
TOP_HASHTAGS = 15
TOP_AUDIENCE_BUCKETS = 10
TOP_POSTING_DAYS = 3
TOP_POSTING_HOURS = 5

_HASHTAG_RE = re.compile(r"#\w+")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def time_range_days(time_range: str) -> int:
    return TIME_RANGE_DAYS.get(time_range, DEFAULT_TIME_RANGE_DAYS)


def _percent(part: int, whole: int) -> int:
    """Half-up rounded percentage."""
    if whole <= 0:
        return 0
    return int(part / whole * 100 + 0.5)


def filter_posts_in_range(posts: list[Record], days: int, now: datetime) -> list[Record]:
    """Posts dated within the last `days` days; undated posts are dropped."""
    cutoff = now - timedelta(days=days)
    out = []
    for post in posts:
        dt = parse_record_date(post)
        if dt is not None and dt >= cutoff:
            out.append(post)
    return out


def posting_trends(posts: list[Record], days: int, now: datetime) -> list[TrendPoint]:
    """One point per UTC day, oldest first, ending today."""
    today = now.astimezone(timezone.utc).date()
    points: dict[str, TrendPoint] = {}
    for offset in range(days - 1, -1, -1):
        d = today - timedelta(days=offset)
        key = d.isoformat()
        points[key] = TrendPoint(date=key, label=f"{_MONTHS[d.month - 1]} {d.day}")

    for post in posts:
        dt = parse_record_date(post)
        if dt is None:
            continue
        point = points.get(dt.astimezone(timezone.utc).date().isoformat())
        if point is None:
            continue
        point.posts += 1
        point.likes += record_likes(post)
        point.comments += record_comments(post)
        point.total_engagement = point.likes + point.comments

    return list(points.values())


def content_formats(posts: list[Record]) -> list[NamedShare]:
    counts = Counter(record_media_type(p) for p in posts)
    return [
        NamedShare(name=name, value=value, percentage=_percent(value, len(posts)))
        for name, value in counts.items()
    ]


def post_engagement_rate(post: Record) -> float:
    """Estimated engagement rate (%) using reach ~= 10x engagement, minimum 100."""
    total = record_likes(post) + record_comments(post) + record_shares(post)
    estimated_reach = max(total * 10, 100)
    return round(total / estimated_reach * 100, 2)


def engagement_analysis(posts: list[Record]) -> list[EngagedPost]:
    """Top posts by likes + comments + shares."""
    analysed = []
    for index, post in enumerate(posts):
        likes = record_likes(post)
        comments = record_comments(post)
        shares = record_shares(post)
        dt = parse_record_date(post)
        text = record_text(post) or "Post content"
        analysed.append(
            EngagedPost(
                post_id=str(post.get("ShareLink") or f"post_{index}"),
                content=text[:50] + "...",
                likes=likes,
                comments=comments,
                shares=shares,
                total_engagement=likes + comments + shares,
                created_at=to_epoch_ms(dt) if dt else None,
                engagement_rate=post_engagement_rate(post),
            )
        )
    analysed.sort(key=lambda p: p.total_engagement, reverse=True)
    return analysed[:TOP_ENGAGED_POSTS]


def hashtag_trends(posts: list[Record]) -> list[HashtagTrend]:
    texts = [record_text(p) for p in posts]
    counts: Counter[str] = Counter()
    for text in texts:
        counts.update(_HASHTAG_RE.findall(text))
    return [
        HashtagTrend(hashtag=tag, count=count, posts=sum(1 for t in texts if tag in t))
        for tag, count in counts.most_common(TOP_HASHTAGS)
    ]


def _usable_label(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value == "Unknown":
        return None
    return value


def audience_insights(connections: list[Record]) -> AudienceInsights:
    """Top industries, positions and locations across CONNECTIONS records."""
    if not connections:
        return AudienceInsights()

    industries: Counter[str] = Counter()
    positions: Counter[str] = Counter()
    locations: Counter[str] = Counter()
    for conn in connections:
        for counter, keys in (
            (industries, ("Industry", "industry")),
            (positions, ("Position", "position")),
            (locations, ("Location", "location")),
        ):
            label = _usable_label(conn.get(keys[0]) or conn.get(keys[1]))
            if label:
                counter[label] += 1

    total = len(connections)

    def top(counter: Counter[str]) -> list[NamedShare]:
        return [
            NamedShare(name=name, value=value, percentage=_percent(value, total))
            for name, value in counter.most_common(TOP_AUDIENCE_BUCKETS)
        ]

    return AudienceInsights(
        industries=top(industries),
        positions=top(positions),
        locations=top(locations),
        total_connections=total,
    )


def engagement_bucket(engagement: int) -> str:
    """low < 5 <= medium < 20 <= high."""
    if engagement < 5:
        return "low"
    if engagement < 20:
        return "medium"
    return "high"


def performance_metrics(posts: list[Record]) -> PerformanceMetrics:
    if not posts:
        return PerformanceMetrics()

    engagements = [record_engagement(p) for p in posts]
    total = sum(engagements)

    best_index = 0
    for i, e in enumerate(engagements):
        if e > engagements[best_index]:
            best_index = i
    best = posts[best_index]

    distribution = EngagementDistribution()
    for e in engagements:
        bucket = engagement_bucket(e)
        setattr(distribution, bucket, getattr(distribution, bucket) + 1)

    best_date = best.get("Date") or best.get("date")
    return PerformanceMetrics(
        total_engagement=total,
        avg_engagement_per_post=round(total / len(posts), 1),
        best_performing_post=BestPost(
            content=record_text(best)[:100],
            engagement=engagements[best_index],
            date=str(best_date) if best_date else None,
        ),
        engagement_distribution=distribution,
    )


def time_based_insights(posts: list[Record]) -> TimeBasedInsights:
    if not posts:
        return TimeBasedInsights()

    dates = [d for d in (parse_record_date(p) for p in posts) if d is not None]
    days = Counter(WEEKDAYS[d.weekday()] for d in dates)
    hours = Counter(d.astimezone(timezone.utc).hour for d in dates)

    dates.sort()
    days_between = (dates[-1] - dates[0]).total_seconds() / 86400 if len(dates) > 1 else 1
    frequency = len(posts) / max(days_between / 7, 1)

    return TimeBasedInsights(
        best_posting_days=[DayCount(day=d, count=c) for d, c in days.most_common(TOP_POSTING_DAYS)],
        best_posting_hours=[HourCount(hour=h, count=c) for h, c in hours.most_common(TOP_POSTING_HOURS)],
        posting_frequency=round(frequency, 1),
    )


def compute_analytics(
    all_posts: list[Record],
    connections: list[Record],
    time_range: str,
    now: datetime | None = None,
) -> AnalyticsReport:
    """Assemble the full analytics report (without AI narrative)."""
    now = now or datetime.now(timezone.utc)
    days = time_range_days(time_range)
    posts = filter_posts_in_range(all_posts, days, now)

    return AnalyticsReport(
        posting_trends=posting_trends(posts, days, now),
        content_formats=content_formats(posts),
        engagement_analysis=engagement_analysis(posts),
        hashtag_trends=hashtag_trends(posts),
        audience_insights=audience_insights(connections),
        performance_metrics=performance_metrics(posts),
        time_based_insights=time_based_insights(posts),
        time_range=time_range,
        last_updated=now,
        metadata=AnalyticsMetadata(
            has_recent_activity=bool(posts),
            data_source="snapshot_v2",
            posts_count=len(posts),
            total_posts_count=len(all_posts),
            connections_count=len(connections),
            description=f"Deep analytics for {len(posts)} posts from {time_range} period",
        ),
    )


def empty_analytics(time_range: str, now: datetime | None = None) -> AnalyticsReport:
    """Zeroed analytics shape (used for reconnect and error paths)."""
    return AnalyticsReport(
        time_range=time_range,
        last_updated=now or datetime.now(timezone.utc),
        metadata=AnalyticsMetadata(
            has_recent_activity=False,
            data_source="error",
            posts_count=0,
            description="No data available",
        ),
    )
