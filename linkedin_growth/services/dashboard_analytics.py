"""Dashboard scoring.

Six independent analyses over DMA snapshot payloads. Each one:
- guards against empty input (score 0),
- sums/averages a handful of numeric fields,
- maps the result to a 0-10 score via fixed thresholds,
- returns advisory recommendation strings chosen by threshold bucket.

Every bucket yields at least one recommendation: buckets without corrective
advice get an encouraging "keep going" message.

All functions are pure; AI insights are attached later by the reports layer.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
import math
from typing import Any, TypeVar

from linkedin_growth.schemas.dashboard import (
    ContentDiversityAnalysis,
    ContentImpactAnalysis,
    EngagementQualityAnalysis,
    PostingActivityAnalysis,
    PostingConsistencyAnalysis,
    ProfileBreakdown,
    ProfileCompletenessAnalysis,
)
from linkedin_growth.services.snapshot import (
    MediaType,
    first_record,
    record_engagement,
    record_media_type,
    snapshot_records,
    sorted_record_dates,
)

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")

# Posts with at least this many likes+comments count as high impact
HIGH_IMPACT_THRESHOLD = 10

# Diversity is measured against at most this many expected formats
MAX_EXPECTED_FORMATS = 5

SECONDS_PER_DAY = 86400


def _round_half_up(value: float, digits: int = 1) -> float:
    """Round to `digits` places with halves going up; round() would round half to even."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def _non_blank(value: Any) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


# ============================================================
# Profile completeness
# ============================================================


def analyze_profile_completeness(profile_payload: Any) -> ProfileCompletenessAnalysis:
    """Score the PROFILE snapshot across five 20-point sections."""
    profile = first_record(profile_payload)
    breakdown = ProfileBreakdown()

    # Basic info
    if _non_blank(profile.get("First Name")) and _non_blank(profile.get("Last Name")):
        breakdown.basic_info += 10
    if _non_blank(profile.get("Industry")):
        breakdown.basic_info += 5
    if _non_blank(profile.get("Location")):
        breakdown.basic_info += 5

    headline = profile.get("Headline")
    if isinstance(headline, str) and headline.strip():
        if len(headline) > 50:
            breakdown.headline = 20
        elif len(headline) > 20:
            breakdown.headline = 15
        else:
            breakdown.headline = 10

    summary = profile.get("Summary")
    if isinstance(summary, str) and summary.strip():
        if len(summary) > 200:
            breakdown.summary = 20
        elif len(summary) > 100:
            breakdown.summary = 15
        else:
            breakdown.summary = 10

    if _non_blank(profile.get("Current Position")) or _non_blank(profile.get("Position")):
        breakdown.experience += 10
    if _non_blank(profile.get("Company")) or _non_blank(profile.get("Current Company")):
        breakdown.experience += 10

    if _non_blank(profile.get("Skills")) or _non_blank(profile.get("Top Skills")):
        breakdown.skills = 20

    score = min(_round_half_up(breakdown.total() / 100 * 10), 10.0)

    recommendations: list[str] = []
    if breakdown.headline < 15:
        recommendations.append("Improve your headline with specific skills and value proposition")
    if breakdown.summary < 15:
        recommendations.append("Add a compelling summary that tells your professional story")
    if breakdown.experience < 15:
        recommendations.append("Complete your work experience section")
    if breakdown.skills < 15:
        recommendations.append("Add relevant skills to showcase your expertise")
    if not recommendations:
        recommendations.append("Your profile is in great shape. Keep it current as your role evolves")

    return ProfileCompletenessAnalysis(score=score, breakdown=breakdown, recommendations=recommendations)


def profile_completeness_percent(analysis: ProfileCompletenessAnalysis) -> int:
    """Profile completeness on a 0-100 scale (sum of section points)."""
    return analysis.breakdown.total()


# ============================================================
# Posting activity
# ============================================================


def analyze_posting_activity(share_payload: Any) -> PostingActivityAnalysis:
    """Score posts per week over the dated span of MEMBER_SHARE_INFO."""
    posts = snapshot_records(share_payload)
    total = len(posts)
    if total == 0:
        return PostingActivityAnalysis(
            score=0,
            posts_per_week=0,
            total_posts=0,
            recommendations=["Start posting regularly to build your LinkedIn presence"],
        )

    dates = sorted_record_dates(posts)
    if not dates:
        return PostingActivityAnalysis(
            score=2,
            posts_per_week=0,
            total_posts=total,
            recommendations=["Add dates to your posts for better tracking"],
        )

    span_days = max(1.0, (dates[-1] - dates[0]).total_seconds() / SECONDS_PER_DAY)
    posts_per_week = total / span_days * 7

    if posts_per_week >= 5:
        score = 10
    elif posts_per_week >= 3:
        score = 8
    elif posts_per_week >= 1:
        score = 6
    elif posts_per_week >= 0.5:
        score = 4
    else:
        score = 2

    recommendations: list[str] = []
    if posts_per_week < 1:
        recommendations.append("Aim for at least 1 post per week to maintain visibility")
    if posts_per_week < 3:
        recommendations.append("Increase to 3-5 posts per week for optimal engagement")
    if posts_per_week > 7:
        recommendations.append("Consider reducing frequency to avoid audience fatigue")
    if not recommendations:
        recommendations.append("Great posting cadence! Keep sharing 3-5 times per week")

    return PostingActivityAnalysis(
        score=score,
        posts_per_week=_round_half_up(posts_per_week),
        total_posts=total,
        recommendations=recommendations,
    )


# ============================================================
# Engagement quality
# ============================================================


def analyze_engagement_quality(share_payload: Any) -> EngagementQualityAnalysis:
    """Score the average likes+comments per post."""
    posts = snapshot_records(share_payload)
    if not posts:
        return EngagementQualityAnalysis(
            score=0,
            avg_engagement_per_post=0,
            total_engagement=0,
            recommendations=["Start posting to track engagement metrics"],
        )

    engagements = [record_engagement(p) for p in posts]
    total_engagement = sum(engagements)
    posts_with_engagement = sum(1 for e in engagements if e > 0)
    avg = total_engagement / len(posts)

    if avg >= 50:
        score = 10
    elif avg >= 20:
        score = 8
    elif avg >= 10:
        score = 6
    elif avg >= 5:
        score = 4
    elif avg > 0:
        score = 2
    else:
        score = 0

    recommendations: list[str] = []
    if avg < 5:
        recommendations.append("Focus on creating more engaging content that sparks conversation")
    if avg < 10:
        recommendations.append("Ask questions in your posts to encourage comments")
    if posts_with_engagement / len(posts) < 0.5:
        recommendations.append("Ensure every post provides value to your audience")
    if not recommendations:
        recommendations.append("Strong engagement! Keep sparking conversations with your audience")

    return EngagementQualityAnalysis(
        score=score,
        avg_engagement_per_post=_round_half_up(avg),
        total_engagement=total_engagement,
        recommendations=recommendations,
    )


# ============================================================
# Content impact
# ============================================================


def analyze_content_impact(share_payload: Any) -> ContentImpactAnalysis:
    """Score the share of posts reaching the high-impact engagement threshold."""
    posts = snapshot_records(share_payload)
    if not posts:
        return ContentImpactAnalysis(
            score=0,
            high_engagement_posts=0,
            engagement_threshold=HIGH_IMPACT_THRESHOLD,
            recommendations=["Create content that generates meaningful engagement"],
        )

    high = sum(1 for p in posts if record_engagement(p) >= HIGH_IMPACT_THRESHOLD)
    ratio = high / len(posts)

    recommendations: list[str] = []
    if ratio < 0.2:
        recommendations.append("Focus on creating content that resonates with your audience")
    if ratio < 0.5:
        recommendations.append("Analyze your high-performing posts and create similar content")
    if not recommendations:
        recommendations.append("Your content consistently lands. Keep building on your best topics")

    return ContentImpactAnalysis(
        score=_round_half_up(min(ratio * 10, 10)),
        high_engagement_posts=high,
        engagement_threshold=HIGH_IMPACT_THRESHOLD,
        recommendations=recommendations,
    )


# ============================================================
# Content diversity
# ============================================================


def analyze_content_diversity(share_payload: Any) -> ContentDiversityAnalysis:
    """Score the number of distinct media types relative to the post count."""
    posts = snapshot_records(share_payload)
    if not posts:
        return ContentDiversityAnalysis(
            score=0,
            media_types=[],
            diversity_ratio=0,
            recommendations=["Start posting different types of content"],
        )

    # Insertion-ordered distinct types
    media_types = list(dict.fromkeys(record_media_type(p) for p in posts))
    ratio = len(media_types) / min(len(posts), MAX_EXPECTED_FORMATS)

    recommendations: list[str] = []
    if len(media_types) < 2:
        recommendations.append("Try mixing text posts with images and videos")
    if len(media_types) < 3:
        recommendations.append("Experiment with different content formats like carousels and articles")
    if MediaType.IMAGE.value not in media_types:
        recommendations.append("Add visual content to increase engagement")
    if not recommendations:
        recommendations.append("Nice content mix! Keep experimenting with formats")

    return ContentDiversityAnalysis(
        score=_round_half_up(min(ratio * 10, 10)),
        media_types=media_types,
        diversity_ratio=_round_half_up(ratio, 2),
        recommendations=recommendations,
    )


# ============================================================
# Posting consistency
# ============================================================


def analyze_posting_consistency(share_payload: Any) -> PostingConsistencyAnalysis:
    """Score how regular the gaps between consecutive dated posts are."""
    posts = snapshot_records(share_payload)
    if not posts:
        return PostingConsistencyAnalysis(
            score=0,
            consistency_score=0,
            longest_streak=0,
            recommendations=["Establish a consistent posting schedule"],
        )

    dates = sorted_record_dates(posts)
    if len(dates) < 2:
        return PostingConsistencyAnalysis(
            score=2,
            consistency_score=0,
            longest_streak=1,
            recommendations=["Post more frequently to establish consistency"],
        )

    gaps = [(b - a).total_seconds() / SECONDS_PER_DAY for a, b in zip(dates, dates[1:])]
    avg_gap = sum(gaps) / len(gaps)
    consistency = max(0.0, 1 - avg_gap / 14)

    recommendations: list[str] = []
    if avg_gap > 14:
        recommendations.append("Try to post at least every 2 weeks")
    if avg_gap > 7:
        recommendations.append("Aim for weekly posting to maintain audience engagement")
    if consistency > 0.8:
        recommendations.append("Great consistency! Keep up the regular posting schedule")
    if not recommendations:
        recommendations.append("Keep a steady weekly rhythm to build momentum")

    return PostingConsistencyAnalysis(
        score=_round_half_up(min(consistency * 10, 10)),
        consistency_score=_round_half_up(consistency, 2),
        longest_streak=_longest_streak(gaps),
        recommendations=recommendations,
    )


def _longest_streak(gaps: Sequence[float]) -> int:
    """Most posts that fit in a week at the tightest observed gap (capped at 7)."""
    best = 0
    for gap in gaps:
        per_week = 7 if gap <= 0 else min(7, math.floor(7 / gap))
        best = max(best, per_week)
    return best


# ============================================================
# Aggregation
# ============================================================


def overall_score(scores: Sequence[float | None]) -> float:
    """Mean of the available scores, one decimal."""
    valid = [s for s in scores if s is not None]
    if not valid:
        return 0.0
    return _round_half_up(sum(valid) / len(valid))


def safe_analysis(fn: Callable[[Any], T], payload: Any, default: Callable[[], T]) -> T:
    """Run one analysis; a failure yields its zeroed default instead of failing the request."""
    try:
        return fn(payload)
    except Exception:
        logger.exception(f"Dashboard analysis {getattr(fn, '__name__', fn)} failed")
        return default()
