"""Algorithm performance metrics ("The Algo").

Five metrics over MEMBER_SHARE_INFO records, each a 0-10 score with one
recommendation, plus an overall letter grade, posting-time and format insights
and prioritised optimisation recommendations.
"""

from __future__ import annotations

from collections import Counter
from datetime import timezone

from linkedin_growth.schemas.algo import (
    AlgoInsights,
    AlgoMetrics,
    BestPostingTimes,
    ConsistencyMetric,
    ContentMixMetric,
    EngagementPatterns,
    EngagementRateMetric,
    FormatPerformance,
    OptimizationRecommendation,
    PostFrequencyMetric,
    ReachMetric,
)
from linkedin_growth.schemas.analytics import DayCount, EngagementDistribution, HourCount
from linkedin_growth.services.analytics_insights import WEEKDAYS, engagement_bucket
from linkedin_growth.services.snapshot import (
    Record,
    parse_record_date,
    record_comments,
    record_engagement,
    record_likes,
    record_media_type,
    sorted_record_dates,
)

# Reach is typically 10-20x engagement for good content
REACH_MULTIPLIER = 15

# Metrics scoring below this get an optimisation recommendation
RECOMMENDATION_THRESHOLD = 7

GRADE_LADDER: tuple[tuple[float, str], ...] = (
    (9, "A+"),
    (8, "A"),
    (7, "A-"),
    (6, "B+"),
    (5, "B"),
    (4, "B-"),
    (3, "C+"),
)

BEST_PRACTICE = OptimizationRecommendation(
    category="Best Practices",
    priority="low",
    action="Reply to comments within 15 minutes and engage with others' content before posting",
    impact="Maximum algorithm boost",
)


def post_frequency(posts: list[Record]) -> PostFrequencyMetric:
    if not posts:
        return PostFrequencyMetric(score=0, posts_per_week=0, recommendation="Start posting regularly")

    dates = sorted_record_dates(posts)
    if len(dates) < 2:
        return PostFrequencyMetric(score=2, posts_per_week=0, recommendation="Post more frequently")

    span_days = max(1.0, (dates[-1] - dates[0]).total_seconds() / 86400)
    per_week = len(posts) / span_days * 7

    if 3 <= per_week <= 5:
        score, rec = 10, "Perfect posting frequency! Keep it up."
    elif per_week >= 2:
        score, rec = 8, "Good frequency. Consider increasing to 3-5 posts per week."
    elif per_week >= 1:
        score, rec = 6, "Increase posting frequency to 3-5 times per week."
    else:
        score, rec = 3, "Post more frequently to maintain algorithm visibility."

    return PostFrequencyMetric(score=score, posts_per_week=round(per_week, 1), recommendation=rec)


def engagement_rate(posts: list[Record]) -> EngagementRateMetric:
    if not posts:
        return EngagementRateMetric(score=0, rate=0, recommendation="Start posting to track engagement")

    total = sum(record_engagement(p) for p in posts)
    avg = total / len(posts)

    if avg >= 20:
        score, rec = 10, "Excellent engagement! Your content resonates well."
    elif avg >= 10:
        score, rec = 8, "Good engagement. Focus on creating more conversation-starting content."
    elif avg >= 5:
        score, rec = 6, "Moderate engagement. Try asking more questions in your posts."
    else:
        score, rec = 3, "Low engagement. Focus on value-driven content that sparks discussion."

    return EngagementRateMetric(score=score, rate=round(avg, 1), total_engagement=total, recommendation=rec)


def reach_score(posts: list[Record]) -> ReachMetric:
    if not posts:
        return ReachMetric(score=0, estimated_reach=0, recommendation="Start posting to build reach")

    total = sum(record_engagement(p) for p in posts)
    avg_reach = total * REACH_MULTIPLIER / len(posts)

    if avg_reach >= 500:
        score, rec = 10, "Excellent reach! Your content is performing very well."
    elif avg_reach >= 200:
        score, rec = 8, "Good reach. Continue with your current content strategy."
    elif avg_reach >= 100:
        score, rec = 6, "Moderate reach. Focus on engaging with your audience more."
    else:
        score, rec = 3, "Low reach. Improve content quality and engagement tactics."

    return ReachMetric(score=score, estimated_reach=int(avg_reach + 0.5), recommendation=rec)


def content_mix_score(posts: list[Record]) -> ContentMixMetric:
    if not posts:
        return ContentMixMetric(score=0, diversity=0, recommendation="Start posting different content types")

    types = list(dict.fromkeys(record_media_type(p) for p in posts))
    count = len(types)

    if count >= 4:
        score, rec = 10, "Excellent content diversity! Keep mixing formats."
    elif count >= 3:
        score, rec = 8, "Good content mix. Try adding more video content."
    elif count >= 2:
        score, rec = 6, "Add more content formats like carousels and videos."
    else:
        score, rec = 3, "Diversify your content with images, videos, and carousels."

    return ContentMixMetric(score=score, diversity=count, types=types, recommendation=rec)


def consistency_score(posts: list[Record]) -> ConsistencyMetric:
    dates = sorted_record_dates(posts)
    if len(posts) < 2 or len(dates) < 2:
        return ConsistencyMetric(
            score=0,
            consistency=0,
            recommendation="Post more frequently to establish consistency",
        )

    gaps = [(b - a).total_seconds() / 86400 for a, b in zip(dates, dates[1:])]
    avg_gap = sum(gaps) / len(gaps)
    # Penalise gaps longer than a week
    consistency = max(0.0, 1 - avg_gap / 7)

    if consistency >= 0.8:
        rec = "Excellent consistency! The algorithm loves regular posting."
    elif consistency >= 0.6:
        rec = "Good consistency. Try to maintain more regular intervals."
    else:
        rec = "Improve posting consistency for better algorithm performance."

    return ConsistencyMetric(
        score=int(consistency * 10 + 0.5),
        consistency=int(consistency * 100 + 0.5),
        recommendation=rec,
    )


def algorithm_grade(scores: list[float]) -> str:
    """Letter grade for the mean of the metric scores."""
    if not scores:
        return "C"
    avg = sum(scores) / len(scores)
    for threshold, grade in GRADE_LADDER:
        if avg >= threshold:
            return grade
    return "C"


def compute_metrics(posts: list[Record]) -> AlgoMetrics:
    frequency = post_frequency(posts)
    engagement = engagement_rate(posts)
    reach = reach_score(posts)
    mix = content_mix_score(posts)
    consistency = consistency_score(posts)
    grade = algorithm_grade(
        [frequency.score, engagement.score, reach.score, mix.score, consistency.score]
    )
    return AlgoMetrics(
        post_frequency=frequency,
        engagement_rate=engagement,
        reach_score=reach,
        content_mix_score=mix,
        consistency_score=consistency,
        algorithm_grade=grade,
    )


def optimization_recommendations(metrics: AlgoMetrics) -> list[OptimizationRecommendation]:
    """Recommendations for weak metrics, always ending with a best-practice item."""
    candidates = (
        (metrics.post_frequency, "Posting Frequency", "high", "Algorithm visibility"),
        (metrics.engagement_rate, "Engagement Quality", "high", "Content reach and distribution"),
        (metrics.content_mix_score, "Content Diversity", "medium", "Audience engagement variety"),
        (metrics.consistency_score, "Posting Consistency", "medium", "Algorithm trust and reliability"),
    )
    recommendations = [
        OptimizationRecommendation(
            category=category,
            priority=priority,
            action=metric.recommendation,
            impact=impact,
        )
        for metric, category, priority, impact in candidates
        if metric.score < RECOMMENDATION_THRESHOLD
    ]
    recommendations.append(BEST_PRACTICE.model_copy())
    return recommendations


def best_posting_times(posts: list[Record]) -> BestPostingTimes:
    dates = [d for d in (parse_record_date(p) for p in posts) if d is not None]
    if not dates:
        return BestPostingTimes()
    hours = Counter(d.astimezone(timezone.utc).hour for d in dates)
    days = Counter(WEEKDAYS[d.weekday()] for d in dates)
    return BestPostingTimes(
        best_hours=[HourCount(hour=h, count=c) for h, c in hours.most_common(3)],
        best_days=[DayCount(day=d, count=c) for d, c in days.most_common(3)],
    )


def top_performing_formats(posts: list[Record]) -> list[FormatPerformance]:
    totals: dict[str, list[int]] = {}
    for post in posts:
        bucket = totals.setdefault(record_media_type(post), [0, 0])
        bucket[0] += record_engagement(post)
        bucket[1] += 1
    formats = [
        FormatPerformance(format=fmt, avg_engagement=round(total / count, 1), post_count=count)
        for fmt, (total, count) in totals.items()
    ]
    formats.sort(key=lambda f: f.avg_engagement, reverse=True)
    return formats


def engagement_patterns(posts: list[Record]) -> EngagementPatterns:
    if not posts:
        return EngagementPatterns()

    total_likes = 0
    total_comments = 0
    distribution = EngagementDistribution()
    for post in posts:
        likes = record_likes(post)
        comments = record_comments(post)
        total_likes += likes
        total_comments += comments
        bucket = engagement_bucket(likes + comments)
        setattr(distribution, bucket, getattr(distribution, bucket) + 1)

    return EngagementPatterns(
        comments_to_likes_ratio=round(total_comments / total_likes, 2) if total_likes > 0 else 0,
        high_engagement_posts=distribution.high,
        engagement_distribution=distribution,
    )


def compute_insights(posts: list[Record]) -> AlgoInsights:
    return AlgoInsights(
        best_posting_times=best_posting_times(posts),
        top_performing_formats=top_performing_formats(posts),
        engagement_patterns=engagement_patterns(posts),
    )
