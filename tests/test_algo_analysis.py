from datetime import datetime, timedelta

import pytest

from linkedin_growth.services.algo_analysis import (
    algorithm_grade,
    best_posting_times,
    compute_insights,
    compute_metrics,
    consistency_score,
    content_mix_score,
    optimization_recommendations,
    post_frequency,
    reach_score,
    top_performing_formats,
)


def _posts(count: int, every_days: float = 1, likes: int = 0, media_types: tuple[str, ...] = ("TEXT",)) -> list[dict]:
    start = datetime(2026, 2, 2, 9, 0, 0)  # a Monday
    return [
        {
            "Date": (start + timedelta(days=i * every_days)).strftime("%Y-%m-%d %H:%M:%S"),
            "LikesCount": str(likes),
            "CommentsCount": "0",
            "MediaType": media_types[i % len(media_types)],
        }
        for i in range(count)
    ]


def test_empty_posts_score_zero():
    metrics = compute_metrics([])
    assert metrics.post_frequency.score == 0
    assert metrics.engagement_rate.score == 0
    assert metrics.reach_score.score == 0
    assert metrics.content_mix_score.score == 0
    assert metrics.consistency_score.score == 0
    assert metrics.algorithm_grade == "C"


@pytest.mark.parametrize(
    "every_days,expected",
    [
        (2, 10),  # ~4.4 per week
        (3, 8),  # ~2.9 per week
        (6, 6),  # ~1.5 per week
        (14, 3),
    ],
)
def test_post_frequency_bands(every_days, expected):
    assert post_frequency(_posts(5, every_days)).score == expected


def test_post_frequency_single_post():
    metric = post_frequency(_posts(1))
    assert metric.score == 2
    assert metric.posts_per_week == 0


def test_reach_uses_multiplier():
    metric = reach_score(_posts(2, likes=10))
    assert metric.estimated_reach == 150
    assert metric.score == 6


def test_content_mix_counts_distinct_types():
    assert content_mix_score(_posts(4, media_types=("TEXT", "IMAGE", "VIDEO", "ARTICLE"))).score == 10
    assert content_mix_score(_posts(3, media_types=("TEXT", "IMAGE"))).score == 6
    assert content_mix_score(_posts(3)).score == 3


def test_consistency_penalises_weekly_gaps():
    daily = consistency_score(_posts(5, 1))
    assert daily.consistency == 86
    assert daily.score == 9
    weekly = consistency_score(_posts(3, 7))
    assert weekly.consistency == 0
    assert weekly.score == 0


def test_algorithm_grade_ladder():
    assert algorithm_grade([9, 9]) == "A+"
    assert algorithm_grade([8, 8.5]) == "A"
    assert algorithm_grade([5, 5]) == "B"
    assert algorithm_grade([3]) == "C+"
    assert algorithm_grade([1, 2]) == "C"
    assert algorithm_grade([]) == "C"


def test_recommendations_end_with_best_practice():
    recs = optimization_recommendations(compute_metrics([]))
    categories = [r.category for r in recs]
    assert categories == [
        "Posting Frequency",
        "Engagement Quality",
        "Content Diversity",
        "Posting Consistency",
        "Best Practices",
    ]
    assert recs[0].priority == "high"
    assert recs[-1].priority == "low"


def test_strong_metrics_only_get_best_practice():
    posts = _posts(10, 2, likes=30, media_types=("TEXT", "IMAGE", "VIDEO", "CAROUSEL"))
    metrics = compute_metrics(posts)
    recs = optimization_recommendations(metrics)
    assert metrics.algorithm_grade == "A+"
    assert [r.category for r in recs] == ["Best Practices"]


def test_best_posting_times():
    times = best_posting_times(_posts(3, 7))
    assert times.best_days[0].day == "Monday"
    assert times.best_days[0].count == 3
    assert times.best_hours[0].hour == 9


def test_top_performing_formats_sorted():
    posts = _posts(2, likes=1, media_types=("TEXT",)) + _posts(1, likes=20, media_types=("VIDEO",))
    formats = top_performing_formats(posts)
    assert formats[0].format == "VIDEO"
    assert formats[0].avg_engagement == 20
    assert formats[1].post_count == 2


def test_compute_insights_engagement_patterns():
    posts = [
        {"Date": "2026-02-02 09:00:00", "LikesCount": "10", "CommentsCount": "5"},
        {"Date": "2026-02-03 09:00:00", "LikesCount": "10", "CommentsCount": "15"},
    ]
    insights = compute_insights(posts)
    assert insights.engagement_patterns.comments_to_likes_ratio == 1.0
    assert insights.engagement_patterns.high_engagement_posts == 1
