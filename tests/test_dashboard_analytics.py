from datetime import datetime, timedelta

import pytest

from linkedin_growth.services.dashboard_analytics import (
    analyze_content_diversity,
    analyze_content_impact,
    analyze_engagement_quality,
    analyze_posting_activity,
    analyze_posting_consistency,
    analyze_profile_completeness,
    overall_score,
    profile_completeness_percent,
    safe_analysis,
)


def _payload(records: list[dict], domain: str = "MEMBER_SHARE_INFO") -> dict:
    return {"elements": [{"snapshotDomain": domain, "snapshotData": records}]}


def _daily_posts(count: int, likes: int = 0, comments: int = 0, media_type: str = "TEXT") -> list[dict]:
    start = datetime(2026, 1, 1, 9, 0, 0)
    return [
        {
            "Date": (start + timedelta(days=i)).strftime("%Y-%m-%d %H:%M:%S"),
            "LikesCount": str(likes),
            "CommentsCount": str(comments),
            "MediaType": media_type,
            "ShareCommentary": f"Post {i}",
        }
        for i in range(count)
    ]


@pytest.mark.parametrize(
    "analyzer",
    [
        analyze_profile_completeness,
        analyze_posting_activity,
        analyze_engagement_quality,
        analyze_content_impact,
        analyze_content_diversity,
        analyze_posting_consistency,
    ],
)
def test_empty_input_scores_zero_with_guidance(analyzer):
    for payload in (None, {}, {"elements": []}, _payload([])):
        result = analyzer(payload)
        assert result.score == 0
        assert result.recommendations


def test_complete_profile_scores_ten():
    profile = {
        "First Name": "Ava",
        "Last Name": "Thompson",
        "Industry": "Marketing",
        "Location": "London",
        "Headline": "B2B SaaS marketer helping founders tell better stories about their products",
        "Summary": "x" * 250,
        "Current Position": "Head of Marketing",
        "Company": "Acme",
        "Skills": "Positioning, Demand generation",
    }
    result = analyze_profile_completeness(_payload([profile], "PROFILE"))
    assert result.score == 10.0
    assert profile_completeness_percent(result) == 100
    assert len(result.recommendations) == 1


def test_short_headline_gets_partial_points():
    result = analyze_profile_completeness(_payload([{"Headline": "Designer"}], "PROFILE"))
    assert result.breakdown.headline == 10
    assert result.score == 1.0
    assert any("headline" in r for r in result.recommendations)


def test_posting_activity_undated_posts_score_two():
    result = analyze_posting_activity(_payload([{"ShareCommentary": "hello"}, {"ShareCommentary": "again"}]))
    assert result.score == 2
    assert result.total_posts == 2
    assert result.posts_per_week == 0


def test_posting_activity_daily_posts_score_ten():
    result = analyze_posting_activity(_payload(_daily_posts(7)))
    # 7 posts over a 6 day span
    assert result.score == 10
    assert result.posts_per_week == pytest.approx(8.2)
    assert any("fatigue" in r for r in result.recommendations)


def test_posting_activity_sparse_posts_score_low():
    records = [
        {"Date": "2026-01-01 09:00:00"},
        {"Date": "2026-03-01 09:00:00"},
    ]
    result = analyze_posting_activity(_payload(records))
    assert result.score == 2
    assert len(result.recommendations) == 2


def test_engagement_quality_is_monotonic():
    previous = -1.0
    for likes in (0, 1, 5, 10, 20, 50, 100):
        score = analyze_engagement_quality(_payload(_daily_posts(3, likes=likes))).score
        assert score >= previous
        previous = score
    assert previous == 10


def test_engagement_quality_counts_likes_and_comments():
    result = analyze_engagement_quality(_payload(_daily_posts(2, likes=30, comments=25)))
    assert result.avg_engagement_per_post == 55
    assert result.total_engagement == 110
    assert result.score == 10


def test_content_impact_ratio():
    records = _daily_posts(1, likes=8, comments=2) + _daily_posts(1, likes=1)
    result = analyze_content_impact(_payload(records))
    assert result.high_engagement_posts == 1
    assert result.engagement_threshold == 10
    assert result.score == 5.0


def test_content_impact_rounds_halves_up():
    records = _daily_posts(1, likes=10) + _daily_posts(7, likes=1)
    result = analyze_content_impact(_payload(records))
    assert result.high_engagement_posts == 1
    assert result.score == 1.3


def test_content_diversity_ratio():
    records = (
        _daily_posts(1, media_type="TEXT")
        + _daily_posts(1, media_type="IMAGE")
        + _daily_posts(1, media_type="VIDEO")
    )
    result = analyze_content_diversity(_payload(records))
    assert result.media_types == ["TEXT", "IMAGE", "VIDEO"]
    assert result.diversity_ratio == 1.0
    assert result.score == 10.0


def test_content_diversity_missing_media_type_counts_as_text():
    result = analyze_content_diversity(_payload([{"ShareCommentary": "plain"}]))
    assert result.media_types == ["TEXT"]
    assert any("visual" in r for r in result.recommendations)


def test_posting_consistency_single_date():
    result = analyze_posting_consistency(_payload(_daily_posts(1)))
    assert result.score == 2
    assert result.longest_streak == 1


def test_posting_consistency_daily_posts():
    result = analyze_posting_consistency(_payload(_daily_posts(10)))
    assert result.consistency_score == pytest.approx(0.93)
    assert result.score == pytest.approx(9.3)
    assert result.longest_streak == 7


def test_posting_consistency_long_gaps_floor_at_zero():
    records = [{"Date": "2026-01-01 09:00:00"}, {"Date": "2026-02-15 09:00:00"}]
    result = analyze_posting_consistency(_payload(records))
    assert result.consistency_score == 0
    assert result.score == 0


def test_overall_score():
    assert overall_score([10, 5, None]) == 7.5
    assert overall_score([1, 2, 2]) == 1.7
    assert overall_score([1, 1.5]) == 1.3
    assert overall_score([]) == 0.0
    assert overall_score([None]) == 0.0


def test_safe_analysis_returns_default_on_failure():
    def broken(_payload):
        raise ValueError("boom")

    result = safe_analysis(broken, {}, lambda: analyze_posting_activity(None))
    assert result.score == 0
    assert result.total_posts == 0
