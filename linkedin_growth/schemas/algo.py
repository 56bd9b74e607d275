"""Schemas for "The Algo" endpoint (/v1/algo)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from linkedin_growth.schemas.analytics import DayCount, EngagementDistribution, HourCount


class PostFrequencyMetric(BaseModel):
    score: float = Field(ge=0, le=10)
    posts_per_week: float = Field(alias="postsPerWeek", default=0)
    recommendation: str

    model_config = {"populate_by_name": True}


class EngagementRateMetric(BaseModel):
    score: float = Field(ge=0, le=10)
    rate: float = 0
    total_engagement: int = Field(alias="totalEngagement", default=0)
    recommendation: str

    model_config = {"populate_by_name": True}


class ReachMetric(BaseModel):
    score: float = Field(ge=0, le=10)
    estimated_reach: int = Field(alias="estimatedReach", default=0)
    recommendation: str

    model_config = {"populate_by_name": True}


class ContentMixMetric(BaseModel):
    score: float = Field(ge=0, le=10)
    diversity: int = 0
    types: list[str] = Field(default_factory=list)
    recommendation: str


class ConsistencyMetric(BaseModel):
    score: float = Field(ge=0, le=10)
    consistency: int = Field(default=0, ge=0, le=100)  # percent
    recommendation: str


class AlgoMetrics(BaseModel):
    post_frequency: PostFrequencyMetric = Field(alias="postFrequency")
    engagement_rate: EngagementRateMetric = Field(alias="engagementRate")
    reach_score: ReachMetric = Field(alias="reachScore")
    content_mix_score: ContentMixMetric = Field(alias="contentMixScore")
    consistency_score: ConsistencyMetric = Field(alias="consistencyScore")
    algorithm_grade: str = Field(alias="algorithmGrade")

    model_config = {"populate_by_name": True}


class OptimizationRecommendation(BaseModel):
    category: str
    priority: Literal["high", "medium", "low"]
    action: str
    impact: str


class BestPostingTimes(BaseModel):
    best_hours: list[HourCount] = Field(alias="bestHours", default_factory=list)
    best_days: list[DayCount] = Field(alias="bestDays", default_factory=list)

    model_config = {"populate_by_name": True}


class FormatPerformance(BaseModel):
    format: str
    avg_engagement: float = Field(alias="avgEngagement")
    post_count: int = Field(alias="postCount")

    model_config = {"populate_by_name": True}


class EngagementPatterns(BaseModel):
    comments_to_likes_ratio: float = Field(alias="commentsToLikesRatio", default=0)
    high_engagement_posts: int = Field(alias="highEngagementPosts", default=0)
    engagement_distribution: EngagementDistribution = Field(
        alias="engagementDistribution",
        default_factory=EngagementDistribution,
    )

    model_config = {"populate_by_name": True}


class AlgoInsights(BaseModel):
    best_posting_times: BestPostingTimes = Field(alias="bestPostingTimes", default_factory=BestPostingTimes)
    top_performing_formats: list[FormatPerformance] = Field(alias="topPerformingFormats", default_factory=list)
    engagement_patterns: EngagementPatterns = Field(alias="engagementPatterns", default_factory=EngagementPatterns)

    model_config = {"populate_by_name": True}


class AlgoMetadata(BaseModel):
    fetch_time_ms: int = Field(alias="fetchTimeMs", default=0)
    data_source: str = Field(alias="dataSource", default="snapshot_algo")
    posts_analyzed: int = Field(alias="postsAnalyzed", default=0)
    has_recent_activity: bool = Field(alias="hasRecentActivity", default=False)
    cached: bool = False

    model_config = {"populate_by_name": True}


class AlgoResponse(BaseModel):
    """Response payload for GET /v1/algo."""

    metrics: AlgoMetrics
    ai_analysis: str | None = Field(alias="aiAnalysis", default=None)
    recommendations: list[OptimizationRecommendation] = Field(default_factory=list)
    insights: AlgoInsights = Field(default_factory=AlgoInsights)
    metadata: AlgoMetadata = Field(default_factory=AlgoMetadata)
    last_updated: datetime = Field(alias="lastUpdated")

    model_config = {"populate_by_name": True}
