"""Schemas for the dashboard endpoint (/v1/dashboard)."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileBreakdown(BaseModel):
    """Points per profile section (each section is worth 20)."""

    basic_info: int = Field(alias="basicInfo", default=0, ge=0, le=20)
    headline: int = Field(default=0, ge=0, le=20)
    summary: int = Field(default=0, ge=0, le=20)
    experience: int = Field(default=0, ge=0, le=20)
    skills: int = Field(default=0, ge=0, le=20)

    model_config = {"populate_by_name": True}

    def total(self) -> int:
        return self.basic_info + self.headline + self.summary + self.experience + self.skills


class ProfileCompletenessAnalysis(BaseModel):
    score: float = Field(ge=0, le=10)
    breakdown: ProfileBreakdown
    recommendations: list[str] = Field(default_factory=list)
    ai_insight: str | None = Field(alias="aiInsight", default=None)

    model_config = {"populate_by_name": True}


class PostingActivityAnalysis(BaseModel):
    score: float = Field(ge=0, le=10)
    posts_per_week: float = Field(alias="postsPerWeek", ge=0)
    total_posts: int = Field(alias="totalPosts", ge=0)
    recommendations: list[str] = Field(default_factory=list)
    ai_insight: str | None = Field(alias="aiInsight", default=None)

    model_config = {"populate_by_name": True}


class EngagementQualityAnalysis(BaseModel):
    score: float = Field(ge=0, le=10)
    avg_engagement_per_post: float = Field(alias="avgEngagementPerPost", ge=0)
    total_engagement: int = Field(alias="totalEngagement", ge=0)
    recommendations: list[str] = Field(default_factory=list)
    ai_insight: str | None = Field(alias="aiInsight", default=None)

    model_config = {"populate_by_name": True}


class ContentImpactAnalysis(BaseModel):
    score: float = Field(ge=0, le=10)
    high_engagement_posts: int = Field(alias="highEngagementPosts", ge=0)
    engagement_threshold: int = Field(alias="engagementThreshold")
    recommendations: list[str] = Field(default_factory=list)
    ai_insight: str | None = Field(alias="aiInsight", default=None)

    model_config = {"populate_by_name": True}


class ContentDiversityAnalysis(BaseModel):
    score: float = Field(ge=0, le=10)
    media_types: list[str] = Field(alias="mediaTypes", default_factory=list)
    diversity_ratio: float = Field(alias="diversityRatio", ge=0)
    recommendations: list[str] = Field(default_factory=list)
    ai_insight: str | None = Field(alias="aiInsight", default=None)

    model_config = {"populate_by_name": True}


class PostingConsistencyAnalysis(BaseModel):
    score: float = Field(ge=0, le=10)
    consistency_score: float = Field(alias="consistencyScore", ge=0, le=1)
    longest_streak: int = Field(alias="longestStreak", ge=0)
    recommendations: list[str] = Field(default_factory=list)
    ai_insight: str | None = Field(alias="aiInsight", default=None)

    model_config = {"populate_by_name": True}


class DashboardScores(BaseModel):
    overall: float
    profile_completeness: float = Field(alias="profileCompleteness")
    posting_activity: float = Field(alias="postingActivity")
    engagement_quality: float = Field(alias="engagementQuality")
    content_impact: float = Field(alias="contentImpact")
    content_diversity: float = Field(alias="contentDiversity")
    posting_consistency: float = Field(alias="postingConsistency")

    model_config = {"populate_by_name": True}


class DashboardAnalysis(BaseModel):
    profile_completeness: ProfileCompletenessAnalysis = Field(alias="profileCompleteness")
    posting_activity: PostingActivityAnalysis = Field(alias="postingActivity")
    engagement_quality: EngagementQualityAnalysis = Field(alias="engagementQuality")
    content_impact: ContentImpactAnalysis = Field(alias="contentImpact")
    content_diversity: ContentDiversityAnalysis = Field(alias="contentDiversity")
    posting_consistency: PostingConsistencyAnalysis = Field(alias="postingConsistency")

    model_config = {"populate_by_name": True}


class DashboardSummary(BaseModel):
    total_connections: int = Field(alias="totalConnections", ge=0)
    total_posts: int = Field(alias="totalPosts", ge=0)
    avg_engagement_per_post: float = Field(alias="avgEngagementPerPost", ge=0)
    posts_per_week: float = Field(alias="postsPerWeek", ge=0)

    model_config = {"populate_by_name": True}


class DashboardMetadata(BaseModel):
    fetch_time_ms: int = Field(alias="fetchTimeMs", ge=0)
    data_source: str = Field(alias="dataSource")
    has_recent_activity: bool = Field(alias="hasRecentActivity")
    profile_data_available: bool = Field(alias="profileDataAvailable")
    posts_data_available: bool = Field(alias="postsDataAvailable")
    cached: bool = False

    model_config = {"populate_by_name": True}


class DashboardResponse(BaseModel):
    """Response payload for GET /v1/dashboard."""

    scores: DashboardScores
    analysis: DashboardAnalysis
    summary: DashboardSummary
    metadata: DashboardMetadata
    last_updated: datetime = Field(alias="lastUpdated")

    model_config = {"populate_by_name": True}
