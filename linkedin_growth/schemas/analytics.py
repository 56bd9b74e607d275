"""Schemas for the analytics deep-dive endpoint (/v1/analytics)."""

from datetime import datetime

from pydantic import BaseModel, Field

from linkedin_growth.schemas.common import ReconnectResponse


class TrendPoint(BaseModel):
    """Posting activity for one calendar day (UTC)."""

    date: str  # YYYY-MM-DD
    label: str  # e.g. "Jan 5"
    posts: int = 0
    likes: int = 0
    comments: int = 0
    total_engagement: int = Field(alias="totalEngagement", default=0)

    model_config = {"populate_by_name": True}


class NamedShare(BaseModel):
    """A named bucket with its count and share of the total (0-100)."""

    name: str
    value: int
    percentage: int


class EngagedPost(BaseModel):
    post_id: str = Field(alias="postId")
    content: str
    likes: int
    comments: int
    shares: int
    total_engagement: int = Field(alias="totalEngagement")
    created_at: int | None = Field(alias="createdAt", default=None)  # epoch ms
    engagement_rate: float = Field(alias="engagementRate")

    model_config = {"populate_by_name": True}


class HashtagTrend(BaseModel):
    hashtag: str
    count: int
    posts: int


class AudienceInsights(BaseModel):
    industries: list[NamedShare] = Field(default_factory=list)
    positions: list[NamedShare] = Field(default_factory=list)
    locations: list[NamedShare] = Field(default_factory=list)
    total_connections: int = Field(alias="totalConnections", default=0)

    model_config = {"populate_by_name": True}


class EngagementDistribution(BaseModel):
    low: int = 0
    medium: int = 0
    high: int = 0


class BestPost(BaseModel):
    content: str
    engagement: int
    date: str | None = None


class PerformanceMetrics(BaseModel):
    total_engagement: int = Field(alias="totalEngagement", default=0)
    avg_engagement_per_post: float = Field(alias="avgEngagementPerPost", default=0)
    best_performing_post: BestPost | None = Field(alias="bestPerformingPost", default=None)
    engagement_distribution: EngagementDistribution = Field(
        alias="engagementDistribution",
        default_factory=EngagementDistribution,
    )

    model_config = {"populate_by_name": True}


class DayCount(BaseModel):
    day: str
    count: int


class HourCount(BaseModel):
    hour: int = Field(ge=0, le=23)
    count: int


class TimeBasedInsights(BaseModel):
    best_posting_days: list[DayCount] = Field(alias="bestPostingDays", default_factory=list)
    best_posting_hours: list[HourCount] = Field(alias="bestPostingHours", default_factory=list)
    posting_frequency: float = Field(alias="postingFrequency", default=0)

    model_config = {"populate_by_name": True}


class AnalyticsMetadata(BaseModel):
    has_recent_activity: bool = Field(alias="hasRecentActivity", default=False)
    data_source: str = Field(alias="dataSource", default="snapshot_v2")
    posts_count: int = Field(alias="postsCount", default=0)
    total_posts_count: int = Field(alias="totalPostsCount", default=0)
    connections_count: int = Field(alias="connectionsCount", default=0)
    fetch_time_ms: int = Field(alias="fetchTimeMs", default=0)
    description: str = ""
    cached: bool = False

    model_config = {"populate_by_name": True}


class AnalyticsReport(BaseModel):
    """Response payload for GET /v1/analytics."""

    posting_trends: list[TrendPoint] = Field(alias="postingTrends", default_factory=list)
    content_formats: list[NamedShare] = Field(alias="contentFormats", default_factory=list)
    engagement_analysis: list[EngagedPost] = Field(alias="engagementAnalysis", default_factory=list)
    hashtag_trends: list[HashtagTrend] = Field(alias="hashtagTrends", default_factory=list)
    audience_insights: AudienceInsights = Field(alias="audienceInsights", default_factory=AudienceInsights)
    performance_metrics: PerformanceMetrics = Field(
        alias="performanceMetrics",
        default_factory=PerformanceMetrics,
    )
    time_based_insights: TimeBasedInsights = Field(
        alias="timeBasedInsights",
        default_factory=TimeBasedInsights,
    )
    time_range: str = Field(alias="timeRange")
    last_updated: datetime = Field(alias="lastUpdated")
    metadata: AnalyticsMetadata = Field(default_factory=AnalyticsMetadata)
    ai_narrative: str | None = Field(alias="aiNarrative", default=None)

    model_config = {"populate_by_name": True}


class AnalyticsReconnectResponse(ReconnectResponse):
    """Reconnect payload that still carries a zeroed analytics shape."""

    analytics: AnalyticsReport
