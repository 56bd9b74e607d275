"""Schemas for Post Pulse (/v1/postpulse)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

TimeFilter = Literal["7d", "30d", "all"]
PostTypeFilter = Literal["all", "text", "image", "video", "document"]
SortBy = Literal["recent", "oldest", "likes", "comments", "views"]
RepurposeState = Literal["too-soon", "close", "ready"]


class PostData(BaseModel):
    """A post extracted from the MEMBER_SHARE_INFO snapshot."""

    id: str
    text: str = ""
    created_at: int = Field(alias="createdAt")  # epoch ms
    likes: int = 0
    comments: int = 0
    shares: int = 0
    impressions: int = 0
    views: int = 0
    media_url: str | None = Field(alias="mediaUrl", default=None)
    document_url: str | None = Field(alias="documentUrl", default=None)
    linkedin_url: str | None = Field(alias="linkedinUrl", default=None)
    media_type: str = Field(alias="mediaType", default="TEXT")
    source: str = "historical"

    model_config = {"populate_by_name": True}


class RepurposeStatus(BaseModel):
    status: RepurposeState
    label: str
    days_since_posted: int = Field(alias="daysSincePosted")
    days_until_ready: int = Field(alias="daysUntilReady", ge=0)
    can_repost: bool = Field(alias="canRepost")

    model_config = {"populate_by_name": True}


class PostPulsePost(PostData):
    repurpose: RepurposeStatus


class PostPulseFilters(BaseModel):
    time_filter: TimeFilter = Field(alias="timeFilter", default="all")
    post_type: PostTypeFilter = Field(alias="postType", default="all")
    sort_by: SortBy = Field(alias="sortBy", default="oldest")

    model_config = {"populate_by_name": True}


class PostPulseMetadata(BaseModel):
    fetch_time_ms: int = Field(alias="fetchTimeMs", default=0)
    data_source: str = Field(alias="dataSource", default="member_share_info")
    total_posts_found: int = Field(alias="totalPostsFound", default=0)

    model_config = {"populate_by_name": True}


class PostPulseResponse(BaseModel):
    """Response payload for GET /v1/postpulse."""

    posts: list[PostPulsePost] = Field(default_factory=list)
    total: int = 0
    filters: PostPulseFilters = Field(default_factory=PostPulseFilters)
    is_cached: bool = Field(alias="isCached", default=False)
    timestamp: datetime
    metadata: PostPulseMetadata = Field(default_factory=PostPulseMetadata)

    model_config = {"populate_by_name": True}


class EngagementCounts(BaseModel):
    likes: int = 0
    comments: int = 0
    shares: int = 0


class RepurposeDraft(BaseModel):
    """Draft handed to the post generator's rewrite flow."""

    text: str
    original_date: datetime = Field(alias="originalDate")
    engagement: EngagementCounts
    media_url: str | None = Field(alias="mediaUrl", default=None)
    document_url: str | None = Field(alias="documentUrl", default=None)
    repurpose: RepurposeStatus

    model_config = {"populate_by_name": True}


class RepurposeRequest(BaseModel):
    post_id: str = Field(alias="postId", min_length=1)

    model_config = {"populate_by_name": True}
