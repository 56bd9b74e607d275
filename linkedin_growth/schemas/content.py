"""Schemas for the Creation Engine (/v1/creation) and PostGen (/v1/postgen)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CreationRequest(BaseModel):
    """Body for POST /v1/creation/ai."""

    type: str = Field(description="content_ideas | posting_strategy | algorithm_optimization")
    industry: str = "Professional Services"
    user_profile: dict[str, Any] = Field(alias="userProfile", default_factory=dict)
    save: bool = Field(default=False, description="Persist the generated content to content_ideas")

    model_config = {"populate_by_name": True}


class GeneratedContent(BaseModel):
    """AI output envelope shared by all generation endpoints."""

    type: str
    content: str
    timestamp: datetime


class PostTopicRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=2000)
    save: bool = False


class PostTextRequest(BaseModel):
    text: str = Field(min_length=1, max_length=10000)
    save: bool = False


class PerformanceAnalysisRequest(BaseModel):
    posts: list[dict[str, Any]] = Field(default_factory=list)
    engagement: list[dict[str, Any]] = Field(default_factory=list)


class ContentStrategyRequest(BaseModel):
    history: list[dict[str, Any]] = Field(default_factory=list)
    metrics: dict[str, Any] = Field(default_factory=dict)


class ContentIdeaItem(BaseModel):
    """One saved generation from content_ideas."""

    id: int
    type: str
    industry: str | None = None
    content: str
    ai_model: str | None = Field(alias="aiModel", default=None)
    created_at: datetime | None = Field(alias="createdAt", default=None)

    model_config = {"populate_by_name": True}


class ContentIdeasResponse(BaseModel):
    """Body for GET /v1/creation/ideas."""

    ideas: list[ContentIdeaItem]
    total: int
