"""Schemas for user registration and post sync."""

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Optional profile fields; missing ones are filled from the PROFILE snapshot."""

    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    avatar_url: str | None = Field(alias="avatarUrl", default=None)
    headline: str | None = None
    industry: str | None = Field(default=None, max_length=200)
    location: str | None = Field(default=None, max_length=200)

    model_config = {"populate_by_name": True}


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user_id: str = Field(alias="userId")
    is_new_user: bool = Field(alias="isNewUser")
    dma_active: bool = Field(alias="dmaActive", default=True)

    model_config = {"populate_by_name": True}


class SyncResult(BaseModel):
    """Outcome of a post cache sync."""

    status: str
    posts_found: int = Field(alias="postsFound", default=0)
    inserted: int = 0
    updated: int = 0
    comments_stored: int = Field(alias="commentsStored", default=0)
    synced_at: datetime | None = Field(alias="syncedAt", default=None)
    message: str | None = None

    model_config = {"populate_by_name": True}


class SyncStatusResponse(BaseModel):
    """Current post cache state for the caller."""

    status: str
    last_sync: datetime | None = Field(alias="lastSync", default=None)
    posts_count: int = Field(alias="postsCount", default=0)
    latest_post_date: datetime | None = Field(alias="latestPostDate", default=None)
    timestamp: datetime

    model_config = {"populate_by_name": True}
