"""Schemas for Synergy partner management (/v1/synergy)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

InvitationAction = Literal["accept", "decline", "cancel"]


class UserSummary(BaseModel):
    """Public view of another platform user."""

    id: str
    name: str
    email: str | None = None
    avatar_url: str = Field(alias="avatarUrl")
    headline: str
    industry: str
    location: str

    model_config = {"populate_by_name": True}


class InvitationItem(BaseModel):
    id: str
    type: Literal["received", "sent"]
    message: str | None = None
    status: str
    created_at: datetime | None = Field(alias="createdAt", default=None)
    expires_at: datetime | None = Field(alias="expiresAt", default=None)
    user: UserSummary

    model_config = {"populate_by_name": True}


class InvitationsResponse(BaseModel):
    received: list[InvitationItem] = Field(default_factory=list)
    sent: list[InvitationItem] = Field(default_factory=list)
    received_count: int = Field(alias="receivedCount", default=0)
    sent_count: int = Field(alias="sentCount", default=0)
    timestamp: datetime

    model_config = {"populate_by_name": True}


class InvitationActionRequest(BaseModel):
    action: InvitationAction
    invitation_id: str = Field(alias="invitationId", min_length=1)

    model_config = {"populate_by_name": True}


class InviteRequest(BaseModel):
    partner_id: str = Field(alias="partnerId", min_length=1)
    message: str | None = Field(default=None, max_length=1000)

    model_config = {"populate_by_name": True}


class InviteResponse(BaseModel):
    success: bool = True
    invitation_id: str = Field(alias="invitationId")
    message: str = "Invitation sent successfully"

    model_config = {"populate_by_name": True}


class PartnerItem(UserSummary):
    linkedin_member_urn: str | None = Field(alias="linkedinMemberUrn", default=None)
    dma_active: bool = Field(alias="dmaActive", default=False)
    engagement_score: int = Field(alias="engagementScore", default=0)
    total_interactions: int = Field(alias="totalInteractions", default=0)
    partnership_type: str = Field(alias="partnershipType", default="mutual")
    partnership_date: datetime | None = Field(alias="partnershipDate", default=None)


class PartnersResponse(BaseModel):
    partners: list[PartnerItem] = Field(default_factory=list)
    invitations: list[InvitationItem] = Field(default_factory=list)
    total_partners: int = Field(alias="totalPartners", default=0)
    pending_invitations: int = Field(alias="pendingInvitations", default=0)

    model_config = {"populate_by_name": True}


class UserSearchResult(UserSummary):
    linkedin_member_urn: str | None = Field(alias="linkedinMemberUrn", default=None)
    dma_active: bool = Field(alias="dmaActive", default=True)
    total_connections: int = Field(alias="totalConnections", default=0)
    profile_completeness: int = Field(alias="profileCompleteness", default=0)
    joined_date: datetime | None = Field(alias="joinedDate", default=None)


class UserSearchMetadata(BaseModel):
    search_performed: bool = Field(alias="searchPerformed")
    excluded_partners: int = Field(alias="excludedPartners", default=0)
    excluded_pending: int = Field(alias="excludedPending", default=0)
    timestamp: datetime

    model_config = {"populate_by_name": True}


class UserSearchResponse(BaseModel):
    users: list[UserSearchResult] = Field(default_factory=list)
    total_found: int = Field(alias="totalFound", default=0)
    search_term: str = Field(alias="searchTerm", default="")
    dma_requirement: str = Field(
        alias="dmaRequirement",
        default="Only users with active DMA consent can be added as Synergy partners",
    )
    metadata: UserSearchMetadata

    model_config = {"populate_by_name": True}


class PartnerPost(BaseModel):
    id: str
    content: str = ""
    media_type: str = Field(alias="mediaType", default="TEXT")
    media_url: str | None = Field(alias="mediaUrl", default=None)
    linkedin_url: str | None = Field(alias="linkedinUrl", default=None)
    created_at: int = Field(alias="createdAt")  # epoch ms
    likes: int = 0
    comments: int = 0
    shares: int = 0
    engagement_rate: float = Field(alias="engagementRate", default=0)
    fetched_at: datetime | None = Field(alias="fetchedAt", default=None)
    source: str = "cache"
    is_stale: bool = Field(alias="isStale", default=False)

    model_config = {"populate_by_name": True}


class PartnerPostsResponse(BaseModel):
    posts: list[PartnerPost] = Field(default_factory=list)
    count: int = 0
    source: str = "cache"
    partner_sync_status: str = Field(alias="partnerSyncStatus", default="pending")
    last_sync: datetime | None = Field(alias="lastSync", default=None)

    model_config = {"populate_by_name": True}


class SuggestCommentRequest(BaseModel):
    post_urn: str = Field(alias="postUrn", min_length=1)
    post_content: str = Field(alias="postContent", min_length=1)
    partner_id: str | None = Field(alias="partnerId", default=None)

    model_config = {"populate_by_name": True}


class CommentSuggestion(BaseModel):
    id: str
    text: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}


class SuggestCommentResponse(BaseModel):
    suggestions: list[CommentSuggestion] = Field(min_length=3, max_length=3)
    post_urn: str = Field(alias="postUrn")
    generated_at: datetime = Field(alias="generatedAt")

    model_config = {"populate_by_name": True}
