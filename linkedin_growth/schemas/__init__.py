"""Pydantic schemas for API request/response validation."""

from linkedin_growth.schemas.common import ActionResult, ErrorDetail, ErrorResponse, ReconnectResponse
from linkedin_growth.schemas.algo import AlgoMetrics, AlgoResponse
from linkedin_growth.schemas.analytics import AnalyticsReconnectResponse, AnalyticsReport
from linkedin_growth.schemas.content import CreationRequest, GeneratedContent
from linkedin_growth.schemas.dashboard import DashboardAnalysis, DashboardResponse
from linkedin_growth.schemas.postpulse import PostData, PostPulseFilters, PostPulseResponse, RepurposeDraft
from linkedin_growth.schemas.synergy import (
    InvitationsResponse,
    PartnerPostsResponse,
    PartnersResponse,
    SuggestCommentResponse,
    UserSearchResponse,
)
from linkedin_growth.schemas.users import RegisterRequest, RegisterResponse, SyncResult, SyncStatusResponse

__all__ = [
    "ActionResult",
    "AlgoMetrics",
    "AlgoResponse",
    "AnalyticsReconnectResponse",
    "AnalyticsReport",
    "CreationRequest",
    "DashboardAnalysis",
    "DashboardResponse",
    "ErrorDetail",
    "ErrorResponse",
    "GeneratedContent",
    "InvitationsResponse",
    "PartnerPostsResponse",
    "PartnersResponse",
    "PostData",
    "PostPulseFilters",
    "PostPulseResponse",
    "ReconnectResponse",
    "RegisterRequest",
    "RegisterResponse",
    "RepurposeDraft",
    "SuggestCommentResponse",
    "SyncResult",
    "SyncStatusResponse",
    "UserSearchResponse",
]
