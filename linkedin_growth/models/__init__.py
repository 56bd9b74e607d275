"""SQLAlchemy ORM models.

Models represent database tables:
- users / user_profiles: Platform users and their profile stats
- synergy_invitations / synergy_partners: Partner management
- post_cache / comment_cache: Cached LinkedIn activity
- suggested_comments: AI comment suggestions
- analytics_cache: Computed report cache
- content_ideas: Persisted AI content
"""

from linkedin_growth.models.user import AccountStatus, SubscriptionTier, SyncStatus, User
from linkedin_growth.models.user_profile import UserProfile
from linkedin_growth.models.synergy import (
    InvitationStatus,
    PartnerStatus,
    SynergyInvitation,
    SynergyPartner,
)
from linkedin_growth.models.post_cache import PostCache
from linkedin_growth.models.comment_cache import CommentCache
from linkedin_growth.models.suggested_comment import SuggestedComment
from linkedin_growth.models.analytics_cache import AnalyticsCache
from linkedin_growth.models.content_idea import ContentIdea

__all__ = [
    "AccountStatus",
    "AnalyticsCache",
    "CommentCache",
    "ContentIdea",
    "InvitationStatus",
    "PartnerStatus",
    "PostCache",
    "SubscriptionTier",
    "SuggestedComment",
    "SyncStatus",
    "SynergyInvitation",
    "SynergyPartner",
    "User",
    "UserProfile",
]
