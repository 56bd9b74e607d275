"""initial_schema

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-09-28
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "1a2b3c4d5e6f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


account_status = sa.Enum("ACTIVE", "SUSPENDED", "DELETED", name="accountstatus")
subscription_tier = sa.Enum("FREE", "PRO", "ENTERPRISE", name="subscriptiontier")
sync_status = sa.Enum("PENDING", "SYNCING", "COMPLETED", "FAILED", name="syncstatus")
invitation_status = sa.Enum("PENDING", "ACCEPTED", "DECLINED", "CANCELLED", "EXPIRED", name="invitationstatus")
partner_status = sa.Enum("ACTIVE", "PAUSED", "ENDED", name="partnerstatus")
media_type = sa.Enum("TEXT", "IMAGE", "VIDEO", "ARTICLE", "CAROUSEL", "POLL", "DOCUMENT", name="mediatype")


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("linkedin_member_urn", sa.String(length=200), nullable=True),
        sa.Column("headline", sa.Text(), nullable=True),
        sa.Column("industry", sa.String(length=200), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("dma_active", sa.Boolean(), nullable=False),
        sa.Column("dma_consent_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("account_status", account_status, nullable=False),
        sa.Column("subscription_tier", subscription_tier, nullable=False),
        sa.Column("posts_sync_status", sync_status, nullable=False),
        sa.Column("last_posts_sync", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_user_id"), "users", ["user_id"], unique=True)
    op.create_index(op.f("ix_users_linkedin_member_urn"), "users", ["linkedin_member_urn"], unique=True)
    op.create_index(op.f("ix_users_dma_active"), "users", ["dma_active"], unique=False)

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("headline", sa.Text(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("industry", sa.String(length=200), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("current_position", sa.String(length=200), nullable=True),
        sa.Column("current_company", sa.String(length=200), nullable=True),
        sa.Column("profile_completeness_score", sa.Integer(), nullable=False),
        sa.Column("total_connections", sa.Integer(), nullable=False),
        sa.Column("last_synced", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(
            "profile_completeness_score >= 0 AND profile_completeness_score <= 100",
            name="ck_user_profiles_completeness_range",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_profiles_user_id"), "user_profiles", ["user_id"], unique=True)

    op.create_table(
        "synergy_invitations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("invitation_id", sa.String(length=100), nullable=False),
        sa.Column("from_user_id", sa.Integer(), nullable=False),
        sa.Column("to_user_id", sa.Integer(), nullable=False),
        sa.Column("status", invitation_status, nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("from_user_id <> to_user_id", name="ck_synergy_invitations_not_self"),
        sa.ForeignKeyConstraint(["from_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["to_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("from_user_id", "to_user_id", name="uq_synergy_invitations_pair"),
    )
    op.create_index(op.f("ix_synergy_invitations_invitation_id"), "synergy_invitations", ["invitation_id"], unique=True)
    op.create_index(op.f("ix_synergy_invitations_from_user_id"), "synergy_invitations", ["from_user_id"], unique=False)
    op.create_index(op.f("ix_synergy_invitations_to_user_id"), "synergy_invitations", ["to_user_id"], unique=False)
    op.create_index(op.f("ix_synergy_invitations_status"), "synergy_invitations", ["status"], unique=False)

    op.create_table(
        "synergy_partners",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("a_user_id", sa.Integer(), nullable=False),
        sa.Column("b_user_id", sa.Integer(), nullable=False),
        sa.Column("status", partner_status, nullable=False),
        sa.Column("partnership_type", sa.String(length=50), nullable=False),
        sa.Column("engagement_score", sa.Integer(), nullable=False),
        sa.Column("total_interactions", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("a_user_id < b_user_id", name="ck_synergy_partners_ordered"),
        sa.CheckConstraint(
            "engagement_score >= 0 AND engagement_score <= 100",
            name="ck_synergy_partners_engagement_range",
        ),
        sa.ForeignKeyConstraint(["a_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["b_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("a_user_id", "b_user_id", name="uq_synergy_partners_pair"),
    )
    op.create_index(op.f("ix_synergy_partners_a_user_id"), "synergy_partners", ["a_user_id"], unique=False)
    op.create_index(op.f("ix_synergy_partners_b_user_id"), "synergy_partners", ["b_user_id"], unique=False)
    op.create_index(op.f("ix_synergy_partners_status"), "synergy_partners", ["status"], unique=False)

    op.create_table(
        "post_cache",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_urn", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("media_type", media_type, nullable=False),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("linkedin_url", sa.Text(), nullable=True),
        sa.Column("hashtags_json", sa.Text(), nullable=True),
        sa.Column("created_at_ms", sa.BigInteger(), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("comments", sa.Integer(), nullable=False),
        sa.Column("shares", sa.Integer(), nullable=False),
        sa.Column("impressions", sa.Integer(), nullable=False),
        sa.Column("engagement_rate", sa.Float(), nullable=False),
        sa.Column("performance_tier", sa.String(length=20), nullable=False),
        sa.Column("repurpose_eligible", sa.Boolean(), nullable=False),
        _timestamp("fetched_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_urn", name="uq_post_cache_user_post"),
    )
    op.create_index(op.f("ix_post_cache_user_id"), "post_cache", ["user_id"], unique=False)
    op.create_index(op.f("ix_post_cache_created_at_ms"), "post_cache", ["created_at_ms"], unique=False)

    op.create_table(
        "comment_cache",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("author_user_id", sa.Integer(), nullable=True),
        sa.Column("post_urn", sa.String(length=200), nullable=False),
        sa.Column("comment_urn", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at_ms", sa.BigInteger(), nullable=False),
        _timestamp("fetched_at"),
        sa.ForeignKeyConstraint(["author_user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("comment_urn"),
    )
    op.create_index(op.f("ix_comment_cache_author_user_id"), "comment_cache", ["author_user_id"], unique=False)
    op.create_index(op.f("ix_comment_cache_post_urn"), "comment_cache", ["post_urn"], unique=False)
    op.create_index(op.f("ix_comment_cache_fetched_at"), "comment_cache", ["fetched_at"], unique=False)

    op.create_table(
        "suggested_comments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("suggestion_id", sa.String(length=100), nullable=False),
        sa.Column("from_user_id", sa.Integer(), nullable=False),
        sa.Column("to_user_id", sa.Integer(), nullable=True),
        sa.Column("post_urn", sa.String(length=200), nullable=False),
        sa.Column("suggestion", sa.Text(), nullable=False),
        sa.Column("tone", sa.String(length=50), nullable=True),
        sa.Column("used", sa.Boolean(), nullable=False),
        sa.Column("ai_model", sa.String(length=100), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["from_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["to_user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_suggested_comments_suggestion_id"), "suggested_comments", ["suggestion_id"], unique=True)
    op.create_index(op.f("ix_suggested_comments_from_user_id"), "suggested_comments", ["from_user_id"], unique=False)
    op.create_index(op.f("ix_suggested_comments_post_urn"), "suggested_comments", ["post_urn"], unique=False)
    op.create_index(op.f("ix_suggested_comments_created_at"), "suggested_comments", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("suggested_comments")
    op.drop_table("comment_cache")
    op.drop_table("post_cache")
    op.drop_table("synergy_partners")
    op.drop_table("synergy_invitations")
    op.drop_table("user_profiles")
    op.drop_table("users")

    bind = op.get_bind()
    for enum in (media_type, partner_status, invitation_status, sync_status, subscription_tier, account_status):
        enum.drop(bind, checkfirst=True)
