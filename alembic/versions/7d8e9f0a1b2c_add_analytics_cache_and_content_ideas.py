"""add_analytics_cache_and_content_ideas

Revision ID: 7d8e9f0a1b2c
Revises: 1a2b3c4d5e6f
Create Date: 2026-10-05
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7d8e9f0a1b2c"
down_revision: Union[str, Sequence[str], None] = "1a2b3c4d5e6f"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "analytics_cache",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("cache_key", sa.String(length=100), nullable=False),
        sa.Column("time_range", sa.String(length=20), nullable=False),
        sa.Column("data_type", sa.String(length=50), nullable=False),
        sa.Column("payload_json", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("hit_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "cache_key", "time_range", name="uq_analytics_cache_key"),
    )
    op.create_index(op.f("ix_analytics_cache_user_id"), "analytics_cache", ["user_id"], unique=False)
    op.create_index(op.f("ix_analytics_cache_expires_at"), "analytics_cache", ["expires_at"], unique=False)

    op.create_table(
        "content_ideas",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("content_type", sa.String(length=50), nullable=False),
        sa.Column("industry_focus", sa.String(length=200), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("ai_model", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_content_ideas_user_id"), "content_ideas", ["user_id"], unique=False)
    op.create_index(op.f("ix_content_ideas_content_type"), "content_ideas", ["content_type"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_content_ideas_content_type"), table_name="content_ideas")
    op.drop_index(op.f("ix_content_ideas_user_id"), table_name="content_ideas")
    op.drop_table("content_ideas")

    op.drop_index(op.f("ix_analytics_cache_expires_at"), table_name="analytics_cache")
    op.drop_index(op.f("ix_analytics_cache_user_id"), table_name="analytics_cache")
    op.drop_table("analytics_cache")
