"""User model.

A platform user, identified by the LinkedIn member URN returned by the DMA
consent check. `dma_active` mirrors the last consent verification.
"""

from datetime import datetime
from enum import Enum as PyEnum
from uuid import uuid4

from sqlalchemy import DateTime, Enum, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from linkedin_growth.stores.postgres import Base


def generate_user_id() -> str:
    """Generate unique user ID."""
    return str(uuid4())


class AccountStatus(PyEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class SubscriptionTier(PyEnum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class SyncStatus(PyEnum):
    """State of the member's post cache sync."""

    PENDING = "pending"
    SYNCING = "syncing"
    COMPLETED = "completed"
    FAILED = "failed"


class User(Base):
    """Platform user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Public user ID (used in API payloads)
    user_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        default=generate_user_id,
    )

    # Identity
    email: Mapped[str | None] = mapped_column(String(320), unique=True)
    name: Mapped[str | None] = mapped_column(String(200))
    avatar_url: Mapped[str | None] = mapped_column(Text)
    linkedin_member_urn: Mapped[str | None] = mapped_column(String(200), unique=True, index=True)

    # Denormalized profile fields used by partner search
    headline: Mapped[str | None] = mapped_column(Text)
    industry: Mapped[str | None] = mapped_column(String(200))
    location: Mapped[str | None] = mapped_column(String(200))

    # DMA consent
    dma_active: Mapped[bool] = mapped_column(default=False, index=True)
    dma_consent_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Account
    account_status: Mapped[AccountStatus] = mapped_column(
        Enum(AccountStatus),
        default=AccountStatus.ACTIVE,
    )
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        Enum(SubscriptionTier),
        default=SubscriptionTier.FREE,
    )

    # Post cache sync
    posts_sync_status: Mapped[SyncStatus] = mapped_column(
        Enum(SyncStatus),
        default=SyncStatus.PENDING,
    )
    last_posts_sync: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User {self.user_id} {self.linkedin_member_urn}>"
