"""Synergy models: partner invitations and active partnerships.

Partnerships are stored once per pair with `a_user_id < b_user_id`, so the
pair (x, y) and (y, x) map to the same row.
"""

from datetime import datetime
from enum import Enum as PyEnum
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from linkedin_growth.stores.postgres import Base


def generate_invitation_id() -> str:
    """Generate unique invitation ID."""
    return str(uuid4())


class InvitationStatus(PyEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PartnerStatus(PyEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class SynergyInvitation(Base):
    """Invitation from one user to another to become synergy partners."""

    __tablename__ = "synergy_invitations"
    __table_args__ = (
        UniqueConstraint("from_user_id", "to_user_id", name="uq_synergy_invitations_pair"),
        CheckConstraint("from_user_id <> to_user_id", name="ck_synergy_invitations_not_self"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # Public invitation ID (used in URLs)
    invitation_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        default=generate_invitation_id,
    )

    from_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    to_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    status: Mapped[InvitationStatus] = mapped_column(
        Enum(InvitationStatus),
        default=InvitationStatus.PENDING,
        index=True,
    )
    message: Mapped[str | None] = mapped_column(Text)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<SynergyInvitation {self.invitation_id} {self.status.value}>"


class SynergyPartner(Base):
    """Active (or ended) partnership between two users."""

    __tablename__ = "synergy_partners"
    __table_args__ = (
        UniqueConstraint("a_user_id", "b_user_id", name="uq_synergy_partners_pair"),
        CheckConstraint("a_user_id < b_user_id", name="ck_synergy_partners_ordered"),
        CheckConstraint(
            "engagement_score >= 0 AND engagement_score <= 100",
            name="ck_synergy_partners_engagement_range",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    a_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    b_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    status: Mapped[PartnerStatus] = mapped_column(
        Enum(PartnerStatus),
        default=PartnerStatus.ACTIVE,
        index=True,
    )
    partnership_type: Mapped[str] = mapped_column(String(50), default="mutual")
    engagement_score: Mapped[int] = mapped_column(Integer, default=0)
    total_interactions: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def other(self, user_pk: int) -> int:
        """The partner's id from `user_pk`'s point of view."""
        return self.b_user_id if self.a_user_id == user_pk else self.a_user_id

    def __repr__(self) -> str:
        return f"<SynergyPartner {self.a_user_id}<->{self.b_user_id} {self.status.value}>"
