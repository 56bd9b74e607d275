"""AI-generated comment suggestions for a partner's post."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from linkedin_growth.stores.postgres import Base


def generate_suggestion_id() -> str:
    """Generate unique suggestion ID."""
    return str(uuid4())


class SuggestedComment(Base):
    __tablename__ = "suggested_comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    suggestion_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        default=generate_suggestion_id,
    )

    from_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    to_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    post_urn: Mapped[str] = mapped_column(String(200), index=True)

    suggestion: Mapped[str] = mapped_column(Text)
    tone: Mapped[str | None] = mapped_column(String(50))  # insight / question / compliment
    used: Mapped[bool] = mapped_column(default=False)
    ai_model: Mapped[str | None] = mapped_column(String(100))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
