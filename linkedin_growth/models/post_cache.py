"""Cached LinkedIn posts per user.

Rows are upserted by (user_id, post_urn) during post sync and read back for
partner feeds. Hashtags are a JSON-serialized list.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from linkedin_growth.services.snapshot import MediaType
from linkedin_growth.stores.postgres import Base


class PostCache(Base):
    __tablename__ = "post_cache"
    __table_args__ = (UniqueConstraint("user_id", "post_urn", name="uq_post_cache_user_post"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    post_urn: Mapped[str] = mapped_column(String(200))

    content: Mapped[str | None] = mapped_column(Text)
    media_type: Mapped[MediaType] = mapped_column(Enum(MediaType), default=MediaType.TEXT)
    media_url: Mapped[str | None] = mapped_column(Text)
    linkedin_url: Mapped[str | None] = mapped_column(Text)
    hashtags_json: Mapped[str | None] = mapped_column(Text)

    created_at_ms: Mapped[int] = mapped_column(BigInteger, index=True)

    # Engagement
    likes: Mapped[int] = mapped_column(Integer, default=0)
    comments: Mapped[int] = mapped_column(Integer, default=0)
    shares: Mapped[int] = mapped_column(Integer, default=0)
    impressions: Mapped[int] = mapped_column(Integer, default=0)
    engagement_rate: Mapped[float] = mapped_column(Float, default=0)
    performance_tier: Mapped[str] = mapped_column(String(20), default="low")  # low/average/high/viral
    repurpose_eligible: Mapped[bool] = mapped_column(default=False)

    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<PostCache {self.post_urn} tier={self.performance_tier}>"
