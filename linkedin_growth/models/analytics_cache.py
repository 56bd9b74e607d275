"""Computed report cache.

One row per (user, cache_key, time_range). Rows past `expires_at` are ignored
on read and deleted by the cleanup job.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from linkedin_growth.stores.postgres import Base


class AnalyticsCache(Base):
    __tablename__ = "analytics_cache"
    __table_args__ = (
        UniqueConstraint("user_id", "cache_key", "time_range", name="uq_analytics_cache_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    cache_key: Mapped[str] = mapped_column(String(100))  # dashboard / analytics / algo
    time_range: Mapped[str] = mapped_column(String(20), default="all")
    data_type: Mapped[str] = mapped_column(String(50))

    # JSON-serialized report payload
    payload_json: Mapped[str] = mapped_column(Text)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    hit_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
