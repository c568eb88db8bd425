"""Saved trending post model — posts bookmarked from search results."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, JSONType


class SavedTrendingPost(Base):
    __tablename__ = "saved_trending_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    post_data: Mapped[dict] = mapped_column(JSONType, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
