"""Trending posts cache model — normalized search results with TTL."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, JSONType


class TrendingPostsCache(Base):
    """Ranked trending posts keyed by "<query>:<limit>:<offset>"."""

    __tablename__ = "trending_posts_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cache_key: Mapped[str] = mapped_column(String(512), nullable=False, unique=True, index=True)
    search_query: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    posts_data: Mapped[list] = mapped_column(JSONType, nullable=False)
    engagement_summary: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    result_count: Mapped[int] = mapped_column(Integer, default=0)
    total_results: Mapped[int] = mapped_column(Integer, default=0)  # vendor paging total
    cached_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
