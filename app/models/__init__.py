"""SQLAlchemy models package."""

from app.models.saved_post import SavedTrendingPost
from app.models.trending_cache import TrendingPostsCache

__all__ = [
    "SavedTrendingPost",
    "TrendingPostsCache",
]
