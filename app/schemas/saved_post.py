"""Saved post schemas."""

from datetime import datetime

from pydantic import Field

from app.schemas.trending import CamelModel, TrendingPost


class SavedPostCreate(CamelModel):
    """Bookmark a trending post, with optional notes."""

    post: TrendingPost
    notes: str | None = Field(None, max_length=5000)


class SavedPostRead(CamelModel):
    id: int
    post_id: str
    post: TrendingPost
    saved_at: datetime
    notes: str | None = None
