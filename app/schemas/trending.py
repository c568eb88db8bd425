"""Trending post schemas — normalized search results and API payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PostType = Literal["text", "poll", "video", "image"]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either casing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReactionCount(CamelModel):
    type: str
    count: int = 0


class PostAuthor(CamelModel):
    name: str
    profile_url: str = ""
    company: str | None = None


class PostEngagement(CamelModel):
    """Engagement counters; total_reactions is the ranking signal."""

    likes: int = 0
    comments: int = 0
    shares: int = 0
    total_reactions: int = 0
    reaction_breakdown: list[ReactionCount] = Field(default_factory=list)


class TrendingPost(CamelModel):
    """A normalized LinkedIn search result."""

    id: str
    content: str
    author: PostAuthor
    engagement: PostEngagement
    post_url: str = ""
    posted_at: str = ""
    post_type: PostType = "text"
    hashtags: list[str] = Field(default_factory=list)


class EngagementSummary(CamelModel):
    """Aggregate stats over a result set (advisory metadata)."""

    total_posts: int = 0
    avg_likes: int = 0
    avg_comments: int = 0
    avg_shares: int = 0
    avg_total_engagement: int = 0
    total_hashtags: dict[str, int] = Field(default_factory=dict)
    post_type_distribution: dict[str, int] = Field(default_factory=dict)


class TrendingSearchRequest(CamelModel):
    """Search trending posts."""

    query: str = Field(..., max_length=500)
    limit: int = Field(10, ge=1, le=100)
    offset: int = Field(0, ge=0, validation_alias=AliasChoices("offset", "offsite"))
    min_engagement: int = Field(0, ge=0)


class TrendingSearchResponse(CamelModel):
    posts: list[TrendingPost] = Field(default_factory=list)
    total_results: int = 0
    cached: bool = False
    cache_expires_at: datetime | None = None
    engagement_summary: EngagementSummary | None = None
    warning: str | None = None


class CacheStatusResponse(CamelModel):
    cached: bool
    cache_expires_at: datetime | None = None
    message: str
