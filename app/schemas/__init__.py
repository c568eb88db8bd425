"""Pydantic schemas for API request/response validation."""

from app.schemas.carousel import (
    CarouselRequest,
    CarouselResponse,
    CarouselSlide,
    GeneratedCarousel,
)
from app.schemas.saved_post import SavedPostCreate, SavedPostRead
from app.schemas.trending import (
    CacheStatusResponse,
    EngagementSummary,
    PostAuthor,
    PostEngagement,
    ReactionCount,
    TrendingPost,
    TrendingSearchRequest,
    TrendingSearchResponse,
)

__all__ = [
    "CarouselRequest",
    "CarouselResponse",
    "CarouselSlide",
    "GeneratedCarousel",
    "SavedPostCreate",
    "SavedPostRead",
    "CacheStatusResponse",
    "EngagementSummary",
    "PostAuthor",
    "PostEngagement",
    "ReactionCount",
    "TrendingPost",
    "TrendingSearchRequest",
    "TrendingSearchResponse",
]
