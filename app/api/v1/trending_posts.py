"""Trending posts endpoints — engagement-ranked LinkedIn post search."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.core.logging import get_logger
from app.deps import DbSession
from app.schemas.trending import (
    CacheStatusResponse,
    TrendingSearchRequest,
    TrendingSearchResponse,
)
from app.services.linkedin_search import (
    LinkedInSearchClient,
    RateLimitedError,
    UpstreamNotConfigured,
)
from app.services.trending_cache import TrendingCacheStore
from app.services.trending_posts import InvalidSearchQuery, TrendingPostsService

logger = get_logger(__name__)

router = APIRouter()


def get_trending_service(db: DbSession) -> TrendingPostsService:
    return TrendingPostsService(TrendingCacheStore(db), LinkedInSearchClient.from_settings())


TrendingService = Annotated[TrendingPostsService, Depends(get_trending_service)]


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "posts": [],
            "totalResults": 0,
            "cached": False,
        },
    )


@router.post("", response_model=TrendingSearchResponse, response_model_exclude_none=True)
async def search_trending_posts(
    data: TrendingSearchRequest,
    service: TrendingService,
) -> TrendingSearchResponse | JSONResponse:
    """Search trending posts, most engaged first, through the cache."""
    try:
        return await service.search(
            data.query,
            limit=data.limit,
            offset=data.offset,
            min_engagement=data.min_engagement,
        )
    except InvalidSearchQuery as e:
        return _error(str(e), status.HTTP_400_BAD_REQUEST)
    except UpstreamNotConfigured as e:
        return _error(str(e), status.HTTP_503_SERVICE_UNAVAILABLE)
    except RateLimitedError:
        return _error(
            "Rate limit reached. Please try again later.",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    except Exception as e:
        logger.exception("trending_search_failed", query=data.query)
        return _error(str(e) or "Failed to search trending posts", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("", response_model=CacheStatusResponse, response_model_exclude_none=True)
async def get_cache_status(
    service: TrendingService,
    query: str = Query(..., min_length=1, max_length=500),
) -> CacheStatusResponse:
    """Whether default-parameter results for a query are cached."""
    return await service.cache_status(query)
