"""Trending posts service — cache-aside search ranked by engagement.

Flow per search:
    cache lookup → (hit) re-rank + filter
                 → (miss) upstream search → normalize → rank → summarize
                   → write-through → filter
On upstream rate limiting, one stale read of the latest cached entry for the
same query is attempted before giving up.

Cache failures never fail a search: reads degrade to a miss and writes to a
no-op.
"""

from __future__ import annotations

from typing import Protocol

from app.config import get_settings
from app.core.logging import get_logger
from app.schemas.trending import (
    CacheStatusResponse,
    EngagementSummary,
    TrendingPost,
    TrendingSearchResponse,
)
from app.services.engagement import filter_by_engagement, rank_posts, summarize_engagement
from app.services.linkedin_search import LinkedInSearchClient, RateLimitedError
from app.services.trending_cache import CacheEntry
from app.services.trending_normalizer import normalize_search_response

logger = get_logger(__name__)
settings = get_settings()

RATE_LIMIT_WARNING = "Rate limit reached. Showing cached results."

# Cache key probed by the status endpoint (default search parameters)
_STATUS_LIMIT = 10
_STATUS_OFFSET = 0


class InvalidSearchQuery(ValueError):
    """The search query is missing or blank."""


class CacheStore(Protocol):
    async def get(self, cache_key: str) -> CacheEntry | None: ...

    async def get_latest_for_query(self, search_query: str) -> CacheEntry | None: ...

    async def put(
        self,
        cache_key: str,
        search_query: str,
        posts: list[TrendingPost],
        engagement_summary: EngagementSummary,
        expiration_hours: int,
        total_results: int = 0,
    ) -> CacheEntry: ...

    async def delete(self, cache_key: str) -> None: ...


def build_cache_key(query: str, limit: int, offset: int) -> str:
    """Deterministic cache key; the query is used verbatim.

    min_engagement is applied at read time, so it is not part of the key.
    """
    return f"{query}:{limit}:{offset}"


def _vendor_total(payload: dict) -> int | None:
    data = payload.get("data")
    paging = data.get("paging") if isinstance(data, dict) else None
    total = paging.get("total") if isinstance(paging, dict) else None
    if isinstance(total, int) and not isinstance(total, bool) and total > 0:
        return total
    return None


class TrendingPostsService:
    """Searches trending LinkedIn posts through the cache."""

    def __init__(
        self,
        store: CacheStore,
        client: LinkedInSearchClient,
        *,
        upstream_max_limit: int | None = None,
        ttl_hours: int | None = None,
        empty_ttl_hours: int | None = None,
    ) -> None:
        self.store = store
        self.client = client
        self.upstream_max_limit = (
            upstream_max_limit if upstream_max_limit is not None else settings.trending_upstream_max_limit
        )
        self.ttl_hours = ttl_hours if ttl_hours is not None else settings.trending_cache_ttl_hours
        self.empty_ttl_hours = (
            empty_ttl_hours if empty_ttl_hours is not None else settings.trending_empty_cache_ttl_hours
        )

    # ── Cache helpers ─────────────────────────────────────────────

    async def _read_fresh(self, cache_key: str) -> CacheEntry | None:
        """Live, non-empty entry for a key; empty entries are evicted."""
        try:
            entry = await self.store.get(cache_key)
        except Exception as e:
            logger.warning("trending_cache_read_failed", cache_key=cache_key, error=str(e))
            return None

        if entry is None or entry.is_expired():
            return None

        if not entry.posts:
            logger.info("trending_cache_empty_evicted", cache_key=cache_key)
            try:
                await self.store.delete(cache_key)
            except Exception as e:
                logger.warning("trending_cache_delete_failed", cache_key=cache_key, error=str(e))
            return None

        return entry

    async def _read_stale(self, query: str) -> CacheEntry | None:
        try:
            entry = await self.store.get_latest_for_query(query)
        except Exception as e:
            logger.warning("trending_cache_stale_read_failed", query=query, error=str(e))
            return None
        return entry if entry and entry.posts else None

    async def _write(
        self,
        cache_key: str,
        query: str,
        posts: list[TrendingPost],
        summary: EngagementSummary,
        total_results: int,
    ) -> None:
        expiration_hours = self.ttl_hours if posts else self.empty_ttl_hours
        try:
            await self.store.put(
                cache_key,
                query,
                posts,
                summary,
                expiration_hours,
                total_results=total_results,
            )
        except Exception as e:
            logger.warning("trending_cache_save_failed", cache_key=cache_key, error=str(e))

    @staticmethod
    def _from_entry(
        entry: CacheEntry,
        min_engagement: int,
        warning: str | None = None,
    ) -> TrendingSearchResponse:
        ranked = rank_posts(entry.posts)
        return TrendingSearchResponse(
            posts=filter_by_engagement(ranked, min_engagement),
            total_results=entry.total_results or len(entry.posts),
            cached=True,
            cache_expires_at=entry.expires_at,
            engagement_summary=entry.engagement_summary,
            warning=warning,
        )

    # ── Main entry points ─────────────────────────────────────────

    async def search(
        self,
        query: str,
        limit: int = 10,
        offset: int = 0,
        min_engagement: int = 0,
    ) -> TrendingSearchResponse:
        """Search trending posts, most engaged first.

        Raises:
            InvalidSearchQuery: blank query (before any I/O).
            UpstreamNotConfigured: cache miss and no API key.
            RateLimitedError: upstream 429 and no cached entry to fall back on.
            UpstreamError: any other upstream failure.
        """
        if not query or not query.strip():
            raise InvalidSearchQuery("Search query is required")

        cache_key = build_cache_key(query, limit, offset)

        entry = await self._read_fresh(cache_key)
        if entry is not None:
            logger.info(
                "trending_cache_hit",
                cache_key=cache_key,
                result_count=len(entry.posts),
            )
            return self._from_entry(entry, min_engagement)

        upstream_limit = min(limit, self.upstream_max_limit)
        try:
            payload = await self.client.search_posts(query, upstream_limit, offset)
        except RateLimitedError:
            stale = await self._read_stale(query)
            if stale is None:
                logger.warning("trending_rate_limited_no_fallback", query=query)
                raise
            logger.warning(
                "trending_rate_limited_stale_fallback",
                query=query,
                fallback_key=stale.cache_key,
            )
            return self._from_entry(stale, min_engagement, warning=RATE_LIMIT_WARNING)

        ranked = rank_posts(normalize_search_response(payload))
        summary = summarize_engagement(ranked)
        vendor_total = _vendor_total(payload)

        await self._write(cache_key, query, ranked, summary, vendor_total or 0)

        filtered = filter_by_engagement(ranked, min_engagement)

        logger.info(
            "trending_search_completed",
            query=query,
            result_count=len(ranked),
            filtered_count=len(filtered),
        )

        return TrendingSearchResponse(
            posts=filtered,
            total_results=vendor_total or len(filtered),
            cached=False,
            engagement_summary=summary,
        )

    async def cache_status(self, query: str) -> CacheStatusResponse:
        """Whether default-parameter results for a query are cached."""
        entry = await self._read_fresh(build_cache_key(query, _STATUS_LIMIT, _STATUS_OFFSET))
        if entry is None:
            return CacheStatusResponse(cached=False, message="No cached results found")
        return CacheStatusResponse(
            cached=True,
            cache_expires_at=entry.expires_at,
            message="Results are cached",
        )
