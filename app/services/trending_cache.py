"""Trending posts cache store — get/put/delete over trending_posts_cache.

Entries are derived, re-computable data: upserts are last-write-wins with no
locking. Every mutating call commits its own unit of work so a failed cache
write never poisons the caller's session.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.trending_cache import TrendingPostsCache
from app.schemas.trending import EngagementSummary, TrendingPost

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps (sqlite) as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


# ── Entry model ───────────────────────────────────────────────────


@dataclass
class CacheEntry:
    """A decoded cache row."""

    cache_key: str
    search_query: str
    posts: list[TrendingPost] = field(default_factory=list)
    engagement_summary: EngagementSummary | None = None
    total_results: int = 0
    cached_at: datetime | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return True
        return self.expires_at <= (now or datetime.now(UTC))


def _decode_posts(raw: object, cache_key: str) -> list[TrendingPost]:
    """Decode posts_data, which may arrive as a JSON string or a list."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.error("trending_cache_posts_decode_failed", cache_key=cache_key)
            return []
    if not isinstance(raw, list):
        return []

    posts = []
    for item in raw:
        try:
            posts.append(TrendingPost.model_validate(item))
        except ValidationError:
            logger.warning("trending_cache_post_invalid", cache_key=cache_key)
    return posts


def _to_entry(row: TrendingPostsCache) -> CacheEntry:
    summary = None
    if row.engagement_summary:
        try:
            summary = EngagementSummary.model_validate(row.engagement_summary)
        except ValidationError:
            logger.warning("trending_cache_summary_invalid", cache_key=row.cache_key)

    return CacheEntry(
        cache_key=row.cache_key,
        search_query=row.search_query,
        posts=_decode_posts(row.posts_data, row.cache_key),
        engagement_summary=summary,
        total_results=row.total_results or 0,
        cached_at=_as_utc(row.cached_at) if row.cached_at else None,
        expires_at=_as_utc(row.expires_at),
    )


# ── Store ─────────────────────────────────────────────────────────


class TrendingCacheStore:
    """Object-store view of the trending posts cache table."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, cache_key: str) -> CacheEntry | None:
        """Return the entry for a key, expired or not."""
        result = await self.db.execute(
            select(TrendingPostsCache)
            .where(TrendingPostsCache.cache_key == cache_key)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _to_entry(row) if row else None

    async def get_latest_for_query(self, search_query: str) -> CacheEntry | None:
        """Most recently cached non-empty entry for a query, expired or not."""
        result = await self.db.execute(
            select(TrendingPostsCache)
            .where(TrendingPostsCache.search_query == search_query)
            .where(TrendingPostsCache.result_count > 0)
            .order_by(TrendingPostsCache.cached_at.desc(), TrendingPostsCache.id.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _to_entry(row) if row else None

    async def put(
        self,
        cache_key: str,
        search_query: str,
        posts: list[TrendingPost],
        engagement_summary: EngagementSummary,
        expiration_hours: int,
        total_results: int = 0,
    ) -> CacheEntry:
        """Upsert an entry expiring ``expiration_hours`` from now."""
        now = datetime.now(UTC)
        expires_at = now + timedelta(hours=expiration_hours)
        posts_data = [p.model_dump(mode="json", by_alias=True) for p in posts]
        summary_data = engagement_summary.model_dump(mode="json", by_alias=True)

        values = {
            "cache_key": cache_key,
            "search_query": search_query,
            "posts_data": posts_data,
            "engagement_summary": summary_data,
            "result_count": len(posts),
            "total_results": total_results,
            "cached_at": now,
            "expires_at": expires_at,
        }
        insert = pg_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt = insert(TrendingPostsCache).values(**values)
        # Single statement so concurrent misses on one key resolve last-write-wins
        stmt = stmt.on_conflict_do_update(
            index_elements=[TrendingPostsCache.cache_key],
            set_={k: stmt.excluded[k] for k in values if k != "cache_key"},
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return CacheEntry(
            cache_key=cache_key,
            search_query=search_query,
            posts=list(posts),
            engagement_summary=engagement_summary,
            total_results=total_results,
            cached_at=now,
            expires_at=expires_at,
        )

    async def delete(self, cache_key: str) -> None:
        try:
            await self.db.execute(
                delete(TrendingPostsCache).where(TrendingPostsCache.cache_key == cache_key)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def purge_expired(self, expired_before: datetime) -> int:
        """Delete entries that expired before the given instant."""
        try:
            result = await self.db.execute(
                delete(TrendingPostsCache).where(TrendingPostsCache.expires_at < expired_before)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return result.rowcount or 0
