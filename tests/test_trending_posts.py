"""Tests for the cache-aside trending posts service."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from factories import make_payload, make_post, make_update

from app.schemas.trending import EngagementSummary, TrendingPost
from app.services.engagement import summarize_engagement
from app.services.linkedin_search import RateLimitedError, UpstreamError, UpstreamNotConfigured
from app.services.trending_cache import CacheEntry
from app.services.trending_posts import (
    RATE_LIMIT_WARNING,
    InvalidSearchQuery,
    TrendingPostsService,
    build_cache_key,
)

# ── Fakes ─────────────────────────────────────────────────────────


class FakeStore:
    """In-memory cache store keyed like the real one."""

    def __init__(self) -> None:
        self.entries: dict[str, CacheEntry] = {}
        self.puts: list[tuple[str, int]] = []
        self.deleted: list[str] = []
        self.latest_calls: list[str] = []

    async def get(self, cache_key: str) -> CacheEntry | None:
        return self.entries.get(cache_key)

    async def get_latest_for_query(self, search_query: str) -> CacheEntry | None:
        self.latest_calls.append(search_query)
        candidates = [
            e for e in self.entries.values() if e.search_query == search_query and e.posts
        ]
        return max(candidates, key=lambda e: e.cached_at, default=None)

    async def put(
        self,
        cache_key: str,
        search_query: str,
        posts: list[TrendingPost],
        engagement_summary: EngagementSummary,
        expiration_hours: int,
        total_results: int = 0,
    ) -> CacheEntry:
        now = datetime.now(UTC)
        entry = CacheEntry(
            cache_key=cache_key,
            search_query=search_query,
            posts=list(posts),
            engagement_summary=engagement_summary,
            total_results=total_results,
            cached_at=now,
            expires_at=now + timedelta(hours=expiration_hours),
        )
        self.entries[cache_key] = entry
        self.puts.append((cache_key, expiration_hours))
        return entry

    async def delete(self, cache_key: str) -> None:
        self.deleted.append(cache_key)
        self.entries.pop(cache_key, None)


def _client(payload: dict | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.search_posts = AsyncMock(return_value=payload, side_effect=error)
    return client


def _service(store: FakeStore, client: MagicMock) -> TrendingPostsService:
    return TrendingPostsService(store, client, upstream_max_limit=20, ttl_hours=24, empty_ttl_hours=6)


def _three_posts_payload(total: int | None = None) -> dict:
    return make_payload(
        make_update(text="a", backend_urn="urn:li:activity:1", reactions=[("LIKE", 50)]),
        make_update(text="b", backend_urn="urn:li:activity:2", reactions=[("LIKE", 150), ("PRAISE", 50)]),
        make_update(text="c", backend_urn="urn:li:activity:3", reactions=[("LIKE", 10)]),
        total=total,
    )


def _entry(query: str, posts: list[TrendingPost], *, hours: int = 24, key: str | None = None) -> CacheEntry:
    now = datetime.now(UTC)
    return CacheEntry(
        cache_key=key or build_cache_key(query, 10, 0),
        search_query=query,
        posts=posts,
        engagement_summary=summarize_engagement(posts),
        total_results=0,
        cached_at=now - timedelta(hours=1),
        expires_at=now + timedelta(hours=hours),
    )


def _reactions(response) -> list[int]:
    return [p.engagement.total_reactions for p in response.posts]


# ── Cache key ─────────────────────────────────────────────────────


class TestCacheKey:
    def test_deterministic(self):
        assert build_cache_key("ai", 10, 0) == build_cache_key("ai", 10, 0)

    def test_query_used_verbatim(self):
        assert build_cache_key("AI", 10, 0) != build_cache_key("ai", 10, 0)
        assert build_cache_key(" ai", 10, 0) != build_cache_key("ai", 10, 0)

    def test_paging_in_key(self):
        assert build_cache_key("ai", 10, 0) != build_cache_key("ai", 20, 0)
        assert build_cache_key("ai", 10, 0) != build_cache_key("ai", 10, 10)


# ── Validation ────────────────────────────────────────────────────


class TestValidation:
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_blank_query_rejected_before_io(self, query):
        store, client = FakeStore(), _client(_three_posts_payload())
        with pytest.raises(InvalidSearchQuery):
            await _service(store, client).search(query)
        client.search_posts.assert_not_called()
        assert store.puts == []


# ── Miss path ─────────────────────────────────────────────────────


class TestCacheMiss:
    async def test_cold_cache_ranks_and_stores(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        response = await _service(store, client).search("ai", limit=10, offset=0)

        assert _reactions(response) == [200, 50, 10]
        assert response.cached is False
        assert response.total_results == 3
        assert response.engagement_summary.total_posts == 3
        assert store.puts == [("ai:10:0", 24)]
        client.search_posts.assert_awaited_once_with("ai", 10, 0)

    async def test_vendor_total_preferred(self):
        store, client = FakeStore(), _client(_three_posts_payload(total=1234))
        response = await _service(store, client).search("ai")
        assert response.total_results == 1234
        assert store.entries["ai:10:0"].total_results == 1234

    async def test_upstream_limit_capped(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        await _service(store, client).search("ai", limit=50, offset=20)
        client.search_posts.assert_awaited_once_with("ai", 20, 20)
        assert "ai:50:20" in store.entries

    async def test_min_engagement_filters_but_summary_and_cache_are_unfiltered(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        response = await _service(store, client).search("ai", min_engagement=60)

        assert _reactions(response) == [200]
        assert response.total_results == 1
        assert response.engagement_summary.total_posts == 3
        assert len(store.entries["ai:10:0"].posts) == 3

    async def test_empty_result_cached_with_short_ttl(self):
        store, client = FakeStore(), _client(make_payload())
        response = await _service(store, client).search("nothing")

        assert response.posts == []
        assert response.total_results == 0
        assert response.engagement_summary.total_posts == 0
        assert store.puts == [("nothing:10:0", 6)]

    async def test_explicit_zero_ttl_kept(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        service = TrendingPostsService(store, client, ttl_hours=0, empty_ttl_hours=0)
        assert service.ttl_hours == 0
        await service.search("ai")
        assert store.puts == [("ai:10:0", 0)]

    async def test_upstream_error_propagates_without_fallback(self):
        store = FakeStore()
        store.entries["ai:10:0"] = _entry("ai", [make_post("x", 5)], hours=-1)
        client = _client(error=UpstreamError("API error: 500"))
        with pytest.raises(UpstreamError):
            await _service(store, client).search("ai")
        assert store.latest_calls == []

    async def test_not_configured_propagates(self):
        store, client = FakeStore(), _client(error=UpstreamNotConfigured("no key"))
        with pytest.raises(UpstreamNotConfigured):
            await _service(store, client).search("ai")


# ── Hit path ──────────────────────────────────────────────────────


class TestCacheHit:
    async def test_warm_cache_skips_upstream(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        service = _service(store, client)
        first = await service.search("ai")
        second = await service.search("ai")

        assert second.cached is True
        assert [p.id for p in second.posts] == [p.id for p in first.posts]
        assert _reactions(second) == [200, 50, 10]
        assert second.cache_expires_at is not None
        client.search_posts.assert_awaited_once()

    async def test_hit_is_re_ranked(self):
        store, client = FakeStore(), _client()
        store.entries["ai:10:0"] = _entry("ai", [make_post("a", 10), make_post("b", 200), make_post("c", 50)])
        response = await _service(store, client).search("ai")
        assert [p.id for p in response.posts] == ["b", "c", "a"]
        client.search_posts.assert_not_called()

    async def test_min_engagement_narrows_hit(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        service = _service(store, client)
        await service.search("ai")
        response = await service.search("ai", min_engagement=60)

        assert response.cached is True
        assert _reactions(response) == [200]
        client.search_posts.assert_awaited_once()

    async def test_hit_total_falls_back_to_cached_count(self):
        store, client = FakeStore(), _client()
        store.entries["ai:10:0"] = _entry("ai", [make_post("a", 1), make_post("b", 2)])
        response = await _service(store, client).search("ai", min_engagement=2)
        assert response.total_results == 2
        assert len(response.posts) == 1

    async def test_expired_entry_is_a_miss(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        store.entries["ai:10:0"] = _entry("ai", [make_post("old", 999)], hours=-1)
        response = await _service(store, client).search("ai")
        assert response.cached is False
        assert "old" not in [p.id for p in response.posts]

    async def test_empty_entry_evicted_and_requeried(self):
        store, client = FakeStore(), _client(_three_posts_payload())
        store.entries["ai:10:0"] = _entry("ai", [])
        response = await _service(store, client).search("ai")

        assert store.deleted == ["ai:10:0"]
        assert response.cached is False
        client.search_posts.assert_awaited_once()


# ── Rate limiting ─────────────────────────────────────────────────


class TestRateLimited:
    async def test_stale_entry_served_with_warning(self):
        store = FakeStore()
        store.entries["ai:10:0"] = _entry("ai", [make_post("a", 10), make_post("b", 200)], hours=-48)
        client = _client(error=RateLimitedError())

        response = await _service(store, client).search("ai", limit=10, offset=30)

        assert response.cached is True
        assert response.warning == RATE_LIMIT_WARNING
        assert [p.id for p in response.posts] == ["b", "a"]
        assert store.latest_calls == ["ai"]

    async def test_stale_entry_respects_min_engagement(self):
        store = FakeStore()
        store.entries["ai:10:0"] = _entry("ai", [make_post("a", 10), make_post("b", 200)], hours=-1)
        client = _client(error=RateLimitedError())
        response = await _service(store, client).search("ai", offset=10, min_engagement=100)
        assert [p.id for p in response.posts] == ["b"]

    async def test_no_fallback_reraises(self):
        store, client = FakeStore(), _client(error=RateLimitedError())
        with pytest.raises(RateLimitedError):
            await _service(store, client).search("ai")
        assert store.latest_calls == ["ai"]

    async def test_other_query_never_used(self):
        store = FakeStore()
        store.entries["ml:10:0"] = _entry("ml", [make_post("a", 10)], key="ml:10:0")
        client = _client(error=RateLimitedError())
        with pytest.raises(RateLimitedError):
            await _service(store, client).search("ai")


# ── Store failures ────────────────────────────────────────────────


class TestStoreFailures:
    async def test_read_failure_is_a_miss(self):
        store = FakeStore()
        store.get = AsyncMock(side_effect=RuntimeError("db down"))
        client = _client(_three_posts_payload())
        response = await _service(store, client).search("ai")
        assert response.cached is False
        assert len(response.posts) == 3

    async def test_write_failure_still_returns_results(self):
        store = FakeStore()
        store.put = AsyncMock(side_effect=RuntimeError("db down"))
        client = _client(_three_posts_payload())
        response = await _service(store, client).search("ai")
        assert _reactions(response) == [200, 50, 10]

    async def test_stale_read_failure_reraises_rate_limit(self):
        store = FakeStore()
        store.get_latest_for_query = AsyncMock(side_effect=RuntimeError("db down"))
        client = _client(error=RateLimitedError())
        with pytest.raises(RateLimitedError):
            await _service(store, client).search("ai")


# ── Cache status ──────────────────────────────────────────────────


class TestCacheStatus:
    async def test_cached(self):
        store = FakeStore()
        entry = _entry("ai", [make_post("a", 1)])
        store.entries["ai:10:0"] = entry
        status = await _service(store, _client()).cache_status("ai")
        assert status.cached is True
        assert status.cache_expires_at == entry.expires_at

    async def test_not_cached(self):
        status = await _service(FakeStore(), _client()).cache_status("ai")
        assert status.cached is False
        assert status.message == "No cached results found"

    async def test_expired_not_cached(self):
        store = FakeStore()
        store.entries["ai:10:0"] = replace(_entry("ai", [make_post("a", 1)]), expires_at=datetime.now(UTC))
        status = await _service(store, _client()).cache_status("ai")
        assert status.cached is False
