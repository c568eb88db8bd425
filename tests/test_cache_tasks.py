"""Tests for the trending cache purge worker task."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

from app.workers.cache_tasks import WorkerSettings, purge_expired_trending_cache


def _session_maker():
    session = MagicMock()
    maker = MagicMock()
    maker.return_value.__aenter__ = AsyncMock(return_value=session)
    maker.return_value.__aexit__ = AsyncMock(return_value=False)
    return maker, session


class TestPurgeExpiredTrendingCache:
    async def test_purges_before_grace_window(self):
        maker, session = _session_maker()
        store = MagicMock()
        store.purge_expired = AsyncMock(return_value=3)

        with (
            patch("app.workers.cache_tasks.async_session_maker", maker),
            patch("app.workers.cache_tasks.TrendingCacheStore", return_value=store) as store_cls,
            patch("app.workers.cache_tasks.settings") as settings,
        ):
            settings.trending_cache_purge_grace_hours = 72
            deleted = await purge_expired_trending_cache({})

        assert deleted == 3
        store_cls.assert_called_once_with(session)
        cutoff = store.purge_expired.call_args.args[0]
        expected = datetime.now(UTC) - timedelta(hours=72)
        assert abs((cutoff - expected).total_seconds()) < 5

    def test_registered_as_cron(self):
        assert purge_expired_trending_cache in WorkerSettings.functions
        assert len(WorkerSettings.cron_jobs) == 1
