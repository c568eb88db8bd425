"""Arq tasks for trending cache maintenance.

Expired entries are kept for a grace window so the rate-limit rescue can
still serve them; only entries older than that are purged.

Run with: arq app.workers.cache_tasks.WorkerSettings
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from arq import cron
from arq.connections import RedisSettings
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.config import get_settings
from app.core.logging import get_logger, job_id_var, setup_logging
from app.services.trending_cache import TrendingCacheStore

settings = get_settings()
logger = get_logger(__name__)

# Separate engine for worker process
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def purge_expired_trending_cache(ctx: dict) -> int:
    """Cron task: delete cache entries expired beyond the grace window.

    Returns the number of entries deleted.
    """
    token = job_id_var.set(ctx.get("job_id"))
    try:
        return await _purge()
    finally:
        job_id_var.reset(token)


async def _purge() -> int:
    cutoff = datetime.now(UTC) - timedelta(hours=settings.trending_cache_purge_grace_hours)

    async with async_session_maker() as db:
        deleted = await TrendingCacheStore(db).purge_expired(cutoff)

    if deleted:
        logger.info("trending_cache_purged", deleted=deleted, cutoff=cutoff.isoformat())
    return deleted


async def startup(ctx: dict) -> None:
    setup_logging()


async def shutdown(ctx: dict) -> None:
    await engine.dispose()


class WorkerSettings:
    functions = [purge_expired_trending_cache]
    cron_jobs = [cron(purge_expired_trending_cache, minute=15)]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
