"""Saved posts service — bookmark trending posts with notes."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.saved_post import SavedTrendingPost
from app.schemas.saved_post import SavedPostRead
from app.schemas.trending import TrendingPost

logger = get_logger(__name__)


def _to_read(row: SavedTrendingPost) -> SavedPostRead:
    return SavedPostRead(
        id=row.id,
        post_id=row.post_id,
        post=TrendingPost.model_validate(row.post_data),
        saved_at=row.saved_at,
        notes=row.notes or None,
    )


class SavedPostService:
    """CRUD for saved trending posts."""

    async def list_saved(self, db: AsyncSession) -> list[SavedPostRead]:
        """All saved posts, newest first."""
        result = await db.execute(
            select(SavedTrendingPost).order_by(
                SavedTrendingPost.saved_at.desc(),
                SavedTrendingPost.id.desc(),
            )
        )
        return [_to_read(row) for row in result.scalars().all()]

    async def save(
        self,
        db: AsyncSession,
        post: TrendingPost,
        notes: str | None = None,
    ) -> SavedPostRead:
        """Save a post; saving the same post id again refreshes it."""
        post_data = post.model_dump(mode="json", by_alias=True)
        now = datetime.now(UTC)

        result = await db.execute(
            select(SavedTrendingPost).where(SavedTrendingPost.post_id == post.id)
        )
        row = result.scalar_one_or_none()
        if row:
            row.post_data = post_data
            row.notes = notes
            row.saved_at = now
        else:
            row = SavedTrendingPost(
                post_id=post.id,
                post_data=post_data,
                notes=notes,
                saved_at=now,
            )
            db.add(row)

        await db.commit()
        await db.refresh(row)

        logger.info("saved_post_stored", post_id=post.id)
        return _to_read(row)

    async def delete(self, db: AsyncSession, post_id: str) -> bool:
        """Delete by post id. Returns False when nothing matched."""
        result = await db.execute(
            delete(SavedTrendingPost).where(SavedTrendingPost.post_id == post_id)
        )
        await db.commit()
        return bool(result.rowcount)


saved_post_service = SavedPostService()
