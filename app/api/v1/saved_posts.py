"""Saved posts endpoints — bookmark trending posts."""

from fastapi import APIRouter, HTTPException, status

from app.deps import DbSession
from app.schemas.saved_post import SavedPostCreate, SavedPostRead
from app.services.saved_posts import saved_post_service

router = APIRouter()


@router.get("", response_model=list[SavedPostRead], response_model_exclude_none=True)
async def list_saved_posts(db: DbSession) -> list[SavedPostRead]:
    """List saved posts, newest first."""
    return await saved_post_service.list_saved(db)


@router.post(
    "",
    response_model=SavedPostRead,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def save_post(data: SavedPostCreate, db: DbSession) -> SavedPostRead:
    """Save a trending post (re-saving refreshes it)."""
    if not data.post.id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post data is required",
        )
    return await saved_post_service.save(db, data.post, data.notes)


@router.delete("/{post_id}")
async def delete_saved_post(post_id: str, db: DbSession) -> dict:
    """Delete a saved post by its post id."""
    if not await saved_post_service.delete(db, post_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return {"success": True, "message": "Post deleted successfully"}
