"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from app.api.v1 import (
    carousel,
    saved_posts,
    trending_posts,
)

api_router = APIRouter()

api_router.include_router(trending_posts.router, prefix="/trending-posts", tags=["trending-posts"])
api_router.include_router(saved_posts.router, prefix="/saved-posts", tags=["saved-posts"])
api_router.include_router(carousel.router, prefix="/carousel", tags=["carousel"])
