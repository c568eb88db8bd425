"""Carousel endpoint — turn a post into carousel slides."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.core.logging import get_logger
from app.schemas.carousel import CarouselRequest, CarouselResponse
from app.services.carousel import CarouselService

logger = get_logger(__name__)

router = APIRouter()


def get_carousel_service() -> CarouselService:
    return CarouselService()


@router.post("", response_model=CarouselResponse, response_model_exclude_none=True)
async def generate_carousel(
    data: CarouselRequest,
    service: Annotated[CarouselService, Depends(get_carousel_service)],
) -> CarouselResponse | JSONResponse:
    """Generate a carousel deck from post content."""
    if not data.post_content.strip():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Post content cannot be empty"},
        )

    try:
        carousel = await service.generate(data)
    except Exception as e:
        logger.exception("carousel_generation_failed", language=data.language)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e) or "Failed to generate carousel"},
        )
    return CarouselResponse(carousel=carousel)
