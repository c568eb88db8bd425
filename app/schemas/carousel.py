"""Carousel schemas — LLM-generated LinkedIn carousel slides."""

from typing import Literal

from pydantic import Field

from app.schemas.trending import CamelModel

Language = Literal["english", "kurdish"]


class CarouselRequest(CamelModel):
    """Generate a carousel from an existing post."""

    post_content: str = Field(..., min_length=1)
    language: Language
    tone: str = Field(..., min_length=1, max_length=100)
    target_slide_count: int | None = Field(None, ge=2, le=20)


class CarouselSlide(CamelModel):
    slide_number: int
    title: str
    content: str
    image_suggestion: str | None = None
    character_count: int = 0
    key_points: list[str] | None = None


class CarouselMetadata(CamelModel):
    original_length: int = 0
    carousel_length: int = 0
    average_slide_length: int = 0


class GeneratedCarousel(CamelModel):
    slides: list[CarouselSlide] = Field(default_factory=list)
    total_slides: int = 0
    introduction: str | None = None
    conclusion: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    image_theme: str | None = None
    branding_guidelines: str | None = None
    metadata: CarouselMetadata = Field(default_factory=CarouselMetadata)


class CarouselResponse(CamelModel):
    carousel: GeneratedCarousel
