"""Carousel service — generate a slide deck from a post via the LLM."""

from __future__ import annotations

from app.config import get_settings
from app.core.logging import get_logger
from app.schemas.carousel import CarouselRequest, GeneratedCarousel
from app.services.carousel_parser import parse_carousel
from app.services.carousel_prompts import (
    CAROUSEL_SYSTEM_PROMPT,
    CAROUSEL_USER_TEMPLATE,
    DEFAULT_SLIDE_COUNT,
    LANGUAGE_MARKERS,
)
from app.services.text_generation import TextGenerationService

logger = get_logger(__name__)
settings = get_settings()


class CarouselParseError(ValueError):
    """The generated text did not yield any slide."""


class CarouselService:
    def __init__(self, text_generation: TextGenerationService | None = None) -> None:
        self.text_generation = text_generation or TextGenerationService()

    def build_messages(self, request: CarouselRequest) -> list[dict]:
        user_prompt = CAROUSEL_USER_TEMPLATE.format(
            slide_count=request.target_slide_count or DEFAULT_SLIDE_COUNT,
            tone=request.tone,
            post_content=request.post_content.strip(),
            **LANGUAGE_MARKERS[request.language],
        )
        return [
            {"role": "system", "content": CAROUSEL_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ]

    async def generate(self, request: CarouselRequest) -> GeneratedCarousel:
        """Generate and parse a carousel.

        Raises:
            TextGenerationError: the LLM call failed.
            CarouselParseError: no slides could be parsed.
        """
        post_content = request.post_content.strip()
        if not post_content:
            raise CarouselParseError("Post content cannot be empty")

        content = await self.text_generation.generate(
            self.build_messages(request),
            max_tokens=settings.carousel_max_tokens,
        )
        carousel = parse_carousel(content, request.language, len(post_content))

        if not carousel.slides:
            logger.warning("carousel_parse_empty", response_excerpt=content)
            raise CarouselParseError("Failed to parse carousel slides from response")

        logger.info(
            "carousel_generated",
            language=request.language,
            total_slides=carousel.total_slides,
        )
        return carousel
