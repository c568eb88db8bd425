"""Parse slide-structured LLM output into a GeneratedCarousel.

Expected shape (one marker per line, Kurdish markers also accepted):

    SLIDE 1:
    TITLE: ...
    CONTENT: ...
    IMAGE: ...

Lines mentioning a theme or branding, and long lines near the end, are taken
as the image theme / branding guidelines. When no slide markers are found the
text is split into paragraphs instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from app.schemas.carousel import CarouselMetadata, CarouselSlide, GeneratedCarousel, Language
from app.services.trending_normalizer import extract_hashtags

MAX_HASHTAGS = 5
MAX_FALLBACK_SLIDES = 5

_PATTERNS: dict[str, dict[str, re.Pattern[str]]] = {
    "english": {
        "slide": re.compile(r"^SLIDE\s*(\d+):?", re.IGNORECASE),
        "title": re.compile(r"^TITLE:", re.IGNORECASE),
        "content": re.compile(r"^CONTENT:", re.IGNORECASE),
        "image": re.compile(r"^IMAGE:", re.IGNORECASE),
        "theme": re.compile(r"(?:master.*theme|theme|branding|image.*theme)", re.IGNORECASE),
    },
    "kurdish": {
        "slide": re.compile(r"^SLIDE\s*(\d+):?|^سلاید\s*(\d+):?", re.IGNORECASE),
        "title": re.compile(r"^TITLE:|^سەردێڕ:", re.IGNORECASE),
        "content": re.compile(r"^CONTENT:|^ناوەڕۆک:", re.IGNORECASE),
        "image": re.compile(r"^IMAGE:|^وێنە:", re.IGNORECASE),
        "theme": re.compile(r"(?:تێم|theme|master.*theme|branding)", re.IGNORECASE),
    },
}


@dataclass
class _SlideDraft:
    slide_number: int
    title: str = ""
    content: str = ""
    image_suggestion: str | None = None

    def complete(self) -> bool:
        return bool(self.title and self.content)

    def build(self, fallback_number: int) -> CarouselSlide:
        return CarouselSlide(
            slide_number=self.slide_number or fallback_number,
            title=self.title,
            content=self.content,
            image_suggestion=self.image_suggestion,
            character_count=len(f"{self.title} {self.content}"),
        )


def _strip_marker(pattern: re.Pattern[str], line: str) -> str:
    return pattern.sub("", line, count=1).strip()


def _fallback_slides(content: str) -> list[CarouselSlide]:
    """One slide per substantial paragraph: first line as title."""
    sections = [s for s in re.split(r"\n\n+", content) if len(s.strip()) > 20]
    slides = []
    for index, section in enumerate(sections[:MAX_FALLBACK_SLIDES]):
        lines = [line for line in section.split("\n") if line.strip()]
        title = (lines[0][:50] if lines else f"Slide {index + 1}").strip()
        body = (" ".join(lines[1:])[:120] or section[:120]).strip()
        slides.append(CarouselSlide(
            slide_number=index + 1,
            title=title,
            content=body,
            character_count=len(f"{title} {body}"),
        ))
    return slides


def parse_carousel(content: str, language: Language, original_length: int) -> GeneratedCarousel:
    """Build a carousel from slide-structured text."""
    patterns = _PATTERNS.get(language, _PATTERNS["english"])
    lines = [line.strip() for line in content.split("\n") if line.strip()]

    slides: list[CarouselSlide] = []
    current: _SlideDraft | None = None
    image_theme: str | None = None
    branding_guidelines: str | None = None
    introduction: str | None = None
    conclusion: str | None = None

    for i, line in enumerate(lines):
        slide_match = patterns["slide"].match(line)
        if slide_match:
            if current and current.complete():
                slides.append(current.build(len(slides) + 1))
            number = next((g for g in slide_match.groups() if g), "1")
            current = _SlideDraft(slide_number=int(number))
            continue

        if patterns["title"].match(line):
            if current:
                current.title = _strip_marker(patterns["title"], line)
            continue

        if patterns["content"].match(line):
            if current:
                current.content = _strip_marker(patterns["content"], line)
            continue

        if patterns["image"].match(line):
            if current:
                current.image_suggestion = _strip_marker(patterns["image"], line)
            continue

        # Theme/branding lines, or long lines in the last few, close the deck
        if patterns["theme"].search(line) or (i > len(lines) - 5 and len(line) > 50):
            if image_theme is None:
                image_theme = line
            else:
                branding_guidelines = line
            continue

        if current and current.title and not current.content:
            current.content = line
        elif current and current.content and not current.image_suggestion:
            if len(line) < 100:
                current.content += " " + line
        elif current is None and not slides and len(line) > 20:
            introduction = line
        elif slides and current is None and len(line) > 20:
            conclusion = line

    if current and current.complete():
        slides.append(current.build(len(slides) + 1))

    if not slides:
        slides = _fallback_slides(content)

    carousel_length = sum(s.character_count for s in slides)
    average = int(carousel_length / len(slides) + 0.5) if slides else 0

    return GeneratedCarousel(
        slides=slides,
        total_slides=len(slides),
        introduction=introduction,
        conclusion=conclusion,
        hashtags=extract_hashtags(content)[:MAX_HASHTAGS],
        image_theme=image_theme,
        branding_guidelines=branding_guidelines,
        metadata=CarouselMetadata(
            original_length=original_length,
            carousel_length=carousel_length,
            average_slide_length=average,
        ),
    )
