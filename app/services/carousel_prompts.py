"""Prompt templates for carousel generation."""

CAROUSEL_SYSTEM_PROMPT = (
    "You turn LinkedIn posts into swipeable carousel decks. "
    "Answer only with the deck in the requested format."
)

CAROUSEL_USER_TEMPLATE = """Turn the post below into a LinkedIn carousel of {slide_count} slides.
Write in {language_name} with a {tone} tone.

Use exactly this format for every slide:
{slide_marker} <number>:
{title_marker} <short headline>
{content_marker} <one or two sentences>
{image_marker} <visual suggestion>

After the last slide, add one line describing the master image theme and one
line of branding guidelines, then up to 5 relevant hashtags.

POST:
{post_content}
"""

LANGUAGE_MARKERS: dict[str, dict[str, str]] = {
    "english": {
        "language_name": "English",
        "slide_marker": "SLIDE",
        "title_marker": "TITLE:",
        "content_marker": "CONTENT:",
        "image_marker": "IMAGE:",
    },
    "kurdish": {
        "language_name": "Kurdish (Sorani)",
        "slide_marker": "سلاید",
        "title_marker": "سەردێڕ:",
        "content_marker": "ناوەڕۆک:",
        "image_marker": "وێنە:",
    },
}

DEFAULT_SLIDE_COUNT = 7
