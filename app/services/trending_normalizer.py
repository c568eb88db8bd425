"""Normalize LinkedIn post-search payloads into TrendingPost records.

The vendor schema is undocumented and drifts, so every field is read through
``_dig``, which returns None for anything missing or of the wrong shape.
Items lacking a required part are skipped; the normalizer never raises.

Payload shape (only the parts we read):

    data.elements[].items[].item.searchFeedUpdate
        .socialContent.shareUrl
        .update.{backendUrn, shareUrn, socialContent.shareUrl,
                 socialDetail.totalSocialActivityCounts, actor, commentary,
                 content.{pollComponent, linkedInVideoComponent, imageComponent}}
"""

from __future__ import annotations

import math
import random
import re
import time
from typing import Any

from app.schemas.trending import (
    PostAuthor,
    PostEngagement,
    PostType,
    ReactionCount,
    TrendingPost,
)

# ASCII word characters plus the Arabic block (Kurdish, Arabic, Persian)
HASHTAG_RE = re.compile(r"#([\w\u0600-\u06FF]+)", re.ASCII)

_ACTIVITY_URN_PREFIX = "urn:li:activity:"
_SHARE_URN_PREFIX = "urn:li:share:"
_FEED_UPDATE_URL = "https://www.linkedin.com/feed/update/"

# Checked in order; first present component wins.
_POST_TYPE_COMPONENTS: tuple[tuple[str, PostType], ...] = (
    ("pollComponent", "poll"),
    ("linkedInVideoComponent", "video"),
    ("imageComponent", "image"),
)


# ── Absence-returning accessors ───────────────────────────────────


def _dig(node: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a step is missing."""
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def _text(node: Any, *path: str) -> str | None:
    value = _dig(node, *path)
    return value if isinstance(value, str) and value else None


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return int(value)


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


# ── Field extractors ──────────────────────────────────────────────


def extract_hashtags(text: str) -> list[str]:
    """Hashtags in order of appearance, without the leading '#'."""
    return [tag for tag in HASHTAG_RE.findall(text) if tag]


def _post_type(update: dict) -> PostType:
    content = _dig(update, "content")
    for component, post_type in _POST_TYPE_COMPONENTS:
        if _dig(content, component) is not None:
            return post_type
    return "text"


def _post_url(update: dict, wrapper: dict) -> str:
    share_url = _text(update, "socialContent", "shareUrl") or _text(wrapper, "socialContent", "shareUrl")
    if share_url:
        return share_url
    backend_urn = _text(update, "backendUrn")
    if backend_urn:
        return _FEED_UPDATE_URL + backend_urn.removeprefix(_ACTIVITY_URN_PREFIX)
    return ""


def _post_id(update: dict) -> str:
    backend_urn = _text(update, "backendUrn")
    if backend_urn:
        return backend_urn
    share_urn = _text(update, "shareUrn")
    if share_urn:
        return share_urn.removeprefix(_SHARE_URN_PREFIX)
    # Display/dedup key only, so best-effort uniqueness is enough
    return f"post-{int(time.time() * 1000)}-{random.random()}"


def _author(actor: dict) -> PostAuthor:
    name = _text(actor, "name", "text")
    company = _text(actor, "supplementaryActorInfo", "text")
    if company is None:
        description = _text(actor, "description", "text") or ""
        if "followers" in description:
            company = name
    author_name = name or "Unknown"
    return PostAuthor(
        name=author_name,
        profile_url=_text(actor, "navigationContext", "actionTarget") or "",
        company=company if company != author_name else None,
    )


def _engagement(social_detail: dict) -> PostEngagement:
    counts = _dig(social_detail, "totalSocialActivityCounts") or {}
    breakdown = [
        ReactionCount(
            type=_text(r, "reactionType") or "UNKNOWN",
            count=_count(_dig(r, "count")),
        )
        for r in _list(_dig(counts, "reactionTypeCounts"))
        if isinstance(r, dict)
    ]
    return PostEngagement(
        likes=_count(_dig(counts, "numLikes")),
        comments=_count(_dig(counts, "numComments")),
        shares=_count(_dig(counts, "numShares")),
        total_reactions=sum(r.count for r in breakdown),
        reaction_breakdown=breakdown,
    )


# ── Main entry point ─────────────────────────────────────────────


def normalize_item(wrapper: Any) -> TrendingPost | None:
    """Normalize one ``searchFeedUpdate`` wrapper, or None if unusable."""
    update = _dig(wrapper, "update")
    social_detail = _dig(update, "socialDetail")
    actor = _dig(update, "actor")
    commentary = _dig(update, "commentary")
    if not isinstance(social_detail, dict) or not isinstance(actor, dict) or not isinstance(commentary, dict):
        return None

    content = (_text(commentary, "text", "text") or "").strip()
    if not content:
        return None

    return TrendingPost(
        id=_post_id(update),
        content=content,
        author=_author(actor),
        engagement=_engagement(social_detail),
        post_url=_post_url(update, wrapper),
        posted_at=_text(actor, "subDescription", "text") or "",
        post_type=_post_type(update),
        hashtags=extract_hashtags(content),
    )


def normalize_search_response(payload: Any) -> list[TrendingPost]:
    """Flatten a vendor search response into TrendingPost records.

    Items missing socialDetail, actor, commentary or commentary text are
    dropped. Vendor order is preserved.
    """
    posts: list[TrendingPost] = []
    for element in _list(_dig(payload, "data", "elements")):
        for item in _list(_dig(element, "items")):
            post = normalize_item(_dig(item, "item", "searchFeedUpdate"))
            if post is not None:
                posts.append(post)
    return posts
