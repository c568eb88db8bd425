"""Engagement ranking, filtering and aggregate stats over trending posts."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable

from app.schemas.trending import EngagementSummary, TrendingPost


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rank_posts(posts: Iterable[TrendingPost]) -> list[TrendingPost]:
    """Sort by total reactions, most engaged first.

    ``sorted`` is stable, so ties keep vendor order.
    """
    return sorted(posts, key=lambda p: p.engagement.total_reactions, reverse=True)


def filter_by_engagement(posts: list[TrendingPost], min_engagement: int) -> list[TrendingPost]:
    if min_engagement <= 0:
        return list(posts)
    return [p for p in posts if p.engagement.total_reactions >= min_engagement]


def summarize_engagement(posts: list[TrendingPost]) -> EngagementSummary:
    """Averages, hashtag frequency and post-type distribution.

    Returns an all-zero summary for an empty list.
    """
    if not posts:
        return EngagementSummary()

    n = len(posts)
    hashtags: Counter[str] = Counter()
    post_types: Counter[str] = Counter()
    for post in posts:
        hashtags.update(post.hashtags)
        post_types[post.post_type] += 1

    return EngagementSummary(
        total_posts=n,
        avg_likes=_round_half_up(sum(p.engagement.likes for p in posts) / n),
        avg_comments=_round_half_up(sum(p.engagement.comments for p in posts) / n),
        avg_shares=_round_half_up(sum(p.engagement.shares for p in posts) / n),
        avg_total_engagement=_round_half_up(sum(p.engagement.total_reactions for p in posts) / n),
        total_hashtags=dict(hashtags),
        post_type_distribution=dict(post_types),
    )
