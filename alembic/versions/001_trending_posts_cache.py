"""Trending posts cache table.

Revision ID: 001
Revises:
Create Date: 2026-10-05

trending_posts_cache: normalized, engagement-ranked search results with TTL.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "trending_posts_cache",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("cache_key", sa.String(512), nullable=False, comment="<query>:<limit>:<offset>"),
        sa.Column("search_query", sa.Text(), nullable=False),
        sa.Column("posts_data", postgresql.JSONB(), nullable=False, comment="Ranked, unfiltered TrendingPost list"),
        sa.Column("engagement_summary", postgresql.JSONB(), nullable=True),
        sa.Column("result_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_results", sa.Integer(), nullable=False, server_default="0", comment="Vendor paging total"),
        sa.Column("cached_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique key lookup; upserts rely on it
    op.create_index(
        "ix_trending_posts_cache_cache_key",
        "trending_posts_cache",
        ["cache_key"],
        unique=True,
    )
    # Latest entry per query (rate-limit rescue)
    op.create_index(
        "ix_trending_posts_cache_search_query",
        "trending_posts_cache",
        ["search_query"],
    )
    # Index for purge worker
    op.create_index(
        "ix_trending_posts_cache_expires_at",
        "trending_posts_cache",
        ["expires_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_trending_posts_cache_expires_at", table_name="trending_posts_cache")
    op.drop_index("ix_trending_posts_cache_search_query", table_name="trending_posts_cache")
    op.drop_index("ix_trending_posts_cache_cache_key", table_name="trending_posts_cache")
    op.drop_table("trending_posts_cache")
