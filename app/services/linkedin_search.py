"""LinkedIn post search client (RapidAPI "linkedin-api-data").

Single request/response call per search; no retries. HTTP 429 is surfaced as
RateLimitedError so the caller can try a stale-cache rescue.
"""

from __future__ import annotations

from typing import Any

import httpx

from app.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


# ── Exceptions ────────────────────────────────────────────────────


class UpstreamError(Exception):
    """The post search API failed or returned an unusable response."""


class RateLimitedError(UpstreamError):
    """The post search API answered HTTP 429."""

    def __init__(self, message: str = "Rate limit reached") -> None:
        super().__init__(message)


class UpstreamNotConfigured(UpstreamError):
    """No API key is configured for the post search API."""


# ── Client ────────────────────────────────────────────────────────


class LinkedInSearchClient:
    """Thin async wrapper over the ``/post/search`` endpoint."""

    def __init__(
        self,
        api_key: str,
        host: str,
        timeout_seconds: float = 30,
    ) -> None:
        self.api_key = api_key
        self.host = host
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> LinkedInSearchClient:
        return cls(
            api_key=settings.rapidapi_key,
            host=settings.rapidapi_host,
            timeout_seconds=settings.trending_search_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def search_posts(self, query: str, limit: int, offset: int) -> dict[str, Any]:
        """Fetch one page of post search results as the raw vendor payload.

        Raises:
            UpstreamNotConfigured: no API key.
            RateLimitedError: HTTP 429.
            UpstreamError: transport failure, other non-2xx, bad JSON, or an
                envelope without ``success``/``data``.
        """
        if not self.configured:
            raise UpstreamNotConfigured(
                "RapidAPI key not configured. Please set RAPIDAPI_KEY environment variable."
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                resp = await client.get(
                    f"https://{self.host}/post/search",
                    headers={
                        "x-rapidapi-key": self.api_key,
                        "x-rapidapi-host": self.host,
                        "Content-Type": "application/json",
                    },
                    # "offsite" is the vendor's spelling
                    params={"query": query, "limit": limit, "offsite": offset},
                )
        except httpx.HTTPError as e:
            logger.warning("linkedin_search_request_failed", error=str(e))
            raise UpstreamError(f"Post search request failed: {e}") from e

        if resp.status_code == 429:
            logger.warning("linkedin_search_rate_limited", query=query)
            raise RateLimitedError()

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(
                "linkedin_search_parse_failed",
                status_code=resp.status_code,
                body=resp.text,
            )
            raise UpstreamError("Failed to parse API response") from e

        if resp.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            raise UpstreamError(message or f"API error: {resp.status_code}")

        if not isinstance(data, dict) or not data.get("success") or not data.get("data"):
            message = data.get("message") if isinstance(data, dict) else None
            raise UpstreamError(message or "Invalid API response")

        return data
