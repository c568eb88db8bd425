"""Text generation via OpenRouter's OpenAI-compatible chat completions API.

A request that comes back without content is retried once on the fallback
model.
"""

from __future__ import annotations

import openai
from openai import AsyncOpenAI

from app.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


class TextGenerationError(Exception):
    """The text generation service failed or returned nothing usable."""


class TextGenerationService:
    """Role/content messages in, generated text out."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        fallback_model: str | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.base_url = base_url or settings.openrouter_base_url
        self.model = model or settings.llm_model
        self.fallback_model = fallback_model or settings.llm_fallback_model
        self.temperature = settings.llm_temperature
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise TextGenerationError("OpenRouter API key is not configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=settings.llm_timeout_seconds,
                default_headers={
                    "HTTP-Referer": settings.app_url,
                    "X-Title": "LinkPulse",
                },
            )
        return self._client

    async def _complete(self, messages: list[dict], model: str, max_tokens: int | None) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as e:
            raise TextGenerationError(
                "Request to the AI service timed out. Please try again."
            ) from e
        except openai.APIConnectionError as e:
            raise TextGenerationError(
                "Connection error. Unable to reach the AI service. Please try again."
            ) from e
        except openai.APIStatusError as e:
            raise TextGenerationError(f"AI service error ({e.status_code}): {e.message}") from e

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    async def generate(self, messages: list[dict], max_tokens: int | None = None) -> str:
        """Generate text, falling back to the secondary model on empty output."""
        content = await self._complete(messages, self.model, max_tokens)
        if content:
            return content

        logger.warning("text_generation_empty_response", model=self.model, fallback=self.fallback_model)
        content = await self._complete(messages, self.fallback_model, max_tokens)
        if not content:
            raise TextGenerationError("AI service returned empty content")
        return content
