"""Client for the upstream text-generation service.

The orchestrator only depends on the :class:`TextGenerator` protocol; the
OpenAI chat-completions implementation below is the production adapter.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from bullet_relay.core.settings import Settings
from bullet_relay.services.errors import UpstreamAuthError, UpstreamError

# Configure logger for this module
logger = logging.getLogger(__name__)

# HTTP status codes
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


class TextGenerator(Protocol):
    """``GenerateText(systemPrompt, userPrompt, credential) -> text``."""

    async def generate(self, system_prompt: str, user_prompt: str, credential: str) -> str: ...


@dataclass(frozen=True)
class GenerationConfig:
    """Immutable configuration for chat-completion requests."""

    base_url: str
    model: str
    temperature: float
    max_tokens: int
    timeout_seconds: float


def load_generation_config(settings: Settings) -> GenerationConfig:
    """Build configuration object from settings."""

    return GenerationConfig(
        base_url=settings.openai_base_url.rstrip("/"),
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
        timeout_seconds=float(settings.openai_timeout_seconds),
    )


class OpenAIChatGenerator:
    """Call ``/v1/chat/completions`` with a per-request bearer credential.

    One ``httpx.AsyncClient`` is shared across requests; the credential is
    passed per call in the ``Authorization`` header and never stored on the
    client.
    """

    def __init__(
        self,
        config: GenerationConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    def _build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def generate(self, system_prompt: str, user_prompt: str, credential: str) -> str:
        """Return the trimmed text of the first completion choice.

        Raises:
            UpstreamAuthError: The service rejected the credential (401/403).
            UpstreamError: Any other failure, including timeouts and bad bodies.
        """
        client = await self._ensure_client()
        try:
            response = await client.post(
                "/v1/chat/completions",
                json=self._build_payload(system_prompt, user_prompt),
                headers={"Authorization": f"Bearer {credential}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Text generation request failed: %s", type(exc).__name__)
            raise UpstreamError() from exc

        if response.status_code in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            logger.info("Text generation rejected credential (%d)", response.status_code)
            raise UpstreamAuthError()
        if response.is_error:
            logger.warning("Text generation responded with %d", response.status_code)
            logger.debug("Upstream error body: %s", response.text[:500])
            raise UpstreamError()

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Text generation returned an unexpected body")
            raise UpstreamError() from exc
        if not isinstance(content, str) or not content.strip():
            raise UpstreamError()
        return content.strip()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
