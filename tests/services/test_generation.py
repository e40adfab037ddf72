# tests/services/test_generation.py
"""Tests for the OpenAI chat-completions generator."""

import json

import httpx
import pytest

from bullet_relay.services.errors import UpstreamAuthError, UpstreamError
from bullet_relay.services.generation import (
    GenerationConfig,
    OpenAIChatGenerator,
    load_generation_config,
)
from tests.conftest import build_settings

CONFIG = GenerationConfig(
    base_url="https://llm.test",
    model="gpt-4o-mini",
    temperature=0.7,
    max_tokens=500,
    timeout_seconds=5.0,
)


def _completion(content: object) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _generator(handler) -> OpenAIChatGenerator:  # type: ignore[no-untyped-def]
    return OpenAIChatGenerator(CONFIG, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_generate_posts_chat_completion_and_trims_reply() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=_completion("  • Built things → impact → 10%\n"))

    generator = _generator(handler)
    text = await generator.generate("system text", "Role: Dev | Skills: Python", "sk-test-123")
    await generator.close()

    assert text == "• Built things → impact → 10%"
    request = captured[0]
    assert request.url == "https://llm.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test-123"
    body = json.loads(request.content)
    assert body["model"] == "gpt-4o-mini"
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 500
    assert body["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "Role: Dev | Skills: Python"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403])
async def test_rejected_credential_maps_to_auth_error(status_code: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": {"message": "Incorrect API key sk-te***"}})

    with pytest.raises(UpstreamAuthError) as exc_info:
        await _generator(handler).generate("s", "u", "sk-test-123")

    assert "sk-te" not in exc_info.value.public_message
    assert "check your API key" in exc_info.value.public_message


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 429, 500, 503])
async def test_other_error_statuses_map_to_generic_upstream_error(status_code: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text="internal upstream detail")

    with pytest.raises(UpstreamError) as exc_info:
        await _generator(handler).generate("s", "u", "sk-test-123")

    assert "internal upstream detail" not in exc_info.value.public_message


@pytest.mark.asyncio
async def test_transport_failure_maps_to_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError):
        await _generator(handler).generate("s", "u", "sk-test-123")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{}, {"choices": []}, _completion(None), _completion("   "), {"choices": "nope"}],
)
async def test_malformed_body_maps_to_upstream_error(payload: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(UpstreamError):
        await _generator(handler).generate("s", "u", "sk-test-123")


@pytest.mark.asyncio
async def test_non_json_body_maps_to_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(UpstreamError):
        await _generator(handler).generate("s", "u", "sk-test-123")


@pytest.mark.asyncio
async def test_client_is_reused_and_closed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion("ok"))

    generator = _generator(handler)
    await generator.generate("s", "u", "k1-credential")
    first_client = generator._client
    await generator.generate("s", "u", "k2-credential")

    assert generator._client is first_client
    await generator.close()
    assert generator._client is None


def test_load_generation_config_strips_trailing_slash() -> None:
    settings = build_settings(openai_base_url="https://proxy.test/", openai_model="gpt-test")

    config = load_generation_config(settings)

    assert config.base_url == "https://proxy.test"
    assert config.model == "gpt-test"
    assert config.max_tokens == 500
