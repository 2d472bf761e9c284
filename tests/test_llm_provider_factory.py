"""Tests for hot-swappable generation provider factory and backends."""

import asyncio
import json

import httpx
import pytest

from daily_intel.config import ProviderConfig
from daily_intel.errors import ProviderError
from daily_intel.llm.providers.factory import available_providers, create_provider
from daily_intel.llm.providers.gemini import GeminiProvider, _extract_text
from daily_intel.llm.providers.openai_compatible import OpenAICompatibleProvider


def test_available_providers_contains_expected_backends():
    names = available_providers()
    assert "gemini" in names
    assert "openai" in names
    assert "openai_compatible" in names


def test_create_provider_gemini():
    provider = create_provider(
        ProviderConfig(
            name="gemini",
            model="gemini-3-flash-preview",
            api_key="test-key",
            base_url="https://generativelanguage.googleapis.com",
        )
    )
    assert isinstance(provider, GeminiProvider)


def test_create_provider_openai_compatible():
    provider = create_provider(
        ProviderConfig(
            name="openai",
            model="gpt-4.1-mini",
            api_key="test-key",
            base_url="https://api.openai.com/v1",
        )
    )
    assert isinstance(provider, OpenAICompatibleProvider)


def test_create_provider_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_provider(
            ProviderConfig(
                name="unknown-provider",
                model="x",
                api_key="test-key",
                base_url="https://example.com",
            )
        )


def test_gemini_requires_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(ValueError, match="Missing Google API key"):
        create_provider(ProviderConfig(name="gemini"))


def _complete(handler, api_key="test-key"):
    provider = OpenAICompatibleProvider(
        ProviderConfig(base_url="https://llm.example.com/v1", model="m"),
        api_key,
        transport=httpx.MockTransport(handler),
    )
    return asyncio.run(provider.complete("system text", [{"role": "user", "content": "hi"}], 100))


def test_openai_compatible_sends_system_first_and_returns_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  # Brief  "}}]})

    assert _complete(handler) == "# Brief"
    assert seen["url"] == "https://llm.example.com/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["messages"][0] == {"role": "system", "content": "system text"}
    assert seen["body"]["max_tokens"] == 100


def test_openai_compatible_omits_auth_without_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    _complete(handler, api_key=None)
    assert seen["auth"] is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="upstream down"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}),
        httpx.Response(200, text="not json"),
    ],
)
def test_openai_compatible_failures_raise_provider_error(response):
    with pytest.raises(ProviderError):
        _complete(lambda request: response)


def test_openai_compatible_transport_error_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProviderError):
        _complete(handler)


def test_gemini_extract_text_skips_thought_parts():
    data = {
        "candidates": [
            {"content": {"parts": [{"text": "thinking", "thought": True}, {"text": "answer"}]}}
        ]
    }
    assert _extract_text(data) == "answer"
    assert _extract_text({"candidates": []}) == ""


def test_gemini_complete_uses_system_instruction():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        seen["key"] = request.url.params.get("key")
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "brief"}]}}]})

    provider = GeminiProvider(
        ProviderConfig(name="gemini", model="g", base_url="https://gemini.example.com"),
        "secret",
        transport=httpx.MockTransport(handler),
    )
    text = asyncio.run(provider.complete("sys", [{"role": "user", "content": "hi"}], 50))

    assert text == "brief"
    assert seen["key"] == "secret"
    assert seen["body"]["systemInstruction"] == {"parts": [{"text": "sys"}]}
    assert seen["body"]["generationConfig"]["maxOutputTokens"] == 50


def test_malformed_base_url_raises_provider_error():
    bad = ProviderConfig(base_url="http://[::1", model="m")
    openai = OpenAICompatibleProvider(bad, "k", transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    gemini = GeminiProvider(bad, "k", transport=httpx.MockTransport(lambda request: httpx.Response(200)))

    for provider in (openai, gemini):
        with pytest.raises(ProviderError):
            asyncio.run(provider.complete("sys", [{"role": "user", "content": "hi"}], 10))
