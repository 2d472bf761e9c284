"""Google Gemini provider for report generation."""

from __future__ import annotations

from typing import Any

import httpx

from ...config import ProviderConfig
from ...errors import ProviderError
from ...utils.logging import truncate_text
from .base import GenerationProvider


_ROLE_MAP = {"user": "user", "assistant": "model", "model": "model"}


class GeminiProvider(GenerationProvider):
    """Gemini-backed provider using the ``generateContent`` endpoint."""

    name = "gemini"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("Missing Google API key")
        self.cfg = cfg
        self.api_key = api_key
        self._transport = transport

    async def complete(
        self,
        system: str,
        messages: list[dict[str, str]],
        max_tokens: int,
    ) -> str:
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [
                {
                    "role": _ROLE_MAP.get(message.get("role", "user"), "user"),
                    "parts": [{"text": message.get("content", "")}],
                }
                for message in messages
            ],
            "generationConfig": {
                "temperature": 0.4,
                "maxOutputTokens": max_tokens,
            },
        }
        data = await self._post(payload)
        content = _extract_text(data)
        if not content.strip():
            raise ProviderError("Empty Gemini response")
        return content.strip()

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        params = {"key": self.api_key}
        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, params=params, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ProviderError(f"{type(exc).__name__}: {exc}") from exc
        if not resp.is_success:
            raise ProviderError(f"HTTP {resp.status_code}: {truncate_text(resp.text, 500)}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(f"Invalid JSON response: {exc}") from exc


def _extract_text(data: dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""

    if not isinstance(parts, list):
        return ""

    non_thought_chunks: list[str] = []
    all_chunks: list[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text")
        if text is None:
            continue
        chunk = str(text)
        if not chunk:
            continue
        all_chunks.append(chunk)
        if not bool(part.get("thought")):
            non_thought_chunks.append(chunk)

    if non_thought_chunks:
        return "".join(non_thought_chunks)
    return "".join(all_chunks)
