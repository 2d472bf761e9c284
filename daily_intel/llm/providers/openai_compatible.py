"""OpenAI-compatible chat completions provider (also serves local proxies)."""

from __future__ import annotations

from typing import Any

import httpx

from ...config import ProviderConfig
from ...errors import ProviderError
from ...utils.logging import truncate_text
from .base import GenerationProvider


class OpenAICompatibleProvider(GenerationProvider):
    """Calls ``{base_url}/chat/completions``.

    The API key is optional since local proxies usually do not need one.
    """

    name = "openai_compatible"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
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
            "model": self.cfg.model,
            "messages": [{"role": "system", "content": system}, *messages],
            "max_tokens": max_tokens,
        }
        data = await self._post(payload)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(f"Malformed completion response: {exc!r}") from exc
        if not isinstance(content, str) or not content.strip():
            raise ProviderError("Empty completion response")
        return content.strip()

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, json=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ProviderError(f"{type(exc).__name__}: {exc}") from exc
        if not resp.is_success:
            raise ProviderError(f"HTTP {resp.status_code}: {truncate_text(resp.text, 500)}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(f"Invalid JSON response: {exc}") from exc
