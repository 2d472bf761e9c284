"""
Downstream index notification.

Published reports are pushed to an intake endpoint for indexing. Delivery is
fire-and-forget from the pipeline's point of view: on any failure the caller
drops the report into a local directory instead of retrying.
"""

from __future__ import annotations

from pathlib import Path

import httpx

from ..config import IndexConfig
from ..errors import IndexSyncError


class IndexNotifier:
    """Client for the downstream index intake endpoint."""

    def __init__(self, cfg: IndexConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = cfg
        self._transport = transport

    async def notify(self, content: str, document_name: str) -> None:
        """Send a report to the index.

        Raises:
            IndexSyncError: When disabled, unreachable, or answering non-2xx
        """
        if not self.cfg.enabled or not self.cfg.url:
            raise IndexSyncError("Index notification disabled")
        payload = {
            "content": content,
            "filename": document_name,
            "source": self.cfg.origin,
            "tags": list(self.cfg.tags),
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(self.cfg.url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise IndexSyncError(f"{type(exc).__name__}: {exc}") from exc
        if not resp.is_success:
            raise IndexSyncError(f"Intake POST {resp.status_code}")


def drop_report(drop_dir: str | Path, document_name: str, text: str) -> Path:
    """Write a report into the local drop directory picked up by the index."""
    drop_dir = Path(drop_dir)
    drop_dir.mkdir(parents=True, exist_ok=True)
    path = drop_dir / document_name
    path.write_text(text, encoding="utf-8")
    return path
