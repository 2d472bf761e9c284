"""
Feed fetching and item filtering.

Each source is fetched with a single bounded request. A failing source is
logged and contributes zero items; it never aborts the poll cycle.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Collection

import httpx

from ..config import FetchConfig
from ..core.types import IntelItem, Source, make_item_id
from ..input.feed_parser import parse_feed_items
from ..utils.logging import log_event
from ..utils.timeutils import parse_pub_date

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def build_client(cfg: FetchConfig) -> httpx.AsyncClient:
    """Create the shared HTTP client used for one poll cycle."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(cfg.timeout_seconds),
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


async def fetch_text(client: httpx.AsyncClient, url: str, timeout: float) -> FetchResult:
    """GET a URL, cancelling the request once ``timeout`` seconds elapse.

    Never raises: timeouts, transport errors, malformed URLs and non-2xx
    responses are reported through ``FetchResult.error``.
    """
    try:
        resp = await asyncio.wait_for(client.get(url), timeout=timeout)
    except asyncio.TimeoutError:
        return FetchResult(url=url, status_code=None, text=None, error=f"TimeoutError: exceeded {timeout}s")
    except Exception as exc:  # noqa: BLE001
        return FetchResult(url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")

    if not resp.is_success:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            text=None,
            error=f"HTTP {resp.status_code}",
        )
    return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)


async def fetch_feed(
    client: httpx.AsyncClient,
    source: Source,
    seen_ids: Collection[str],
    cfg: FetchConfig,
    now: datetime | None = None,
) -> list[IntelItem]:
    """Fetch one feed and return its new items in document order.

    Filters, in order: missing title or link; published before the lookback
    horizon (unknown dates are kept); already seen; then the summary is
    truncated.

    Args:
        client: HTTP client
        source: Feed to fetch
        seen_ids: Identifiers processed in earlier cycles
        cfg: Fetch configuration
        now: Reference time for the age filter (defaults to current UTC time)

    Returns:
        New IntelItems; empty on any fetch failure
    """
    now = now or datetime.now(timezone.utc)
    result = await fetch_text(client, source.url, cfg.timeout_seconds)
    if not result.ok:
        log_event(
            logger,
            "Feed failed",
            level=logging.WARNING,
            event="feed_failed",
            source=source.name,
            url=source.url,
            status_code=result.status_code,
            error=result.error,
        )
        return []

    raw_items = parse_feed_items(result.text or "")
    cutoff = now - timedelta(hours=cfg.lookback_hours)
    emitted: set[str] = set()
    items: list[IntelItem] = []
    stale = 0

    for raw in raw_items:
        if not raw.title or not raw.link:
            continue
        published = parse_pub_date(raw.pub_date)
        if published is not None and published < cutoff:
            stale += 1
            continue
        item_id = make_item_id(source.name, raw.link)
        if item_id in seen_ids or item_id in emitted:
            continue
        emitted.add(item_id)
        items.append(
            IntelItem(
                id=item_id,
                title=raw.title,
                link=raw.link.strip(),
                pub_date=raw.pub_date or now.isoformat(),
                summary=raw.description[: cfg.summary_max_chars],
                source=source.name,
                category=source.category,
            )
        )

    log_event(
        logger,
        "Feed fetched",
        level=logging.DEBUG,
        event="feed_fetched",
        source=source.name,
        raw=len(raw_items),
        stale=stale,
        new=len(items),
    )
    return items
