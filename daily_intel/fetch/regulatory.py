"""
Regulatory publication page monitor.

The regulator's "what's new" page has no feed, so every hyperlink on it is
scanned and kept when its text or target matches a fixed relevance
vocabulary. Publications that avoid the vocabulary are not reported.
Every item produced here is an alert and can trigger an out-of-band report.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
import logging
import re
from typing import Collection
from urllib.parse import urljoin

import httpx

from ..config import RegulatoryConfig
from ..core.types import IntelItem, make_item_id
from ..input.feed_parser import strip_markup
from ..utils.logging import log_event
from .fetcher import fetch_text

logger = logging.getLogger(__name__)

ANCHOR_RE = re.compile(
    r"""<a\s[^>]*?\bhref\s*=\s*["']([^"']*)["'][^>]*>(.*?)</a\s*>""",
    re.IGNORECASE | re.DOTALL,
)
SKIPPED_SCHEMES = ("#", "mailto:", "javascript:", "tel:")


def extract_links(html: str) -> list[tuple[str, str]]:
    """Return ``(href, visible text)`` pairs for every anchor, in page order."""
    links = []
    for match in ANCHOR_RE.finditer(html or ""):
        href = strip_markup(match.group(1))
        text = strip_markup(match.group(2))
        links.append((href, text))
    return links


@lru_cache(maxsize=32)
def _vocabulary_re(keywords: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(keywords) + r")\b", re.IGNORECASE)


def is_relevant(text: str, href: str, keywords: Collection[str]) -> bool:
    """Check the link text and target against the relevance vocabulary."""
    if not keywords:
        return False
    return _vocabulary_re(tuple(keywords)).search(f"{text} {href}") is not None


async def fetch_regulatory_items(
    client: httpx.AsyncClient,
    seen_ids: Collection[str],
    cfg: RegulatoryConfig,
    timeout: float,
    now: datetime | None = None,
) -> list[IntelItem]:
    """Scan the publication page and return new relevant publications.

    Args:
        client: HTTP client
        seen_ids: Identifiers processed in earlier cycles
        cfg: Monitor configuration
        timeout: Fetch timeout in seconds
        now: Timestamp recorded on produced items

    Returns:
        Alert items, unique by link; empty on any fetch failure
    """
    now = now or datetime.now(timezone.utc)
    result = await fetch_text(client, cfg.url, timeout)
    if not result.ok:
        log_event(
            logger,
            "Regulatory page failed",
            level=logging.WARNING,
            event="regulatory_failed",
            source=cfg.name,
            url=cfg.url,
            status_code=result.status_code,
            error=result.error,
        )
        return []

    items: list[IntelItem] = []
    links_seen: set[str] = set()
    for href, text in extract_links(result.text or ""):
        if len(text) < cfg.min_text_length:
            continue
        if not href or href.lower().startswith(SKIPPED_SCHEMES):
            continue
        if not is_relevant(text, href, cfg.keywords):
            continue
        link = urljoin(cfg.base_url, href)
        item_id = make_item_id(cfg.name, link)
        if item_id in seen_ids or link in links_seen:
            continue
        links_seen.add(link)
        items.append(
            IntelItem(
                id=item_id,
                title=text[: cfg.title_max_chars],
                link=link,
                pub_date=now.isoformat(),
                summary=f"{cfg.name} publication: {text[: cfg.summary_max_chars]}",
                source=cfg.name,
                category=cfg.category,
                is_alert=True,
            )
        )

    log_event(
        logger,
        "Regulatory page scanned",
        level=logging.DEBUG,
        event="regulatory_scanned",
        source=cfg.name,
        new=len(items),
    )
    return items
