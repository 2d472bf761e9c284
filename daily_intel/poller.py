"""
Poll orchestration.

One poll cycle reads the source list fresh, fetches every source one at a
time, scans the regulatory page, and returns the merged new items. It
does not touch persistence: the runner applies the outcome to the state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging

import httpx

from .config import AppConfig
from .core.types import IntelItem, State
from .errors import SourceConfigError
from .fetch.fetcher import fetch_feed
from .fetch.regulatory import fetch_regulatory_items
from .input.sources import load_sources
from .utils.logging import log_event

logger = logging.getLogger(__name__)


@dataclass
class PollOutcome:
    """Result of one poll cycle.

    Attributes:
        items: New items across all sources, unique by id
        alerts: The subset of items flagged for escalation
        sources_polled: Number of feed sources fetched
        aborted: True when the source list could not be loaded
    """

    items: list[IntelItem] = field(default_factory=list)
    alerts: list[IntelItem] = field(default_factory=list)
    sources_polled: int = 0
    aborted: bool = False


async def poll_sources(
    state: State,
    cfg: AppConfig,
    client: httpx.AsyncClient,
    now: datetime | None = None,
) -> PollOutcome:
    """Run one poll cycle against the current state's seen set."""
    now = now or datetime.now(timezone.utc)
    try:
        sources = load_sources(cfg.paths.sources_file)
    except SourceConfigError as exc:
        log_event(
            logger,
            "Cannot load sources file",
            level=logging.ERROR,
            event="sources_load_failed",
            error=str(exc),
        )
        return PollOutcome(aborted=True)

    log_event(
        logger,
        "Poll start",
        event="poll_start",
        sources=len(sources),
        regulatory=cfg.regulatory.enabled,
    )

    seen = set(state.seen_ids)
    merged: list[IntelItem] = []
    merged_ids: set[str] = set()

    def _merge(batch: list[IntelItem]) -> None:
        for item in batch:
            if item.id in merged_ids:
                continue
            merged_ids.add(item.id)
            merged.append(item)

    for source in sources:
        _merge(await fetch_feed(client, source, seen, cfg.fetch, now=now))

    if cfg.regulatory.enabled:
        _merge(
            await fetch_regulatory_items(
                client, seen, cfg.regulatory, cfg.fetch.timeout_seconds, now=now
            )
        )

    alerts = [item for item in merged if item.is_alert]
    return PollOutcome(items=merged, alerts=alerts, sources_polled=len(sources))
