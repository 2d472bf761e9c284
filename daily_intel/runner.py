"""
Service orchestration for the Daily Intel agent.

IntelRunner owns the single State value and drives it through the pure
transitions in core.state:
1. poll_once: fetch all sources, merge new items, persist, escalate alerts
2. run_daily_report: once per calendar date, report on the buffer and clear it
3. escalate: out-of-band report for alert items, detached from the poll

Poll and report cycles are not locked against each other. Both apply their
changes as deltas against the current state (append new items / remove
reported items), so an overlapping poll and report do not lose items.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime
import logging
from pathlib import Path
from typing import Any, Callable

import httpx

from .config import AppConfig
from .core.state import StateStore, mark_reported, merge_new_items
from .core.types import IntelItem, State
from .errors import SourceConfigError
from .fetch.fetcher import build_client
from .input.sources import load_sources
from .llm.providers import create_provider
from .output.archive import ReportArchive
from .output.index_sync import IndexNotifier
from .poller import PollOutcome, poll_sources
from .report.pipeline import ReportPipeline
from .report.renderer import wrap_alert
from .utils.logging import log_event
from .utils.timeutils import resolve_timezone

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def build_pipeline(cfg: AppConfig) -> ReportPipeline:
    """Wire the report pipeline from configuration."""
    return ReportPipeline(
        cfg,
        create_provider(cfg.provider),
        ReportArchive(cfg.paths.reports_dir, cfg.paths.report_prefix),
        IndexNotifier(cfg.index),
    )


def build_clock(cfg: AppConfig) -> Clock:
    """Return a wall clock in the configured report timezone.

    Without a configured zone the system local offset is looked up on every
    call, so daylight-saving changes are picked up during long uptimes.
    """
    if cfg.schedule.timezone:
        tz = resolve_timezone(cfg.schedule.timezone)
        return lambda: datetime.now(tz)
    return lambda: datetime.now().astimezone()


class IntelRunner:
    """Owns service state and runs poll, report and escalation cycles."""

    def __init__(
        self,
        cfg: AppConfig,
        *,
        store: StateStore | None = None,
        pipeline: ReportPipeline | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.cfg = cfg
        self.store = store or StateStore(cfg.state.path, cfg.state.seen_cap, cfg.state.seen_keep)
        self.pipeline = pipeline or build_pipeline(cfg)
        self.client_factory = client_factory or (lambda: build_client(cfg.fetch))
        self.clock = clock or build_clock(cfg)
        self._state = self.store.load()
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def state(self) -> State:
        return self._state

    def today(self) -> str:
        return self.clock().date().isoformat()

    def _persist(self) -> None:
        self._state = self.store.save(self._state)

    async def poll_once(self) -> PollOutcome:
        """Run one poll cycle and persist the result.

        Alert items are escalated in a detached task; the cycle does not
        wait for that report.
        """
        async with self.client_factory() as client:
            outcome = await poll_sources(self._state, self.cfg, client, now=self.clock())

        if outcome.aborted:
            return outcome

        self._state = merge_new_items(self._state, outcome.items, self.clock())
        self._persist()

        if outcome.items:
            log_event(
                logger,
                "New items found",
                event="poll_complete",
                new=len(outcome.items),
                alerts=len(outcome.alerts),
                buffered=len(self._state.item_buffer),
            )
        else:
            log_event(logger, "No new items", event="poll_complete", new=0)

        if outcome.alerts:
            log_event(
                logger,
                "Regulatory alert",
                level=logging.WARNING,
                event="regulatory_alert",
                alerts=len(outcome.alerts),
            )
            self._spawn(self.escalate(outcome.alerts))
        return outcome

    async def run_daily_report(self, *, force: bool = False, today: str | None = None) -> Path | None:
        """Generate and publish the daily report for ``today``.

        Skipped (returns None) when a report for the date already exists,
        unless ``force`` is set. Archive failures propagate and leave the
        buffer and the date guard untouched.
        """
        today = today or self.today()
        if not force and self._state.last_report_date == today:
            log_event(logger, "Report already generated", event="report_skipped", label=today)
            return None

        items = list(self._state.item_buffer)
        log_event(logger, "Generating daily report", event="report_start", label=today, items=len(items), force=force)
        report = await self.pipeline.generate(items, today)
        path = await self.pipeline.publish(report)

        self._state = mark_reported(self._state, items, today)
        self._persist()
        log_event(
            logger,
            "Daily report complete",
            event="report_complete",
            label=today,
            items=len(items),
            degraded=report.degraded,
            report=str(path),
        )
        return path

    async def escalate(self, alerts: list[IntelItem]) -> Path | None:
        """Publish an out-of-band report for alert items.

        Uses a label distinct from the daily date key and leaves the buffer
        and the daily guard alone. Failures are logged, never raised.
        """
        now = self.clock()
        today = now.date().isoformat()
        label = f"{today}-alert-{int(now.timestamp() * 1000)}"
        try:
            report = await self.pipeline.generate(alerts, f"{today} (regulatory alert)")
            report = replace(report, label=label, text=wrap_alert(report.text))
            path = await self.pipeline.publish(report)
        except Exception:  # noqa: BLE001
            log_event(logger, "Alert escalation failed", level=logging.ERROR, exc_info=True, event="alert_failed", label=label)
            return None
        log_event(logger, "Alert report published", event="alert_published", label=label, report=str(path))
        return path

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for detached escalation tasks to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def status(self) -> dict[str, Any]:
        """Snapshot for status queries."""
        try:
            sources_loaded = len(load_sources(self.cfg.paths.sources_file))
        except SourceConfigError:
            sources_loaded = 0
        return {
            "last_report_date": self._state.last_report_date,
            "last_poll_time": self._state.last_poll_time,
            "buffer_size": len(self._state.item_buffer),
            "seen_count": len(self._state.seen_ids),
            "reports_archived": self.pipeline.archive.count(),
            "sources_loaded": sources_loaded,
        }

    def latest_report(self) -> str | None:
        return self.pipeline.archive.latest()

    def list_reports(self) -> list[str]:
        return self.pipeline.archive.list_reports()
