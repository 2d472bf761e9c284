"""
Poll and daily-report timers.

Two independent asyncio loops:
- poll loop: fires immediately, then every poll interval
- report loop: sleeps until the next local hh:mm, recomputed from the wall
  clock on every iteration so long uptimes do not accumulate drift

Each cycle is wrapped so that a failure is logged and the loop continues.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
import logging

from .config import ScheduleConfig
from .runner import Clock, IntelRunner
from .utils.logging import log_event

logger = logging.getLogger(__name__)


def next_report_time(now: datetime, hour: int, minute: int) -> datetime:
    """Return the next occurrence of hour:minute strictly after ``now``.

    ``now`` should be timezone-aware; the result keeps its tzinfo.
    """
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return target


class Scheduler:
    """Runs the poll and report timers for an IntelRunner."""

    def __init__(self, runner: IntelRunner, cfg: ScheduleConfig, clock: Clock | None = None) -> None:
        self.runner = runner
        self.cfg = cfg
        self.clock = clock or runner.clock

    async def run_forever(self) -> None:
        """Run both timers until cancelled."""
        log_event(
            logger,
            "Scheduler started",
            event="scheduler_start",
            poll_interval_minutes=self.cfg.poll_interval_minutes,
            report_time=f"{self.cfg.report_hour:02d}:{self.cfg.report_minute:02d}",
        )
        tasks = [
            asyncio.create_task(self._poll_loop(), name="daily-intel-poll"),
            asyncio.create_task(self._report_loop(), name="daily-intel-report"),
        ]
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self.runner.drain()

    async def _poll_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self.cfg.poll_interval_minutes * 60
        while True:
            started = loop.time()
            await self.poll_cycle()
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, interval - elapsed))

    async def _report_loop(self) -> None:
        last_target: datetime | None = None
        while True:
            now = self.clock()
            reference = max(now, last_target) if last_target else now
            target = next_report_time(reference, self.cfg.report_hour, self.cfg.report_minute)
            if self.cfg.timezone is None:
                # Re-resolve the local offset at the target wall time (DST).
                target = target.replace(tzinfo=None).astimezone()
            delay = target.timestamp() - now.timestamp()
            log_event(
                logger,
                "Daily report scheduled",
                event="report_scheduled",
                at=target.isoformat(),
                in_minutes=round(delay / 60),
            )
            await asyncio.sleep(max(0.0, delay))
            last_target = target
            await self.report_cycle(target.date().isoformat())

    async def poll_cycle(self) -> None:
        try:
            await self.runner.poll_once()
        except Exception:  # noqa: BLE001
            log_event(logger, "Poll cycle failed", level=logging.ERROR, exc_info=True, event="poll_failed")

    async def report_cycle(self, today: str | None = None) -> None:
        try:
            await self.runner.run_daily_report(today=today)
        except Exception:  # noqa: BLE001
            log_event(logger, "Daily report failed", level=logging.ERROR, exc_info=True, event="report_failed")
