"""Report generation and publishing."""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import AppConfig
from ..core.types import IntelItem, Report
from ..errors import IndexSyncError, ProviderError, ReportPublishError
from ..llm.prompts import build_brief_prompt, build_system_prompt
from ..llm.providers.base import GenerationProvider
from ..output.archive import ReportArchive
from ..output.index_sync import IndexNotifier, drop_report
from ..utils.logging import log_event
from .renderer import render_fallback

logger = logging.getLogger(__name__)


class ReportPipeline:
    """Turn buffered items into an archived report.

    ``generate`` always produces a report (possibly the deterministic
    fallback). ``publish`` only fails when the archive write fails; index
    notification problems fall back to the local drop directory.
    """

    def __init__(
        self,
        cfg: AppConfig,
        provider: GenerationProvider,
        archive: ReportArchive,
        notifier: IndexNotifier,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.archive = archive
        self.notifier = notifier

    async def generate(self, items: list[IntelItem], label: str) -> Report:
        messages = [{"role": "user", "content": build_brief_prompt(items, label)}]
        try:
            text = await self.provider.complete(
                build_system_prompt(), messages, self.cfg.provider.max_tokens
            )
        except ProviderError as exc:
            log_event(
                logger,
                "Report generation failed, using fallback",
                level=logging.ERROR,
                event="generation_failed",
                label=label,
                items=len(items),
                error=str(exc),
            )
            return Report(label=label, text=render_fallback(items, label, str(exc)), degraded=True)

        log_event(logger, "Report generated", event="generation_ok", label=label, items=len(items))
        return Report(label=label, text=text)

    async def publish(self, report: Report) -> Path:
        """Archive the report, then notify the index (or drop it locally).

        Returns:
            Path of the archived report

        Raises:
            ReportPublishError: If the report cannot be archived
        """
        try:
            path = self.archive.write(report.label, report.text)
        except OSError as exc:
            raise ReportPublishError(f"Cannot archive report {report.label}: {exc}") from exc
        log_event(logger, "Report archived", event="report_archived", label=report.label, report=str(path))

        try:
            await self.notifier.notify(report.text, path.name)
        except IndexSyncError as exc:
            log_event(
                logger,
                "Index notification failed, falling back to drop directory",
                level=logging.WARNING,
                event="index_sync_failed",
                label=report.label,
                error=str(exc),
            )
            self._drop(report, path.name)
        else:
            log_event(logger, "Report indexed", event="index_synced", label=report.label)
        return path

    def _drop(self, report: Report, document_name: str) -> None:
        try:
            dropped = drop_report(self.cfg.paths.drop_dir, document_name, report.text)
        except OSError as exc:
            # Archive already holds the report; a failed drop is not a pipeline failure.
            log_event(
                logger,
                "Drop directory write failed",
                level=logging.ERROR,
                event="report_drop_failed",
                label=report.label,
                error=str(exc),
            )
            return
        log_event(logger, "Report dropped", event="report_dropped", label=report.label, report=str(dropped))
