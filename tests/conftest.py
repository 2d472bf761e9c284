"""Shared fixtures for Daily Intel tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from daily_intel.config import AppConfig
from daily_intel.core.types import IntelItem
from daily_intel.errors import ProviderError
from daily_intel.llm.providers.base import GenerationProvider


class FakeProvider(GenerationProvider):
    """Records requests and returns canned text, or fails on demand."""

    name = "fake"

    def __init__(self, text: str = "# Generated brief", fail: bool = False):
        self.text = text
        self.fail = fail
        self.calls: list[dict] = []

    async def complete(self, system, messages, max_tokens):
        self.calls.append({"system": system, "messages": messages, "max_tokens": max_tokens})
        if self.fail:
            raise ProviderError("HTTP 503: upstream down")
        return self.text


def make_item(idx: int, *, source: str = "Feed", alert: bool = False) -> IntelItem:
    link = f"https://example.com/{source.lower()}/{idx}"
    return IntelItem(
        id=f"{source}::{link}",
        title=f"Item {idx}",
        link=link,
        pub_date="2026-10-18T05:00:00+00:00",
        summary=f"Summary {idx}",
        source=source,
        category="regulatory" if alert else "market",
        is_alert=alert,
    )


@pytest.fixture
def cfg(tmp_path: Path) -> AppConfig:
    cfg = AppConfig()
    cfg.paths.sources_file = str(tmp_path / "sources.json")
    cfg.paths.reports_dir = str(tmp_path / "reports")
    cfg.paths.drop_dir = str(tmp_path / "intake")
    cfg.state.path = str(tmp_path / "state.json")
    cfg.regulatory.url = "https://regulator.example.org/whats-new"
    cfg.regulatory.base_url = "https://regulator.example.org"
    cfg.index.url = "https://index.example.com/api/intake"
    cfg.logging.console = False
    return cfg


@pytest.fixture
def write_sources(cfg: AppConfig):
    def _write(records: list[dict]) -> Path:
        path = Path(cfg.paths.sources_file)
        path.write_text(json.dumps(records), encoding="utf-8")
        return path

    return _write
