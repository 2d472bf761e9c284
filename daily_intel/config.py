"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: Feed polling and item filtering settings
- RegulatoryConfig: Regulatory publication page monitor settings
- ScheduleConfig: Poll interval and daily report time
- StateConfig: State file location and seen-set bounds
- PathsConfig: Sources file, report archive and drop directory
- ProviderConfig: Text-generation service settings
- IndexConfig: Downstream index service settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


@dataclass
class FetchConfig:
    """Configuration for feed fetching.

    Attributes:
        timeout_seconds: Per-source fetch timeout; the fetch is cancelled on expiry
        lookback_hours: Items published longer ago than this are ignored
        summary_max_chars: Maximum length of an item summary
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings
    """

    timeout_seconds: float = 8.0
    lookback_hours: int = 48
    summary_max_chars: int = 400
    user_agent: str = "Daily-Intel/1.0 (feed monitor)"
    trust_env: bool = True


@dataclass
class RegulatoryConfig:
    """Configuration for the regulatory publication page monitor.

    Attributes:
        enabled: Whether the page is polled each cycle
        name: Source name used for item identifiers
        url: Publication page to scan for links
        base_url: Base used to absolutise relative links
        category: Category label of produced items
        min_text_length: Links with shorter visible text are ignored
        keywords: Relevance vocabulary (regex fragments, matched on word boundaries;
            "MEPC" matches "MEPC 82" and "/MEPC.aspx" but not "MEPC82.aspx")
        title_max_chars: Maximum title length
        summary_max_chars: Maximum length of the text quoted in the summary
    """

    enabled: bool = True
    name: str = "IMO"
    url: str = "https://www.imo.org/en/MediaCentre/Pages/WhatsNew.aspx"
    base_url: str = "https://www.imo.org"
    category: str = "regulatory"
    min_text_length: int = 10
    keywords: list[str] = field(
        default_factory=lambda: [
            "MEPC",
            "MSC",
            "circulars?",
            "CII",
            "EEXI",
            "ETS",
            "decarboni[sz]ation",
            "carbon",
            "emissions?",
            "GHG",
        ]
    )
    title_max_chars: int = 200
    summary_max_chars: int = 300


@dataclass
class ScheduleConfig:
    """Configuration for the two timers.

    Attributes:
        poll_interval_minutes: Interval between poll cycles
        report_hour: Local hour of the daily report
        report_minute: Local minute of the daily report
        timezone: IANA timezone name, or None for the system local timezone
    """

    poll_interval_minutes: float = 30
    report_hour: int = 6
    report_minute: int = 30
    timezone: str | None = None


@dataclass
class StateConfig:
    """Configuration for persisted state.

    Attributes:
        path: JSON state file
        seen_cap: Seen-set size that triggers eviction
        seen_keep: Number of most recent ids kept after eviction
    """

    path: str = "data/state.json"
    seen_cap: int = 5000
    seen_keep: int = 3000


@dataclass
class PathsConfig:
    """Filesystem locations.

    Attributes:
        sources_file: JSON or YAML list of sources, re-read every poll
        reports_dir: Archive directory for generated reports
        drop_dir: Fallback drop directory used when the index is unreachable
        report_prefix: Filename prefix of archived reports
    """

    sources_file: str = "sources.json"
    reports_dir: str = "data/reports"
    drop_dir: str = "data/intake"
    report_prefix: str = "intel-brief"


@dataclass
class ProviderConfig:
    """Configuration for pluggable text-generation providers."""

    name: str = "openai_compatible"
    model: str = "claude-sonnet-4-6"
    base_url: str = "http://localhost:4444/v1"
    api_key: str | None = None
    api_key_env: str | None = None
    max_tokens: int = 2000
    timeout_seconds: float = 120.0
    trust_env: bool = True


@dataclass
class IndexConfig:
    """Configuration for the downstream index service.

    Attributes:
        enabled: Whether to notify the index at all (disabled means drop-only)
        url: Intake endpoint receiving published reports
        origin: Origin tag sent with every document
        tags: Topic tags sent with every document
        timeout_seconds: Request timeout
    """

    enabled: bool = True
    url: str = "http://localhost:3199/api/intake"
    origin: str = "daily-intel"
    tags: list[str] = field(
        default_factory=lambda: ["daily-intel", "morning-brief", "maritime", "intelligence"]
    )
    timeout_seconds: float = 15.0


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
        log_dir: Directory holding the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "daily-intel.jsonl"
    log_dir: str = "data/logs"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    regulatory: RegulatoryConfig = field(default_factory=RegulatoryConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    state: StateConfig = field(default_factory=StateConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS: dict[str, type] = {
    "fetch": FetchConfig,
    "regulatory": RegulatoryConfig,
    "schedule": ScheduleConfig,
    "state": StateConfig,
    "paths": PathsConfig,
    "provider": ProviderConfig,
    "index": IndexConfig,
    "logging": LoggingConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict):
            data[key].update(value)
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, dict[str, Any]]:
    """Convert AppConfig to nested dictionary."""
    return {name: dict(vars(getattr(cfg, name))) for name in _SECTIONS}


def _fromdict(data: dict[str, dict[str, Any]]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary, ignoring unknown keys."""
    sections = {}
    for name, section_cls in _SECTIONS.items():
        known = section_cls.__dataclass_fields__
        values = {k: v for k, v in data.get(name, {}).items() if k in known}
        sections[name] = section_cls(**values)
    return AppConfig(**sections)


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if cfg.api_key_env:
        return os.getenv(cfg.api_key_env)
    defaults = {
        "gemini": "GOOGLE_API_KEY",
        "openai": "OPENAI_API_KEY",
        "openai_compatible": "OPENAI_API_KEY",
        "openai-compatible": "OPENAI_API_KEY",
    }
    env_name = defaults.get(cfg.name.lower(), "OPENAI_API_KEY")
    return os.getenv(env_name)
