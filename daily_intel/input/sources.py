"""
Source list loading.

The sources file is an ordered list of ``{name, url, category}`` records in
JSON or YAML. It is read fresh on every poll cycle so edits take effect
without a restart.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..core.types import Source
from ..errors import SourceConfigError
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "news"


def load_sources(path: str | Path) -> list[Source]:
    """Load the source list.

    Args:
        path: JSON (``.json``) or YAML file holding a list of records

    Returns:
        Sources in file order, first occurrence winning on duplicate names

    Raises:
        SourceConfigError: If the file is missing, unparsable, or malformed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceConfigError(f"Cannot read sources file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            raw = json.loads(text)
        else:
            raw = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SourceConfigError(f"Cannot parse sources file {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise SourceConfigError(f"Sources file {path} must contain a list")

    sources: list[Source] = []
    names: set[str] = set()
    for idx, record in enumerate(raw):
        source = _parse_source(record, idx)
        if source.name in names:
            log_event(
                logger,
                "Duplicate source name ignored",
                level=logging.WARNING,
                event="source_duplicate",
                source=source.name,
            )
            continue
        names.add(source.name)
        sources.append(source)
    return sources


def _parse_source(record: Any, idx: int) -> Source:
    if not isinstance(record, dict):
        raise SourceConfigError(f"Source #{idx} is not a mapping")
    name = str(record.get("name") or "").strip()
    url = str(record.get("url") or record.get("endpoint") or "").strip()
    if not name or not url:
        raise SourceConfigError(f"Source #{idx} requires both name and url")
    category = str(record.get("category") or DEFAULT_CATEGORY).strip()
    return Source(name=name, url=url, category=category)
