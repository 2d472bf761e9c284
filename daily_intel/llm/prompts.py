"""Prompt loading and rendering helpers for generation providers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from ..core.types import IntelItem


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

NO_ITEMS_MARKER = "No new intelligence items since the last report."


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def format_item(item: IntelItem) -> str:
    lines = [
        f"SOURCE: {item.source} ({item.category})",
        f"TITLE: {item.title}",
        f"URL: {item.link}",
        f"DATE: {item.pub_date}",
        f"SUMMARY: {item.summary}",
    ]
    if item.is_alert:
        lines.append("ALERT: regulatory item")
    return "\n".join(lines)


def format_items_block(items: list[IntelItem]) -> str:
    """Serialize items for the generation request.

    An empty list yields an explicit marker so the report always carries a
    "no new items" statement instead of silently omitting the section.
    """
    if not items:
        return NO_ITEMS_MARKER
    return "\n\n---\n\n".join(format_item(item) for item in items)


def build_system_prompt() -> str:
    return _load_template("system")


def build_brief_prompt(items: list[IntelItem], label: str) -> str:
    has_alert = any(item.is_alert for item in items)
    return _render_template(
        "brief",
        label=label,
        count=str(len(items)),
        alert_note=", REGULATORY ALERT" if has_alert else "",
        items=format_items_block(items),
    )
