"""Plain-text rendering for fallback reports and out-of-band alerts."""

from __future__ import annotations

from ..core.types import IntelItem
from ..llm.prompts import NO_ITEMS_MARKER


FALLBACK_NOTICE = "Generation service unavailable"
ALERT_BANNER = (
    "> **IMMEDIATE REGULATORY ALERT** - generated outside the regular report window"
)


def render_fallback(items: list[IntelItem], label: str, error: str) -> str:
    """Deterministic report used when the generation service fails.

    Lists every item's source, title and link under a visible failure notice.
    """
    lines = [
        f"# Morning Brief - {label}",
        "",
        f"**Status:** {FALLBACK_NOTICE} - {error}",
        f"**Items buffered:** {len(items)}",
        "",
    ]
    if not items:
        lines.append(NO_ITEMS_MARKER)
    for item in items:
        prefix = "[ALERT] " if item.is_alert else ""
        lines.append(f"- {prefix}**{item.source}**: {item.title} - {item.link}")
    return "\n".join(lines) + "\n"


def wrap_alert(text: str) -> str:
    """Prefix an out-of-band report with a visible alert banner."""
    return f"{ALERT_BANNER}\n\n{text}"
