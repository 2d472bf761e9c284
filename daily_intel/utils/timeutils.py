"""Timestamp parsing and timezone helpers."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from email.utils import parsedate_to_datetime

from zoneinfo import ZoneInfo


def parse_iso8601(value: str) -> datetime:
    """Parse an ISO 8601 timestamp string into a timezone-aware datetime."""
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_pub_date(value: str) -> datetime | None:
    """Best-effort parse of a feed publication date.

    Accepts RFC 822 dates (RSS ``pubDate``) and ISO 8601 dates (Atom,
    ``dc:date``). Returns None when the value is empty or unparsable.
    """
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError, OverflowError):
        parsed = None
    if parsed is not None:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed
    try:
        return parse_iso8601(raw)
    except (ValueError, OverflowError):
        return None


def resolve_timezone(timezone_name: str | None) -> tzinfo:
    """Resolve local/system timezone or a specific IANA timezone name."""
    if timezone_name:
        return ZoneInfo(timezone_name)

    local = datetime.now().astimezone().tzinfo
    if local is None:
        return timezone.utc
    return local
