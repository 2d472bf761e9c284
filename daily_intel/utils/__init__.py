"""Shared logging and time helpers."""

from .logging import log_event, setup_logging, truncate_text
from .timeutils import parse_iso8601, parse_pub_date, resolve_timezone

__all__ = [
    "log_event",
    "parse_iso8601",
    "parse_pub_date",
    "resolve_timezone",
    "setup_logging",
    "truncate_text",
]
