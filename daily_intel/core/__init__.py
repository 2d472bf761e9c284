"""Core types and state handling."""

from .state import StateStore, cap_seen_ids, mark_reported, merge_new_items
from .types import IntelItem, RawFeedItem, Report, Source, State, make_item_id

__all__ = [
    "IntelItem",
    "RawFeedItem",
    "Report",
    "Source",
    "State",
    "StateStore",
    "cap_seen_ids",
    "make_item_id",
    "mark_reported",
    "merge_new_items",
]
