"""
Core data types for the Daily Intel service.

This module defines the structures shared by every stage:
- Source: A feed descriptor loaded from the sources file
- RawFeedItem: Best-effort fields pulled out of feed markup
- IntelItem: One deduplicated piece of intelligence
- State: The persisted seen set, report guard and item buffer
- Report: Generated report text keyed by label
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def make_item_id(source_name: str, link: str) -> str:
    """Return the deterministic identifier for an item.

    The identifier only depends on the source name and the stripped link,
    so re-fetching the same item always yields the same id.
    """
    return f"{source_name}::{link.strip()}"


@dataclass(frozen=True)
class Source:
    """A feed to poll.

    Attributes:
        name: Unique human-readable key, also used in item identifiers
        url: Fetch endpoint of the feed
        category: Category label copied onto every item of this source
    """

    name: str
    url: str
    category: str


@dataclass(frozen=True)
class RawFeedItem:
    """Item fields extracted from feed markup. Missing fields are empty strings."""

    title: str
    link: str
    pub_date: str
    description: str


@dataclass(frozen=True)
class IntelItem:
    """One ingested intelligence item.

    Attributes:
        id: Deterministic identifier, see make_item_id()
        title: Item headline
        link: Absolute link to the item
        pub_date: Publication time as found in the feed (or fetch time)
        summary: Bounded-length excerpt
        source: Name of the originating source
        category: Category label of the originating source
        is_alert: True for high-priority items that trigger escalation
    """

    id: str
    title: str
    link: str
    pub_date: str
    summary: str
    source: str
    category: str
    is_alert: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "pubDate": self.pub_date,
            "summary": self.summary,
            "source": self.source,
            "category": self.category,
            "isAlert": self.is_alert,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IntelItem":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            link=str(data.get("link", "")),
            pub_date=str(data.get("pubDate", "")),
            summary=str(data.get("summary", "")),
            source=str(data.get("source", "")),
            category=str(data.get("category", "")),
            is_alert=bool(data.get("isAlert", False)),
        )


@dataclass
class State:
    """Process-durable service state.

    Every id in item_buffer is also present in seen_ids. Publishing a
    report clears reported items from the buffer, never from seen_ids.
    """

    seen_ids: list[str] = field(default_factory=list)
    last_report_date: str | None = None
    last_poll_time: str | None = None
    item_buffer: list[IntelItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "seenIds": list(self.seen_ids),
            "lastBriefDate": self.last_report_date,
            "lastPollTime": self.last_poll_time,
            "itemBuffer": [item.to_dict() for item in self.item_buffer],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "State":
        seen = data.get("seenIds") or []
        buffer = data.get("itemBuffer") or []
        if not isinstance(seen, list) or not isinstance(buffer, list):
            raise ValueError("seenIds and itemBuffer must be lists")
        return cls(
            seen_ids=[str(item_id) for item_id in seen],
            last_report_date=data.get("lastBriefDate"),
            last_poll_time=data.get("lastPollTime"),
            item_buffer=[IntelItem.from_dict(item) for item in buffer],
        )


@dataclass(frozen=True)
class Report:
    """Generated report text.

    Attributes:
        label: Archive key (calendar date, or date plus alert tag)
        text: Markdown report body
        degraded: True when the deterministic fallback was used
    """

    label: str
    text: str
    degraded: bool = False
