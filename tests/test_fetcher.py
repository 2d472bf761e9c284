"""Tests for feed fetching, filtering and deduplication."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import httpx

from daily_intel.config import FetchConfig
from daily_intel.core.types import Source
from daily_intel.fetch.fetcher import fetch_feed, fetch_text


NOW = datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)
SOURCE = Source(name="Wire", url="https://feeds.example.com/wire.xml", category="market")


def _rfc822(dt: datetime) -> str:
    return dt.strftime("%a, %d %b %Y %H:%M:%S +0000")


def _feed(*entries: tuple[str, str, str], description: str = "body") -> str:
    items = "".join(
        f"<item><title>{title}</title><link>{link}</link>"
        f"<pubDate>{pub}</pubDate><description>{description}</description></item>"
        for title, link, pub in entries
    )
    return f"<rss><channel>{items}</channel></rss>"


def _run(handler, *, seen=(), cfg: FetchConfig | None = None):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_feed(client, SOURCE, set(seen), cfg or FetchConfig(), now=NOW)

    return asyncio.run(_go())


def test_age_filter_drops_items_beyond_lookback():
    body = _feed(
        ("Fresh one", "https://example.com/1", _rfc822(NOW - timedelta(hours=1))),
        ("Fresh two", "https://example.com/2", _rfc822(NOW - timedelta(hours=5))),
        ("Stale", "https://example.com/3", _rfc822(NOW - timedelta(hours=96))),
    )

    items = _run(lambda request: httpx.Response(200, text=body), cfg=FetchConfig(lookback_hours=48))

    assert [item.title for item in items] == ["Fresh one", "Fresh two"]
    assert items[0].id == "Wire::https://example.com/1"
    assert items[0].source == "Wire"
    assert items[0].category == "market"
    assert not items[0].is_alert


def test_unparsable_or_missing_date_is_kept():
    body = _feed(
        ("Garbled date", "https://example.com/g", "not a date"),
        ("No date", "https://example.com/n", ""),
    )

    items = _run(lambda request: httpx.Response(200, text=body))

    assert [item.title for item in items] == ["Garbled date", "No date"]
    assert items[0].pub_date == "not a date"
    assert items[1].pub_date == NOW.isoformat()


def test_second_poll_with_unchanged_content_yields_nothing():
    body = _feed(("Story", "https://example.com/s", _rfc822(NOW)))
    handler = lambda request: httpx.Response(200, text=body)  # noqa: E731

    first = _run(handler)
    second = _run(handler, seen={item.id for item in first})

    assert len(first) == 1
    assert second == []


def test_duplicate_links_within_one_feed_are_emitted_once():
    body = _feed(
        ("Story", "https://example.com/s", _rfc822(NOW)),
        ("Story (updated)", "https://example.com/s", _rfc822(NOW)),
    )

    items = _run(lambda request: httpx.Response(200, text=body))

    assert [item.title for item in items] == ["Story"]


def test_items_missing_title_or_link_are_dropped_and_summary_truncated():
    body = (
        "<rss><item><title>Only title</title></item>"
        "<item><link>https://example.com/only-link</link></item>"
        f"<item><title>Full</title><link>https://example.com/full</link>"
        f"<description>{'x' * 50}</description></item></rss>"
    )

    items = _run(lambda request: httpx.Response(200, text=body), cfg=FetchConfig(summary_max_chars=10))

    assert len(items) == 1
    assert items[0].summary == "x" * 10


def test_non_success_status_returns_empty():
    assert _run(lambda request: httpx.Response(503, text="busy")) == []


def test_transport_error_returns_empty():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert _run(handler) == []


def test_timeout_cancels_only_that_fetch():
    async def slow(request):
        await asyncio.sleep(5)
        return httpx.Response(200, text="<rss/>")

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(slow)) as client:
            return await fetch_text(client, "https://slow.example.com", timeout=0.05)

    result = asyncio.run(_go())

    assert result.text is None
    assert result.status_code is None
    assert "Timeout" in result.error


def test_malformed_url_is_reported_not_raised():
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200))) as client:
            return await fetch_text(client, "http://[::1", timeout=1.0)

    result = asyncio.run(_go())

    assert not result.ok
    assert "InvalidURL" in result.error


def test_out_of_range_publication_year_counts_as_recent():
    body = _feed(("Far future", "https://example.com/f", "Sat, 17 Oct 99999999999999999999 08:00:00 GMT"))

    items = _run(lambda request: httpx.Response(200, text=body))

    assert [item.title for item in items] == ["Far future"]
