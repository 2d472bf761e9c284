"""Tests for the tolerant feed extractor."""

from datetime import datetime, timezone

from daily_intel.input.feed_parser import extract_tag_text, parse_feed_items
from daily_intel.utils.timeutils import parse_pub_date


RSS = """<?xml version="1.0"?>
<rss version="2.0"><channel>
<title>Maritime Wire</title>
<item>
  <title><![CDATA[EU ETS & shipping: year two]]></title>
  <link>https://example.com/ets?a=1&b=2</link>
  <pubDate>Sat, 17 Oct 2026 08:00:00 GMT</pubDate>
  <description>&lt;p&gt;Carriers &lt;b&gt;brace&lt;/b&gt; for costs&lt;/p&gt;</description>
</item>
<item>
  <title>No link here</title>
  <guid isPermaLink="true">https://example.com/guid-only</guid>
  <dc:date>2026-10-17T09:30:00Z</dc:date>
  <content:encoded><![CDATA[<p>Full body</p>]]></content:encoded>
</item>
<item>
  <description>orphan</description>
</item>
</channel></rss>
"""

ATOM = """<feed xmlns="http://www.w3.org/2005/Atom">
<entry>
  <title type="html">Port congestion eases</title>
  <link rel="self" href="https://example.com/self/1"/>
  <link rel="alternate" href="https://example.com/atom/1"/>
  <id>urn:uuid:1</id>
  <updated>2026-10-17T10:00:00+02:00</updated>
  <summary>Queues shorten at major hubs.</summary>
</entry>
</feed>
"""


def test_cdata_body_preferred_and_returned_verbatim():
    markup = "<title>ignored</title>"
    assert extract_tag_text("<title><![CDATA[ <b>Bold</b> ]]></title>", "title") == "<b>Bold</b>"
    assert extract_tag_text(markup, "title") == "ignored"


def test_raw_body_has_markup_stripped():
    assert extract_tag_text("<description>a <i>b</i>\n  c</description>", "description") == "a b c"


def test_missing_tag_resolves_to_empty_string():
    assert extract_tag_text("<item><title>x</title></item>", "link") == ""


def test_tag_name_must_match_exactly():
    assert extract_tag_text("<titles>wrong</titles><title>right</title>", "title") == "right"


def test_parse_rss_items_with_field_fallbacks():
    items = parse_feed_items(RSS)

    assert len(items) == 3
    first, second, third = items
    assert first.title == "EU ETS & shipping: year two"
    assert first.link == "https://example.com/ets?a=1&b=2"
    assert first.pub_date == "Sat, 17 Oct 2026 08:00:00 GMT"
    assert first.description == "Carriers brace for costs"

    assert second.link == "https://example.com/guid-only"
    assert second.pub_date == "2026-10-17T09:30:00Z"
    assert second.description == "<p>Full body</p>"

    assert third.title == ""
    assert third.link == ""


def test_parse_atom_entry_uses_alternate_href():
    (entry,) = parse_feed_items(ATOM)

    assert entry.title == "Port congestion eases"
    assert entry.link == "https://example.com/atom/1"
    assert entry.pub_date == "2026-10-17T10:00:00+02:00"
    assert entry.description == "Queues shorten at major hubs."


def test_malformed_documents_never_raise():
    assert parse_feed_items("") == []
    assert parse_feed_items("<rss><item><title>unterminated") == []
    items = parse_feed_items("<item><title>A & B <unclosed</title><link>x</link></item>")
    assert len(items) == 1
    assert items[0].link == "x"


def test_parse_pub_date_formats():
    assert parse_pub_date("Sat, 17 Oct 2026 08:00:00 GMT") == datetime(2026, 10, 17, 8, tzinfo=timezone.utc)
    assert parse_pub_date("2026-10-17T09:30:00Z") == datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)
    assert parse_pub_date("2026-10-17T09:30:00") == datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)
    assert parse_pub_date("") is None
    assert parse_pub_date("yesterday-ish") is None
    assert parse_pub_date("Sat, 17 Oct 99999999999999999999 08:00:00 GMT") is None
    assert parse_pub_date("99999999999-10-17T09:30:00") is None
