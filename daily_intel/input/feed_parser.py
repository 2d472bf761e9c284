"""
Tolerant item extraction for RSS and Atom feed markup.

Feeds in the wild are frequently not well-formed XML (unescaped ampersands,
undeclared namespaces, stray HTML), so this module matches tags on the
surface with regular expressions instead of running an XML parser. A
missed item is acceptable; a parse failure is not. Nothing in here raises
on malformed input: missing fields resolve to empty strings and the caller
decides what to reject.
"""

from __future__ import annotations

from functools import lru_cache
from html import unescape
import re

from ..core.types import RawFeedItem


# Matches "<item>...</item>" (RSS) and "<entry>...</entry>" (Atom) chunks.
ITEM_RE = re.compile(r"<(item|entry)(?:\s[^>]*)?>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL)
MARKUP_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")
LINK_HREF_RE = re.compile(
    r"<link\b(?=[^>]*\bhref\s*=)([^>]*)/?>", re.IGNORECASE | re.DOTALL
)
HREF_ATTR_RE = re.compile(r"""\bhref\s*=\s*["']([^"']*)["']""", re.IGNORECASE)
REL_ATTR_RE = re.compile(r"""\brel\s*=\s*["']([^"']*)["']""", re.IGNORECASE)

# Equivalent tag names per field, in priority order.
TITLE_TAGS = ("title",)
LINK_TAGS = ("link",)
LINK_FALLBACK_TAGS = ("guid", "id")
DATE_TAGS = ("pubDate", "dc:date", "published", "updated")
DESCRIPTION_TAGS = ("description", "summary", "content:encoded", "content")


@lru_cache(maxsize=None)
def _tag_patterns(tag: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    name = re.escape(tag)
    cdata = re.compile(
        rf"<{name}(?:\s[^>]*)?>\s*<!\[CDATA\[(.*?)\]\]>\s*</{name}\s*>",
        re.IGNORECASE | re.DOTALL,
    )
    plain = re.compile(
        rf"<{name}(?:\s[^>]*)?>(.*?)</{name}\s*>",
        re.IGNORECASE | re.DOTALL,
    )
    return cdata, plain


def strip_markup(text: str) -> str:
    """Remove tags, unescape entities and collapse whitespace."""
    text = MARKUP_RE.sub(" ", text)
    text = unescape(text)
    # Escaped markup ("&lt;p&gt;") only becomes visible after unescaping.
    text = MARKUP_RE.sub(" ", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def extract_tag_text(markup: str, tag: str) -> str:
    """Return the plain-text content of the first ``<tag>`` element.

    A CDATA-wrapped body wins over a raw body and is returned trimmed but
    otherwise untouched. A raw body has nested markup stripped.

    Args:
        markup: Markup chunk to search
        tag: Tag name, optionally namespaced (e.g. "dc:date")

    Returns:
        The extracted text, or "" when the tag is absent
    """
    cdata_re, plain_re = _tag_patterns(tag)
    cdata_match = cdata_re.search(markup)
    if cdata_match:
        return cdata_match.group(1).strip()
    plain_match = plain_re.search(markup)
    if plain_match:
        return strip_markup(plain_match.group(1))
    return ""


def extract_link_href(markup: str) -> str:
    """Return the href of an Atom-style ``<link href="..."/>`` element.

    An ``alternate`` link (or one without ``rel``) is preferred over
    ``self``/``edit`` links.
    """
    fallback = ""
    for match in LINK_HREF_RE.finditer(markup):
        attrs = match.group(1)
        href_match = HREF_ATTR_RE.search(attrs)
        if not href_match:
            continue
        href = unescape(href_match.group(1)).strip()
        if not href:
            continue
        rel_match = REL_ATTR_RE.search(attrs)
        rel = rel_match.group(1).lower() if rel_match else "alternate"
        if rel == "alternate":
            return href
        fallback = fallback or href
    return fallback


def _first_of(markup: str, tags: tuple[str, ...]) -> str:
    for tag in tags:
        value = extract_tag_text(markup, tag)
        if value:
            return value
    return ""


def parse_feed_items(document: str) -> list[RawFeedItem]:
    """Parse every item of a feed document, in document order.

    Args:
        document: Full RSS or Atom document (may be malformed)

    Returns:
        List of RawFeedItem; fields that could not be resolved are empty
    """
    items: list[RawFeedItem] = []
    for match in ITEM_RE.finditer(document or ""):
        chunk = match.group(2)
        link = (
            _first_of(chunk, LINK_TAGS)
            or extract_link_href(chunk)
            or _first_of(chunk, LINK_FALLBACK_TAGS)
        )
        items.append(
            RawFeedItem(
                title=_first_of(chunk, TITLE_TAGS),
                link=link,
                pub_date=_first_of(chunk, DATE_TAGS),
                description=_first_of(chunk, DESCRIPTION_TAGS),
            )
        )
    return items
