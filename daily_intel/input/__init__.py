"""
Input parsing utilities.

This package contains the tolerant feed extractor and the source list loader.
"""

from .feed_parser import extract_tag_text, parse_feed_items
from .sources import load_sources

__all__ = ["extract_tag_text", "load_sources", "parse_feed_items"]
