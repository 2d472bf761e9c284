"""Network fetching for feeds and the regulatory publication page."""

from .fetcher import FetchResult, build_client, fetch_feed, fetch_text
from .regulatory import fetch_regulatory_items

__all__ = ["FetchResult", "build_client", "fetch_feed", "fetch_regulatory_items", "fetch_text"]
