#!/usr/bin/env python3
"""
Service layer - Business logic
"""
from .errors import ReservoirError, ReservoirDataUnavailable, ScrapeError, UpstreamError
from .page_fetcher import HttpPageFetcher, PageFetcher, PlaywrightPageFetcher, build_page_fetcher
from .record_normalizer import normalize_rows, parse_number
from .reservoir_cache import CacheEntry, ReservoirCache

__all__ = [
    "ReservoirCache",
    "CacheEntry",
    "PageFetcher",
    "PlaywrightPageFetcher",
    "HttpPageFetcher",
    "build_page_fetcher",
    "normalize_rows",
    "parse_number",
    "ReservoirError",
    "ReservoirDataUnavailable",
    "ScrapeError",
    "UpstreamError",
]
