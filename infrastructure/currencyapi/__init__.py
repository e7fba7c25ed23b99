"""Adapter pieces for the currencyapi.com v3 API."""

from .fetcher import CACHE_KEY_PREFIX, RateFetcher, RejectedRequest, cache_key_for
from .payload import ExtractedValue, extract_value
from .query import OutboundQuery, QueryOptions, build_query, normalize_symbols

__all__ = [
    "CACHE_KEY_PREFIX",
    "RateFetcher",
    "RejectedRequest",
    "cache_key_for",
    "ExtractedValue",
    "extract_value",
    "OutboundQuery",
    "QueryOptions",
    "build_query",
    "normalize_symbols",
]
