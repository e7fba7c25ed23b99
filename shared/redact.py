"""Masking of credentials carried in provider URLs before they reach logs or errors."""

from __future__ import annotations

from typing import Iterable, List, Tuple
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

REDACTED = "***REDACTED***"
SENSITIVE_PARAMS = frozenset({"apikey", "api_key", "api-key", "access_key", "access_token", "token"})


def redact_params(pairs: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Return ``pairs`` with the values of credential parameters replaced."""

    return [(key, REDACTED if key.lower() in SENSITIVE_PARAMS else value) for key, value in pairs]


def redact_url(url: str) -> str:
    """Return ``url`` with credential query parameters masked.

    The rest of the query is re-encoded the way the service encodes it
    (RFC 3986), so a redacted URL differs from the original only in the
    masked values.
    """

    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = redact_params(parse_qsl(parts.query, keep_blank_values=True))
    query = urlencode(pairs, quote_via=quote, safe="*")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


__all__ = ["REDACTED", "SENSITIVE_PARAMS", "redact_params", "redact_url"]
