"""Outbound query construction for the currencyapi.com v3 endpoints.

Pure functions only: nothing here touches the network or the cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

from domain.requests import (
    CurrentConversionRequest,
    CurrentExchangeRateRequest,
    ExchangeRequest,
    HistoricalConversionRequest,
    HistoricalExchangeRateRequest,
)

BASE_URL = "https://api.currencyapi.com/v3"
LATEST_ENDPOINT = f"{BASE_URL}/latest"
HISTORICAL_ENDPOINT = f"{BASE_URL}/historical"
CONVERT_ENDPOINT = f"{BASE_URL}/convert"


@dataclass(frozen=True)
class QueryOptions:
    """Adapter settings that shape the outbound query."""

    api_key: str
    symbols: Optional[Tuple[str, ...]] = None
    multiconversion: bool = False

    @property
    def currencies(self) -> Optional[str]:
        return ",".join(self.symbols) if self.symbols else None


@dataclass(frozen=True)
class OutboundQuery:
    endpoint: str
    params: Tuple[Tuple[str, str], ...]
    historical: bool
    conversion: bool

    @property
    def url(self) -> str:
        # RFC 3986: every reserved character is escaped, "," included
        return f"{self.endpoint}?{urlencode(self.params, quote_via=quote, safe='')}"


def _compact(params: Dict[str, Optional[str]]) -> Tuple[Tuple[str, str], ...]:
    return tuple((key, value) for key, value in params.items() if value is not None)


def build_rate_query(
    request: CurrentExchangeRateRequest | HistoricalExchangeRateRequest, options: QueryOptions
) -> OutboundQuery:
    params: Dict[str, Optional[str]] = {
        "apikey": options.api_key,
        "base_currency": request.base_currency,
        "currencies": options.currencies,
    }
    if isinstance(request, HistoricalExchangeRateRequest):
        params["date"] = request.date.isoformat()
        return OutboundQuery(HISTORICAL_ENDPOINT, _compact(params), historical=True, conversion=False)
    return OutboundQuery(LATEST_ENDPOINT, _compact(params), historical=False, conversion=False)


def build_conversion_query(
    request: CurrentConversionRequest | HistoricalConversionRequest, options: QueryOptions
) -> OutboundQuery:
    params: Dict[str, Optional[str]] = {
        "apikey": options.api_key,
        "base_currency": request.base_currency,
        "value": format(request.base_amount, "f"),
    }
    if options.multiconversion:
        # every configured symbol (or everything) so later quotes hit the cache
        params["currencies"] = options.currencies
    else:
        params["currencies"] = request.quote_currency
    historical = isinstance(request, HistoricalConversionRequest)
    if historical:
        params["date"] = request.date.isoformat()
    return OutboundQuery(CONVERT_ENDPOINT, _compact(params), historical=historical, conversion=True)


def build_query(request: ExchangeRequest, options: QueryOptions) -> OutboundQuery:
    """Return the outbound query for ``request``.

    Raises:
        TypeError: ``request`` is not one of the four supported variants.
    """

    if isinstance(request, (CurrentExchangeRateRequest, HistoricalExchangeRateRequest)):
        return build_rate_query(request, options)
    if isinstance(request, (CurrentConversionRequest, HistoricalConversionRequest)):
        return build_conversion_query(request, options)
    raise TypeError(f"Cannot build a query for {type(request).__name__}")


def normalize_symbols(symbols: Optional[Sequence[str]]) -> Optional[Tuple[str, ...]]:
    """Upper-case and de-duplicate ``symbols`` keeping their order; empty -> None."""

    if symbols is None:
        return None
    normalized: list[str] = []
    for item in symbols:
        code = str(item or "").strip().upper()
        if code and code not in normalized:
            normalized.append(code)
    return tuple(normalized) or None


__all__ = [
    "BASE_URL",
    "LATEST_ENDPOINT",
    "HISTORICAL_ENDPOINT",
    "CONVERT_ENDPOINT",
    "QueryOptions",
    "OutboundQuery",
    "build_query",
    "build_rate_query",
    "build_conversion_query",
    "normalize_symbols",
]
