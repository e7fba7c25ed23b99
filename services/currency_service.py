"""currencyapi.com implementation of the exchange service contract.

Callers hand over provider-agnostic requests (see :mod:`domain.requests`) and
receive either a typed success response or an :class:`ErrorResponse`.
Transport and protocol faults are raised.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from enum import Enum
from typing import Optional, Sequence

from domain.requests import (
    CONVERSION_REQUEST_TYPES,
    RATE_REQUEST_TYPES,
    ExchangeRequest,
)
from domain.responses import ConversionResponse, ErrorResponse, ExchangeRateResponse
from infrastructure.currencyapi.fetcher import RateFetcher, RejectedRequest
from infrastructure.currencyapi.payload import extract_value
from infrastructure.currencyapi.query import (
    QueryOptions,
    build_query,
    normalize_symbols,
)
from infrastructure.http.session import HttpClient, RequestFactory, build_session, create_request
from services.cache.core import CacheBackend, NullCache
from shared.config import Settings
from shared.errors import (
    ConversionNotPerformedError,
    ExchangeRateNotFoundError,
    RequestNotSupportedError,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=1)


class Subscription(str, Enum):
    FREE = "free"
    PAID = "paid"


class CurrencyApiService:
    """Exchange service backed by https://currencyapi.com."""

    def __init__(
        self,
        api_key: str,
        subscription: Subscription,
        *,
        symbols: Optional[Sequence[str]] = None,
        multiconversion: bool = False,
        cache: CacheBackend,
        ttl: timedelta = DEFAULT_TTL,
        http_client: HttpClient,
        request_factory: RequestFactory,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required to talk with currencyapi")
        self._subscription = Subscription(subscription)
        self._options = QueryOptions(
            api_key=api_key,
            symbols=normalize_symbols(symbols),
            multiconversion=bool(multiconversion),
        )
        self._fetcher = RateFetcher(
            cache=cache,
            ttl=ttl,
            http_client=http_client,
            request_factory=request_factory,
        )

    @property
    def subscription(self) -> Subscription:
        return self._subscription

    @property
    def symbols(self) -> Optional[tuple[str, ...]]:
        return self._options.symbols

    # Public API -----------------------------------------------------------
    def send(self, request: object) -> ExchangeRateResponse | ConversionResponse | ErrorResponse:
        if isinstance(request, RATE_REQUEST_TYPES):
            return self._perform(request)
        if isinstance(request, CONVERSION_REQUEST_TYPES):
            if self._subscription is not Subscription.PAID:
                logger.debug("Conversions need a paid subscription, rejecting %r", request)
                return ErrorResponse(RequestNotSupportedError.from_request(request))
            return self._perform(request)
        return ErrorResponse(RequestNotSupportedError.from_request(request))

    def supports(self, request: object) -> bool:
        if isinstance(request, RATE_REQUEST_TYPES):
            return True
        if isinstance(request, CONVERSION_REQUEST_TYPES):
            return self._subscription is Subscription.PAID
        return False

    # Internal helpers ----------------------------------------------------
    def _perform(self, request: ExchangeRequest) -> ExchangeRateResponse | ConversionResponse | ErrorResponse:
        query = build_query(request, self._options)
        logger.debug(
            "currencyapi %s %s for %s/%s",
            "historical" if query.historical else "latest",
            "conversion" if query.conversion else "rate",
            request.base_currency,
            request.quote_currency,
        )
        not_found = ConversionNotPerformedError if query.conversion else ExchangeRateNotFoundError

        payload = self._fetcher.fetch(query.url)
        if isinstance(payload, RejectedRequest):
            return ErrorResponse(not_found.from_request(request, payload.cause))

        extracted = extract_value(payload, request.quote_currency)
        if extracted is None:
            return ErrorResponse(not_found.from_request(request))
        if query.conversion:
            return ConversionResponse(amount=extracted.value, date=extracted.date)
        return ExchangeRateResponse(rate=extracted.value, date=extracted.date)


def create_currencyapi_service(
    api_key: str,
    subscription: Subscription = Subscription.FREE,
    *,
    symbols: Optional[Sequence[str]] = None,
    multiconversion: bool = False,
    cache: Optional[CacheBackend] = None,
    ttl: timedelta = DEFAULT_TTL,
    http_client: Optional[HttpClient] = None,
    request_factory: Optional[RequestFactory] = None,
    user_agent: Optional[str] = None,
) -> CurrencyApiService:
    """Build a service filling unset collaborators with the defaults."""

    return CurrencyApiService(
        api_key,
        subscription,
        symbols=symbols,
        multiconversion=multiconversion,
        cache=cache if cache is not None else NullCache(),
        ttl=ttl,
        http_client=http_client or build_session(user_agent),
        request_factory=request_factory or create_request,
    )


def create_from_settings(
    config: Settings,
    *,
    cache: Optional[CacheBackend] = None,
    http_client: Optional[HttpClient] = None,
) -> CurrencyApiService:
    """Build a service from :class:`shared.config.Settings`."""

    api_key = config.CURRENCYAPI_API_KEY
    if not api_key:
        raise ValueError("CURRENCYAPI_API_KEY is not configured")
    try:
        subscription = Subscription(config.CURRENCYAPI_SUBSCRIPTION)
    except ValueError as exc:
        raise ValueError(
            f"Unknown CURRENCYAPI_SUBSCRIPTION {config.CURRENCYAPI_SUBSCRIPTION!r}"
        ) from exc

    if http_client is None:
        http_client = build_session(
            config.USER_AGENT,
            retries=config.HTTP_RETRIES,
            backoff=config.HTTP_BACKOFF,
            timeout=config.HTTP_TIMEOUT,
        )
    return create_currencyapi_service(
        api_key,
        subscription,
        symbols=config.CURRENCYAPI_SYMBOLS,
        multiconversion=config.CURRENCYAPI_MULTICONVERSION,
        cache=cache,
        ttl=timedelta(seconds=config.CURRENCYAPI_CACHE_TTL),
        http_client=http_client,
    )


__all__ = [
    "Subscription",
    "CurrencyApiService",
    "create_currencyapi_service",
    "create_from_settings",
    "DEFAULT_TTL",
]
