from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from domain.requests import (
    CurrentConversionRequest,
    CurrentExchangeRateRequest,
    HistoricalConversionRequest,
    HistoricalExchangeRateRequest,
)
from domain.responses import ErrorResponse, ExchangeRateResponse
from infrastructure.currencyapi.fetcher import cache_key_for
from infrastructure.currencyapi.query import build_query
from infrastructure.http.session import create_request
from services.cache.core import CacheService, NullCache
from services.currency_service import (
    CurrencyApiService,
    Subscription,
    create_currencyapi_service,
    create_from_settings,
)
from shared.config import Settings
from shared.errors import HttpFailureError, ProtocolViolationError, RequestNotSupportedError
from tests.fixtures.currencyapi import INVALID_KEY, StaticSession


@dataclass(frozen=True)
class CryptoPriceRequest:
    symbol: str


def test_unknown_request_type_is_unsupported_without_io() -> None:
    http = MagicMock()
    cache = MagicMock()
    service = CurrencyApiService(
        "key", Subscription.PAID, cache=cache, http_client=http, request_factory=create_request
    )

    response = service.send(CryptoPriceRequest("BTC"))

    assert isinstance(response, ErrorResponse)
    assert isinstance(response.exception, RequestNotSupportedError)
    assert response.message == f'Unsupported request type: "{CryptoPriceRequest.__module__}.CryptoPriceRequest"'
    assert not http.mock_calls
    assert not cache.mock_calls
    assert service.supports(CryptoPriceRequest("BTC")) is False


@pytest.mark.parametrize(
    "request_",
    [
        CurrentConversionRequest(Decimal("100"), "TRY", "PHP"),
        HistoricalConversionRequest(Decimal("100"), "TRY", "PHP", date(2025, 6, 13)),
    ],
)
def test_conversions_need_paid_subscription(make_service, provider, cache, request_) -> None:
    service = make_service(Subscription.FREE)
    cache.set(cache_key_for("anything"), {"data": {}})

    response = service.send(request_)

    assert isinstance(response, ErrorResponse)
    assert isinstance(response.exception, RequestNotSupportedError)
    assert response.message == (
        f'Unsupported request type: "domain.requests.{type(request_).__name__}"'
    )
    assert not provider.requests
    assert service.supports(request_) is False
    assert make_service(Subscription.PAID).supports(request_) is True


def test_rate_requests_are_supported_on_any_tier(make_service) -> None:
    for tier in Subscription:
        service = make_service(tier)
        assert service.supports(CurrentExchangeRateRequest("EUR", "USD"))
        assert service.supports(HistoricalExchangeRateRequest("EUR", "USD", date(2025, 6, 13)))


def test_invalid_key_raises_and_does_not_populate_cache(make_service, provider, cache) -> None:
    service = make_service(api_key=INVALID_KEY)

    with pytest.raises(HttpFailureError, match="Invalid authentication credentials") as excinfo:
        service.send(CurrentExchangeRateRequest("TRY", "PHP"))

    assert excinfo.value.status_code == 401
    assert INVALID_KEY not in str(excinfo.value)
    assert len(cache) == 0
    assert len(provider.requests) == 1


def test_string_values_and_timestamp_from_provider(cache) -> None:
    body = '{"data": {"USD": {"value": "1.1625"}}, "meta": {"last_updated_at": "2025-07-28T12:00:00Z"}}'
    session = StaticSession([(200, body)])
    service = CurrencyApiService(
        "key", Subscription.FREE, cache=cache, http_client=session, request_factory=create_request
    )

    response = service.send(CurrentExchangeRateRequest("EUR", "USD"))

    assert response == ExchangeRateResponse(Decimal("1.1625"), date(2025, 7, 28))


def test_empty_data_list_is_not_found(cache) -> None:
    session = StaticSession([(200, '{"meta": {"last_updated_at": "2025-07-28T12:00:00Z"}, "data": []}')])
    service = CurrencyApiService(
        "key", Subscription.FREE, cache=cache, http_client=session, request_factory=create_request
    )

    response = service.send(CurrentExchangeRateRequest("EUR", "USD"))

    assert isinstance(response, ErrorResponse)
    assert response.message == "Unable to find exchange rate for EUR/USD"


def test_missing_timestamp_is_raised(cache) -> None:
    session = StaticSession([(200, '{"data": {"USD": {"value": 1.2}}, "meta": {}}')])
    service = CurrencyApiService(
        "key", Subscription.PAID, cache=cache, http_client=session, request_factory=create_request
    )

    with pytest.raises(ProtocolViolationError, match="last_updated_at"):
        service.send(CurrentConversionRequest(Decimal(1), "EUR", "USD"))


def test_empty_payload_is_raised(cache) -> None:
    session = StaticSession([(200, "null")])
    service = CurrencyApiService(
        "key", Subscription.FREE, cache=cache, http_client=session, request_factory=create_request
    )

    with pytest.raises(ProtocolViolationError):
        service.send(CurrentExchangeRateRequest("EUR", "USD"))


def test_null_cache_fetches_every_time(make_service, provider) -> None:
    service = make_service(cache=NullCache())

    service.send(CurrentExchangeRateRequest("EUR", "USD"))
    service.send(CurrentExchangeRateRequest("EUR", "USD"))

    assert len(provider.requests) == 2


def test_cache_expiry_triggers_refetch(make_service, provider, fake_clock) -> None:
    service = make_service(ttl=timedelta(minutes=10))

    service.send(CurrentExchangeRateRequest("EUR", "USD"))
    fake_clock.advance(600)
    service.send(CurrentExchangeRateRequest("EUR", "USD"))

    assert len(provider.requests) == 2


def test_requires_api_key() -> None:
    with pytest.raises(ValueError):
        CurrencyApiService(
            "", Subscription.FREE, cache=NullCache(), http_client=MagicMock(), request_factory=create_request
        )


def test_factory_fills_defaults(provider) -> None:
    service = create_currencyapi_service("key", "paid", symbols=["usd", "eur", "USD"], http_client=provider)

    assert service.subscription is Subscription.PAID
    assert service.symbols == ("USD", "EUR")
    assert service.send(CurrentExchangeRateRequest("EUR", "USD")).rate == Decimal("1.25")


def test_create_from_settings(monkeypatch, provider) -> None:
    monkeypatch.setenv("CURRENCYAPI_API_KEY", "from-env")
    monkeypatch.setenv("CURRENCYAPI_SUBSCRIPTION", "PAID")
    monkeypatch.setenv("CURRENCYAPI_SYMBOLS", "usd,jpy")
    monkeypatch.setenv("CURRENCYAPI_MULTICONVERSION", "true")
    cache = CacheService()

    service = create_from_settings(Settings(), cache=cache, http_client=provider)
    service.send(CurrentConversionRequest(Decimal(2), "EUR", "JPY"))

    assert service.subscription is Subscription.PAID
    assert provider.sent_params[0] == {
        "apikey": "from-env",
        "base_currency": "EUR",
        "value": "2",
        "currencies": "USD,JPY",
    }
    assert len(cache) == 1


def test_create_from_settings_validates(monkeypatch) -> None:
    monkeypatch.delenv("CURRENCYAPI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="CURRENCYAPI_API_KEY"):
        create_from_settings(Settings())

    monkeypatch.setenv("CURRENCYAPI_API_KEY", "k")
    monkeypatch.setenv("CURRENCYAPI_SUBSCRIPTION", "gold")
    with pytest.raises(ValueError, match="gold"):
        create_from_settings(Settings())


def test_fake_provider_keeps_session_params_and_records_queries(make_service, provider) -> None:
    assert provider.params == {}

    make_service().send(CurrentExchangeRateRequest("EUR", "USD"))

    assert provider.params == {}
    assert provider.sent_params == [{"apikey": "xxxkeyxxx", "base_currency": "EUR"}]


def test_dispatch_builds_every_query_through_build_query(make_service, monkeypatch) -> None:
    built = []

    def recording_build_query(request, options):
        query = build_query(request, options)
        built.append((type(request).__name__, query.historical, query.conversion))
        return query

    monkeypatch.setattr("services.currency_service.build_query", recording_build_query)
    service = make_service(Subscription.PAID)

    service.send(CurrentExchangeRateRequest("EUR", "USD"))
    service.send(HistoricalConversionRequest(Decimal(5), "EUR", "USD", date(2025, 6, 13)))

    assert built == [
        ("CurrentExchangeRateRequest", False, False),
        ("HistoricalConversionRequest", True, True),
    ]
