from __future__ import annotations

from datetime import timedelta

import pytest

from infrastructure.http.session import create_request
from services.cache.core import CacheService
from services.currency_service import CurrencyApiService, Subscription
from tests.fixtures.clock import FakeClock
from tests.fixtures.currencyapi import FakeCurrencyApi


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a deterministic monotonic clock for TTL tests."""

    return FakeClock(1_000.0)


@pytest.fixture
def cache(fake_clock: FakeClock) -> CacheService:
    return CacheService(namespace="tests", monotonic=fake_clock)


@pytest.fixture
def provider() -> FakeCurrencyApi:
    """Offline currencyapi.com recording every outbound request."""

    return FakeCurrencyApi()


@pytest.fixture
def make_service(cache: CacheService, provider: FakeCurrencyApi):
    """Factory building services wired to the fake provider and shared cache."""

    def _make(
        subscription: Subscription = Subscription.FREE,
        *,
        api_key: str = "xxxkeyxxx",
        ttl: timedelta = timedelta(hours=1),
        **kwargs,
    ) -> CurrencyApiService:
        return CurrencyApiService(
            api_key,
            subscription,
            cache=kwargs.pop("cache", cache),
            ttl=ttl,
            http_client=kwargs.pop("http_client", provider),
            request_factory=create_request,
            **kwargs,
        )

    return _make
