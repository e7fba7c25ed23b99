"""Cache-aware HTTP retrieval of currencyapi.com payloads."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Union

from infrastructure.http.session import HttpClient, RequestFactory, build_user_agent
from services.cache.core import CacheBackend
from shared.errors import HttpFailureError, ProtocolViolationError
from shared.redact import redact_url

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "currencyapi|"
SERVICE_NAME = "CurrencyAPI"
HTTP_UNPROCESSABLE_ENTITY = 422


@dataclass(frozen=True)
class RejectedRequest:
    """The provider understood the request but refused its content (HTTP 422)."""

    cause: HttpFailureError


FetchResult = Union[Mapping[str, Any], RejectedRequest]


def cache_key_for(url: str) -> str:
    return CACHE_KEY_PREFIX + hashlib.sha1(url.encode("utf-8")).hexdigest()  # nosec B324


class RateFetcher:
    """Return cached or freshly fetched payloads for outbound URLs."""

    def __init__(
        self,
        *,
        cache: CacheBackend,
        ttl: timedelta,
        http_client: HttpClient,
        request_factory: RequestFactory,
    ) -> None:
        self._cache = cache
        self._ttl_seconds = ttl.total_seconds()
        self._http_client = http_client
        self._request_factory = request_factory

    def fetch(self, url: str) -> FetchResult:
        """Return the parsed payload for ``url`` or a :class:`RejectedRequest`.

        Raises:
            HttpFailureError: any status other than 200 and 422.
            ProtocolViolationError: a 200 whose body is not a non-empty JSON object.
        """

        key = cache_key_for(url)
        safe_url = redact_url(url)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("currencyapi cache hit for %s", safe_url, extra={"url": safe_url})
            return cached

        logger.debug("currencyapi cache miss for %s", safe_url, extra={"url": safe_url})
        prepared = self._http_client.prepare_request(self._request_factory("GET", url))
        prepared.headers["User-Agent"] = build_user_agent(
            SERVICE_NAME, existing=prepared.headers.get("User-Agent")
        )
        response = self._http_client.send(prepared)

        status = response.status_code
        if status == HTTP_UNPROCESSABLE_ENTITY:
            logger.info("currencyapi rejected %s", safe_url, extra={"url": safe_url, "status": status})
            return RejectedRequest(HttpFailureError.from_response(prepared, response))
        if status != 200:
            error = HttpFailureError.from_response(prepared, response)
            logger.warning(
                "currencyapi request failed: %s", error, extra={"url": safe_url, "status": status}
            )
            raise error

        payload = self._decode(response)
        self._cache.set(key, payload, ttl=self._ttl_seconds)
        return payload

    @staticmethod
    def _decode(response: Any) -> Mapping[str, Any]:
        try:
            data = response.json(parse_float=Decimal)
        except ValueError as exc:
            raise ProtocolViolationError("Invalid JSON response from currencyapi") from exc
        if not data:
            raise ProtocolViolationError("No rates in the response")
        if not isinstance(data, Mapping):
            raise ProtocolViolationError("Unexpected payload type from currencyapi")
        return data


__all__ = ["RateFetcher", "RejectedRequest", "FetchResult", "cache_key_for", "CACHE_KEY_PREFIX"]
