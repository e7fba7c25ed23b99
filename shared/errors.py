"""Application error hierarchy shared across layers.

Two families live here. Soft errors describe a request the provider could
not satisfy; they are wrapped in :class:`domain.responses.ErrorResponse` and
returned to the caller. Hard errors (:class:`ExternalAPIError` and
subclasses) are raised.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from shared.redact import redact_url

if TYPE_CHECKING:  # pragma: no cover - typing only
    import requests


class AppError(Exception):
    """Base exception for application specific errors."""


class RequestNotSupportedError(AppError):
    """Raised for request types the service cannot handle."""

    def __init__(self, message: str, *, request: object | None = None) -> None:
        super().__init__(message)
        self.request = request

    @classmethod
    def from_request(cls, request: object) -> "RequestNotSupportedError":
        kind = type(request)
        return cls(f'Unsupported request type: "{kind.__module__}.{kind.__qualname__}"', request=request)


class _RequestError(AppError):
    def __init__(
        self,
        message: str,
        *,
        request: object | None = None,
        previous: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.request = request
        self.previous = previous
        if previous is not None:
            self.__cause__ = previous


def _date_suffix(request: Any) -> str:
    date = getattr(request, "date", None)
    return f" on {date.isoformat()}" if date is not None else ""


class ExchangeRateNotFoundError(_RequestError):
    """The provider has no rate for the requested pair (or date)."""

    @classmethod
    def from_request(
        cls, request: Any, previous: BaseException | None = None
    ) -> "ExchangeRateNotFoundError":
        message = (
            f"Unable to find exchange rate for {request.base_currency}/{request.quote_currency}"
            f"{_date_suffix(request)}"
        )
        return cls(message, request=request, previous=previous)


class ConversionNotPerformedError(_RequestError):
    """The provider could not convert the requested amount."""

    @classmethod
    def from_request(
        cls, request: Any, previous: BaseException | None = None
    ) -> "ConversionNotPerformedError":
        amount = format(request.base_amount, "f")
        message = (
            f"Unable to convert {amount} {request.base_currency} to {request.quote_currency}"
            f"{_date_suffix(request)}"
        )
        return cls(message, request=request, previous=previous)


class ExternalAPIError(AppError):
    """Raised when an external API breaks the exchange unexpectedly."""


class HttpFailureError(ExternalAPIError):
    """Non-successful HTTP status received from the provider."""

    def __init__(
        self,
        message: str,
        *,
        request: Any = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.request = request
        self.response = response
        self.status_code: int | None = getattr(response, "status_code", None)

    @classmethod
    def from_response(cls, request: Any, response: "requests.Response") -> "HttpFailureError":
        url = redact_url(str(getattr(request, "url", "") or ""))
        detail = _extract_error_detail(response)
        return cls(
            f"HTTP {response.status_code} from {url}: {detail}",
            request=request,
            response=response,
        )


class ProtocolViolationError(ExternalAPIError):
    """A successful response that does not follow the documented contract."""


def _extract_error_detail(response: "requests.Response") -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, Mapping):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    return response.text or getattr(response, "reason", None) or "unknown error"


__all__ = [
    "AppError",
    "RequestNotSupportedError",
    "ExchangeRateNotFoundError",
    "ConversionNotPerformedError",
    "ExternalAPIError",
    "HttpFailureError",
    "ProtocolViolationError",
]
