"""Provider-agnostic exchange requests issued by callers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as Date
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class CurrentExchangeRateRequest:
    """Latest rate of ``quote_currency`` expressed in ``base_currency`` units."""

    base_currency: str
    quote_currency: str


@dataclass(frozen=True)
class HistoricalExchangeRateRequest:
    """Rate of ``quote_currency`` against ``base_currency`` on ``date``."""

    base_currency: str
    quote_currency: str
    date: Date


@dataclass(frozen=True)
class CurrentConversionRequest:
    """Convert ``base_amount`` of ``base_currency`` using the latest data."""

    base_amount: Decimal
    base_currency: str
    quote_currency: str


@dataclass(frozen=True)
class HistoricalConversionRequest:
    """Convert ``base_amount`` of ``base_currency`` as of ``date``."""

    base_amount: Decimal
    base_currency: str
    quote_currency: str
    date: Date


ExchangeRateRequest = Union[CurrentExchangeRateRequest, HistoricalExchangeRateRequest]
ConversionRequest = Union[CurrentConversionRequest, HistoricalConversionRequest]
ExchangeRequest = Union[ExchangeRateRequest, ConversionRequest]

RATE_REQUEST_TYPES = (CurrentExchangeRateRequest, HistoricalExchangeRateRequest)
CONVERSION_REQUEST_TYPES = (CurrentConversionRequest, HistoricalConversionRequest)

__all__ = [
    "CurrentExchangeRateRequest",
    "HistoricalExchangeRateRequest",
    "CurrentConversionRequest",
    "HistoricalConversionRequest",
    "ExchangeRateRequest",
    "ConversionRequest",
    "ExchangeRequest",
    "RATE_REQUEST_TYPES",
    "CONVERSION_REQUEST_TYPES",
]
