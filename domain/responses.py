from __future__ import annotations

from dataclasses import dataclass
from datetime import date as Date
from decimal import Decimal
from typing import Union

from shared.errors import AppError


@dataclass(frozen=True)
class ExchangeRateResponse:
    """Rate returned by the provider and the day it applies to.

    Attributes:
        rate: Units of the quote currency per unit of the base currency.
        date: Date component of the provider's ``last_updated_at`` stamp.
    """

    rate: Decimal
    date: Date


@dataclass(frozen=True)
class ConversionResponse:
    """Converted amount and the day the underlying rate applies to."""

    amount: Decimal
    date: Date


@dataclass(frozen=True)
class ErrorResponse:
    """Soft failure returned instead of raised."""

    exception: AppError

    @property
    def message(self) -> str:
        return str(self.exception)


ServiceResponse = Union[ExchangeRateResponse, ConversionResponse, ErrorResponse]

__all__ = ["ExchangeRateResponse", "ConversionResponse", "ErrorResponse", "ServiceResponse"]
