from shared.version import __version__ as _APP_VERSION

from .requests import (
    ConversionRequest,
    CurrentConversionRequest,
    CurrentExchangeRateRequest,
    ExchangeRateRequest,
    ExchangeRequest,
    HistoricalConversionRequest,
    HistoricalExchangeRateRequest,
)
from .responses import ConversionResponse, ErrorResponse, ExchangeRateResponse, ServiceResponse

__version__ = _APP_VERSION

__all__ = [
    "CurrentExchangeRateRequest",
    "HistoricalExchangeRateRequest",
    "CurrentConversionRequest",
    "HistoricalConversionRequest",
    "ExchangeRateRequest",
    "ConversionRequest",
    "ExchangeRequest",
    "ExchangeRateResponse",
    "ConversionResponse",
    "ErrorResponse",
    "ServiceResponse",
    "__version__",
]
