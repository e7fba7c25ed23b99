"""Entry point for ``python -m tools`` querying currencyapi.com from the shell."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import date
from decimal import Decimal, InvalidOperation

from domain.requests import (
    CurrentConversionRequest,
    CurrentExchangeRateRequest,
    HistoricalConversionRequest,
    HistoricalExchangeRateRequest,
)
from domain.responses import ConversionResponse, ErrorResponse, ExchangeRateResponse
from services.cache.core import CacheService
from services.currency_service import CurrencyApiService, create_from_settings
from shared.config import Settings, configure_logging
from shared.version import PRODUCT_NAME

from . import __version__

LOGGER = logging.getLogger(__name__)


def _parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {raw!r}, expected YYYY-MM-DD") from exc


def _parse_amount(raw: str) -> Decimal:
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"invalid amount {raw!r}") from exc


def _currency(raw: str) -> str:
    return raw.strip().upper()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m tools",
        description="Exchange rates and conversions from currencyapi.com",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{PRODUCT_NAME} {__version__}",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    commands = parser.add_subparsers(dest="command")

    rate = commands.add_parser("rate", help="Exchange rate for a currency pair")
    rate.add_argument("base", type=_currency)
    rate.add_argument("quote", type=_currency)
    rate.add_argument("--date", type=_parse_date, default=None, help="Historical date (YYYY-MM-DD)")

    convert = commands.add_parser("convert", help="Convert an amount (paid subscription)")
    convert.add_argument("amount", type=_parse_amount)
    convert.add_argument("base", type=_currency)
    convert.add_argument("quote", type=_currency)
    convert.add_argument("--date", type=_parse_date, default=None, help="Historical date (YYYY-MM-DD)")
    return parser


def _build_request(parsed: argparse.Namespace) -> object:
    if parsed.command == "rate":
        if parsed.date is not None:
            return HistoricalExchangeRateRequest(parsed.base, parsed.quote, parsed.date)
        return CurrentExchangeRateRequest(parsed.base, parsed.quote)
    if parsed.date is not None:
        return HistoricalConversionRequest(parsed.amount, parsed.base, parsed.quote, parsed.date)
    return CurrentConversionRequest(parsed.amount, parsed.base, parsed.quote)


def build_service() -> CurrencyApiService:
    return create_from_settings(Settings(), cache=CacheService(namespace="cli"))


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    parsed = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(level=parsed.log_level)

    if not parsed.command:
        parser.print_help()
        return 0

    try:
        service = build_service()
    except ValueError as exc:
        parser.error(str(exc))

    request = _build_request(parsed)
    LOGGER.debug("Sending %r", request)
    try:
        response = service.send(request)
    except Exception:
        LOGGER.exception("currencyapi request failed")
        raise

    if isinstance(response, ErrorResponse):
        print(response.message, file=sys.stderr)
        return 1
    if isinstance(response, ExchangeRateResponse):
        print(f"{response.rate} ({response.date.isoformat()})")
    elif isinstance(response, ConversionResponse):
        print(f"{response.amount} ({response.date.isoformat()})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
