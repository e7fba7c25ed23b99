"""Interpretation of currencyapi.com JSON payloads.

Accessors distinguish a missing field (``None``) from a field of the wrong
shape (:class:`ProtocolViolationError`).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date as Date
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from shared.errors import ProtocolViolationError


@dataclass(frozen=True)
class ExtractedValue:
    value: Decimal
    date: Date


def get_object(node: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = node.get(key)
    if value is None:
        return None
    # the provider serializes an empty object as []
    if isinstance(value, list) and not value:
        return None
    if not isinstance(value, Mapping):
        raise ProtocolViolationError(f"Unexpected response: {key!r} is not an object")
    return value


def get_string(node: Mapping[str, Any], key: str) -> Optional[str]:
    value = node.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProtocolViolationError(f"Unexpected response: {key!r} is not a string")
    return value


def get_number(node: Mapping[str, Any], key: str) -> Optional[Decimal]:
    value = node.get(key)
    if value is None:
        return None
    # bool is an int subclass; JSON true/false is never a rate
    if isinstance(value, bool):
        raise ProtocolViolationError(f"Unexpected response: {key!r} is not a number")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ProtocolViolationError(f"Unexpected response: {key!r} is not a number") from exc
        if not number.is_finite():
            raise ProtocolViolationError(f"Unexpected response: {key!r} is not a finite number")
        return number
    raise ProtocolViolationError(f"Unexpected response: {key!r} is not a number")


def parse_timestamp(raw: str) -> Date:
    """Return the date component of an ISO-8601 provider timestamp."""

    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise ProtocolViolationError(f"Unexpected response: invalid last_updated_at {raw!r}") from exc


def extract_value(payload: Mapping[str, Any], quote_currency: str) -> Optional[ExtractedValue]:
    """Return ``data[quote_currency].value`` with its as-of date, or ``None``."""

    data = get_object(payload, "data")
    if data is None:
        return None
    entry = get_object(data, quote_currency)
    if entry is None:
        return None
    value = get_number(entry, "value")
    if value is None:
        return None

    meta = get_object(payload, "meta")
    stamp = get_string(meta, "last_updated_at") if meta is not None else None
    if stamp is None:
        raise ProtocolViolationError("Unexpected response: last_updated_at missing")
    return ExtractedValue(value=value, date=parse_timestamp(stamp))


__all__ = [
    "ExtractedValue",
    "get_object",
    "get_string",
    "get_number",
    "parse_timestamp",
    "extract_value",
]
