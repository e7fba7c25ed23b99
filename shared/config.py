"""Runtime configuration (environment, ``.env``, ``config.json``) and logging setup."""

from __future__ import annotations
import os, json, math
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

# Project root (where .env and config.json live)
BASE_DIR = Path(__file__).resolve().parents[1]

# Load .env from the project root, then from the cwd
load_dotenv(BASE_DIR / ".env")
load_dotenv()

DEFAULT_CACHE_TTL_SECONDS = 3600
DEFAULT_HTTP_TIMEOUT = 15.0
DEFAULT_HTTP_BACKOFF = 0.3
_TRUTHY = {"1", "true", "yes", "on"}


def _load_cfg() -> Dict[str, Any]:
    """
    Load the optional config.json from the project root (or cwd). Missing -> {}.
    """
    candidates = [BASE_DIR / "config.json", Path.cwd() / "config.json"]
    for p in candidates:
        try:
            if p.exists():
                return json.loads(p.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.exception("Could not load configuration %s: %s", p, e)
    return {}


class Settings:
    def __init__(self) -> None:
        cfg = _load_cfg()

        # --- Identity / headers ---
        self.USER_AGENT: str | None = os.getenv("USER_AGENT", cfg.get("USER_AGENT"))

        # --- currencyapi.com ---
        self.CURRENCYAPI_API_KEY: str | None = os.getenv(
            "CURRENCYAPI_API_KEY", cfg.get("CURRENCYAPI_API_KEY")
        )
        self.CURRENCYAPI_SUBSCRIPTION: str = str(
            os.getenv("CURRENCYAPI_SUBSCRIPTION", cfg.get("CURRENCYAPI_SUBSCRIPTION", "free"))
        ).strip().lower()
        self.CURRENCYAPI_SYMBOLS: Optional[list[str]] = self._parse_symbols(
            os.getenv("CURRENCYAPI_SYMBOLS", cfg.get("CURRENCYAPI_SYMBOLS"))
        )
        self.CURRENCYAPI_MULTICONVERSION: bool = str(
            os.getenv("CURRENCYAPI_MULTICONVERSION", cfg.get("CURRENCYAPI_MULTICONVERSION", "0"))
        ).lower() in _TRUTHY
        self.CURRENCYAPI_CACHE_TTL: int = self._coerce_non_negative_int(
            os.getenv("CURRENCYAPI_CACHE_TTL", cfg.get("CURRENCYAPI_CACHE_TTL")),
            DEFAULT_CACHE_TTL_SECONDS,
        )

        # --- HTTP transport ---
        self.HTTP_TIMEOUT: float = self._coerce_non_negative_float(
            os.getenv("HTTP_TIMEOUT", cfg.get("HTTP_TIMEOUT")), DEFAULT_HTTP_TIMEOUT
        )
        self.HTTP_RETRIES: int = self._coerce_non_negative_int(
            os.getenv("HTTP_RETRIES", cfg.get("HTTP_RETRIES")), 2
        )
        self.HTTP_BACKOFF: float = self._coerce_non_negative_float(
            os.getenv("HTTP_BACKOFF", cfg.get("HTTP_BACKOFF")), DEFAULT_HTTP_BACKOFF
        )

        # --- Logging ---
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", cfg.get("LOG_LEVEL", "INFO"))
        self.LOG_FORMAT: str = os.getenv("LOG_FORMAT", cfg.get("LOG_FORMAT", "plain"))

    @staticmethod
    def _parse_symbols(raw: Any) -> Optional[list[str]]:
        """Accept ``"usd,eur"`` or a JSON list; an empty result means unrestricted."""

        if isinstance(raw, str):
            text = raw.strip()
            if text.startswith("["):
                try:
                    raw = json.loads(text)
                except json.JSONDecodeError:
                    logger.warning("Invalid CURRENCYAPI_SYMBOLS %r, ignoring it", raw)
                    return None
            else:
                raw = text.split(",")
        if not isinstance(raw, (list, tuple)):
            return None
        codes = [str(item).strip().upper() for item in raw if item is not None]
        return list(dict.fromkeys(code for code in codes if code)) or None

    @staticmethod
    def _coerce_non_negative_int(candidate: Any, fallback: int) -> int:
        if candidate is None:
            return fallback
        try:
            value = int(candidate)
        except (TypeError, ValueError):
            logger.warning("Invalid integer setting %r, using %s", candidate, fallback)
            return fallback
        return max(value, 0)

    @staticmethod
    def _coerce_non_negative_float(candidate: Any, fallback: float) -> float:
        if candidate is None:
            return fallback
        try:
            value = float(candidate)
        except (TypeError, ValueError):
            logger.warning("Invalid numeric setting %r, using %s", candidate, fallback)
            return fallback
        if not math.isfinite(value):
            logger.warning("Invalid numeric setting %r, using %s", candidate, fallback)
            return fallback
        return max(value, 0.0)


settings = Settings()

_DATEFMT = "%Y-%m-%d %H:%M:%S"
_PLAIN_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
# Structured fields the HTTP layer passes through ``extra=``
_EXTRA_FIELDS = ("url", "status")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, including known ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                payload[field] = getattr(record, field)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _resolve_level(level: str | None) -> int:
    name = str(level or settings.LOG_LEVEL or "INFO").strip().upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def _resolve_json(json_format: bool | None) -> bool:
    if json_format is not None:
        return json_format
    return str(os.getenv("LOG_FORMAT", settings.LOG_FORMAT)).strip().lower() == "json"


def configure_logging(level: str | None = None, json_format: bool | None = None) -> None:
    """Install a single stderr handler on the root logger.

    ``level`` and ``json_format`` override ``LOG_LEVEL`` / ``LOG_FORMAT``.
    Unknown levels fall back to ``INFO`` and unknown formats to plain text.
    """

    level_value = _resolve_level(level)
    if _resolve_json(json_format):
        formatter: logging.Formatter = JsonFormatter(datefmt=_DATEFMT)
    else:
        formatter = logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_DATEFMT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level_value)

    # urllib3 logs every connection and retry at DEBUG
    logging.getLogger("urllib3").setLevel(max(level_value, logging.WARNING))


__all__ = ["Settings", "settings", "JsonFormatter", "configure_logging", "BASE_DIR"]
