"""Cache backends usable by the service adapters."""

from __future__ import annotations

from .core import CacheBackend, CacheService, CacheStats, NullCache

__all__ = ["CacheBackend", "CacheService", "CacheStats", "NullCache"]
