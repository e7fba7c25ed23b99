"""In-memory payload caches and the backend protocol the adapters consume."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, NamedTuple, Optional, Protocol


class CacheBackend(Protocol):
    """Get/set-with-expiry contract. ``ttl`` is in seconds; ``None`` means no expiry."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any, *, ttl: Optional[float] = None) -> Any: ...


class NullCache:
    """Backend that forgets everything; every lookup is a miss."""

    def get(self, key: str, default: Any = None) -> Any:
        return default

    def set(self, key: str, value: Any, *, ttl: Optional[float] = None) -> Any:
        return value


class _Entry(NamedTuple):
    value: Any
    expires_at: Optional[float]


@dataclass(frozen=True)
class CacheStats:
    namespace: str
    entries: int
    hits: int
    misses: int

    @property
    def hit_ratio(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class CacheService:
    """Thread-safe TTL cache keyed by string.

    Expired entries are dropped lazily on lookup, or in bulk through
    :meth:`purge_expired`. A non-positive ``ttl`` stores nothing and evicts
    any previous value under the same key.
    """

    def __init__(
        self,
        *,
        namespace: str | None = None,
        monotonic: Callable[[], float] | None = None,
    ) -> None:
        self._namespace = (namespace or "").strip()
        self._monotonic = monotonic or time.monotonic
        self._lock = Lock()
        self._entries: Dict[str, _Entry] = {}
        self._hits = 0
        self._misses = 0

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else str(key)

    def _alive(self, entry: _Entry, now: float) -> bool:
        return entry.expires_at is None or entry.expires_at > now

    def get(self, key: str, default: Any = None) -> Any:
        full_key = self._key(key)
        with self._lock:
            entry = self._entries.get(full_key)
            if entry is not None and not self._alive(entry, self._monotonic()):
                del self._entries[full_key]
                entry = None
            if entry is None:
                self._misses += 1
                return default
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, *, ttl: Optional[float] = None) -> Any:
        full_key = self._key(key)
        with self._lock:
            if ttl is not None and ttl <= 0:
                self._entries.pop(full_key, None)
                return value
            expires_at = self._monotonic() + float(ttl) if ttl is not None else None
            self._entries[full_key] = _Entry(value, expires_at)
        return value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(self._key(key), None)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""

        with self._lock:
            now = self._monotonic()
            stale = [key for key, entry in self._entries.items() if not self._alive(entry, now)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(self._key(key))
            return entry is not None and self._alive(entry, self._monotonic())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                namespace=self._namespace,
                entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
            )


__all__ = ["CacheBackend", "CacheService", "CacheStats", "NullCache"]
