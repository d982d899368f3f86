"""In-memory key/value cache with per-key expiry.

One instance is built at application startup and injected into the region
directory and the price service. It lives for the life of the process and is
never persisted. The key space is bounded by the region taxonomy:

    snapshot                 : the current aggregated Snapshot
    provinces                : canonical province list
    regencies_<province_id>  : regencies of one province
    districts_<regency_id>   : districts of one regency

There is no size-based eviction. Expired entries are dropped lazily when
they are next touched, or in bulk by ``prune()``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from bbm_indonesia.core.models import CacheStats

SNAPSHOT_KEY = "snapshot"
PROVINCES_KEY = "provinces"


def regencies_key(province_id: str) -> str:
    return f"regencies_{province_id}"


def districts_key(regency_id: str) -> str:
    return f"districts_{regency_id}"


@dataclass(frozen=True)
class _Entry:
    value: Any
    expires_at: float | None  # None = never expires


class SnapshotCache:
    """TTL cache keyed by string.

    Parameters
    ----------
    default_ttl : float
        TTL in seconds applied when ``set`` is called without one.
        ``0`` means entries never expire.
    clock : Callable[[], float]
        Monotonic time source. Override in tests to move time forward.
    """

    def __init__(
        self,
        default_ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl < 0:
            raise ValueError("default_ttl must be >= 0")
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key``, or None if absent or expired."""
        entry = self._live_entry(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key``, replacing any previous value whole."""
        ttl = self._default_ttl if ttl is None else ttl
        if ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {ttl}")
        expires_at = self._clock() + ttl if ttl > 0 else None
        self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> int:
        """Remove ``key``. Returns the number of entries removed (0 or 1)."""
        return 1 if self._entries.pop(key, None) is not None else 0

    def has(self, key: str) -> bool:
        """True if ``key`` holds a live value. Does not count as a hit or miss."""
        return self._live_entry(key) is not None

    def ttl(self, key: str) -> float | None:
        """Seconds until ``key`` expires; None if absent or never expiring."""
        entry = self._live_entry(key)
        if entry is None or entry.expires_at is None:
            return None
        return entry.expires_at - self._clock()

    def keys(self) -> list[str]:
        self.prune()
        return list(self._entries.keys())

    def prune(self) -> int:
        """Drop every expired entry. Returns how many were dropped."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if _is_expired(e, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def flush(self) -> None:
        """Remove every entry and reset the counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, keys=len(self.keys()))

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if _is_expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry


def _is_expired(entry: _Entry, now: float) -> bool:
    return entry.expires_at is not None and now >= entry.expires_at
