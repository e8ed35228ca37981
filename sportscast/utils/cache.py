"""Keyed TTL cache for provider responses.

Replaces the repetitive module-level dict pattern:
    _cache = {}  # {key: {"data": ..., "expires": ...}}

Usage:
    cache = TTLCache(default_ttl=300)

    # Read
    data = cache.get("nfl-kc")
    if data is not None:
        return data

    # Write
    data = await fetch()
    cache.put("nfl-kc", data, ttl=3600)

    # Invalidate
    cache.invalidate()            # everything
    cache.invalidate("nfl-kc")    # one key

Entries are replaced wholesale on write and expiry is checked on read;
there is no background eviction.
"""

import time
from typing import Any, Callable, Optional


class TTLCache:
    """Keyed cache with per-entry time-to-live."""

    __slots__ = ("name", "default_ttl", "_entries", "_clock", "hits", "misses")

    def __init__(
        self,
        default_ttl: float,
        name: str = "cache",
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.default_ttl = default_ttl
        self._entries: dict = {}
        self._clock = clock
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        value, expires = entry
        if self._clock() >= expires:
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return value

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value under key for ttl seconds (default_ttl when omitted)."""
        if ttl is None:
            ttl = self.default_ttl
        self._entries[key] = (value, self._clock() + ttl)

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or every entry when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict:
        return {
            "name": self.name,
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
        }
