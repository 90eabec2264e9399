"""In-process TTL cache.

Owned by whoever constructs it (the component factory in the running
service, a fresh instance per test). Expiry is checked on read, and
expired entries are swept whenever a new one is stored.
"""

import time
from collections.abc import Callable, Hashable
from typing import Any


class TTLCache:
    """Key/value cache with a fixed time-to-live per entry.

    Attributes:
        ttl_seconds: How long an entry stays readable after it was set.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value, evicting it first if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return default

        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return default
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store a value, dropping every entry that has already expired."""
        now = self._clock()
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl_seconds]
        for k in expired:
            del self._entries[k]
        self._entries[key] = (now, value)

    def invalidate(self, key: Hashable) -> bool:
        """Drop one entry. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._entries)


_MISSING = object()
