"""In-memory keyed cache for datastore query results."""

from __future__ import annotations

import time
from typing import Any, Callable


class KeyedCache:
    """Dict-backed cache with optional per-entry expiry."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._ttl is not None and self._clock() - stored_at > self._ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self, prefix: str | None = None) -> None:
        """Clear all entries, or only those whose key starts with *prefix*."""
        if prefix is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def keys(self) -> list[str]:
        return list(self._entries)

    @property
    def count(self) -> int:
        return len(self._entries)
