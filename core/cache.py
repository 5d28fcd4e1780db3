"""Small TTL cache, constructed per process and injected where needed."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Generic, TypeVar

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Maps a key to ``(value, expiry)``; one TTL for every entry.

    Expired entries are dropped lazily on read.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[V, float]] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        """Bumped on every invalidation."""
        return self._generation

    def entry(self, key: str) -> tuple[V, float] | None:
        found = self._entries.get(key)
        if found is None:
            return None
        if self._clock() >= found[1]:
            del self._entries[key]
            return None
        return found

    def get(self, key: str) -> V | None:
        found = self.entry(key)
        return found[0] if found else None

    def set(self, key: str, value: V, generation: int | None = None) -> None:
        # A value computed before an invalidation is dropped
        if generation is not None and generation != self._generation:
            return
        self._entries[key] = (value, self._clock() + self._ttl)

    def invalidate(self, key: str | None = None) -> None:
        self._generation += 1
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
