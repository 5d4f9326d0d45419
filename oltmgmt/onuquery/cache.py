"""TTL cache for parsed query results."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    record: T
    captured_at: float


class ResultCache(Generic[T]):
    """Per-(device, key) result cache.

    Expired entries are never returned; they are evicted lazily on lookup.
    ``sweep()`` bounds memory but nothing depends on it being called.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[tuple[str, Hashable], CacheEntry[T]] = {}

    def get(self, device: str, key: Hashable) -> T | None:
        entry = self._entries.get((device, key))
        if entry is None:
            return None
        age = self._clock() - entry.captured_at
        if age >= self.ttl:
            del self._entries[(device, key)]
            return None
        logger.debug(f"[{device}] cache hit for {key!r} (age {age:.1f}s)")
        return entry.record

    def put(self, device: str, key: Hashable, record: T) -> None:
        self._entries[(device, key)] = CacheEntry(record=record, captured_at=self._clock())

    def sweep(self) -> int:
        """Evict all expired entries and return how many were dropped."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.captured_at >= self.ttl]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
