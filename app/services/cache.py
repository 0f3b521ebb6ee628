"""Time-based memoisation of scrape results."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 3_600


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """A cached value and the moment it was produced."""

    timestamp: float
    data: T


class ResponseCache(Generic[T]):
    """Process-wide map of key to value that treats old entries as missing.

    Expired entries are not evicted; the next lookup recomputes and overwrites
    them. Concurrent misses on the same key may both run their producers, in
    which case the last one to finish wins.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def get(self, key: str) -> CacheEntry[T] | None:
        """Return the live entry for ``key``, if any."""

        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self._ttl:
            return None
        return entry

    def set(self, key: str, value: T, *, timestamp: float | None = None) -> None:
        self._entries[key] = CacheEntry(
            timestamp=self._clock() if timestamp is None else timestamp,
            data=value,
        )

    async def get_or_compute(self, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key`` or produce, store and return it.

        Exceptions raised by ``producer`` propagate and nothing is stored.
        """

        now = self._clock()
        entry = self.get(key)
        if entry is not None:
            return entry.data
        value = await producer()
        self.set(key, value, timestamp=now)
        return value

    def clear(self) -> None:
        """Drop every entry so the next reads go back to the network."""

        if self._entries:
            logger.info("Clearing %d cached remote responses", len(self._entries))
        self._entries.clear()
