"""In-memory time-to-live cache shielding the external sources from repeat calls.

Entries expire lazily: a read that finds an entry older than the TTL deletes
it and reports a miss. There is no background sweep.

Methods are synchronous and never suspend, so reads and writes are atomic
with respect to other coroutines on the event loop.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from vibe.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and the clock reading at which it was stored."""

    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """Key/value store with per-entry timestamps and expiry on read.

    Args:
        ttl_seconds: Maximum age of an entry. An entry exactly ``ttl_seconds``
            old is still served.
        clock: Monotonic time source in seconds. Injected by tests.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        """Counter advanced by every clear().

        Writers capture it before starting network I/O and pass it back to
        set(), so results requested before a flush never repopulate the cache.
        """
        return self._generation

    def set(self, key: str, value: T, generation: int | None = None) -> bool:
        """Store a value with the current timestamp, overwriting any prior entry.

        Returns False (and stores nothing) when ``generation`` predates the
        last clear().
        """
        if generation is not None and generation != self._generation:
            logger.debug(
                "cache_write_discarded",
                key=key,
                generation=generation,
                current_generation=self._generation,
            )
            return False
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())
        return True

    def get(self, key: str) -> T | None:
        """Return the cached value, or None if absent or expired.

        Expired entries are removed as a side effect.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > self._ttl:
            del self._entries[key]
            return None
        return entry.value

    def clear(self) -> None:
        """Remove every entry and start a new generation."""
        dropped = len(self._entries)
        self._entries.clear()
        self._generation += 1
        logger.debug("cache_cleared", dropped=dropped, generation=self._generation)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
