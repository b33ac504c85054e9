"""Common fetcher contract: cache first, never raise, degrade on failure.

Concrete sources implement ``cache_key`` and ``_fetch``. ``fetch`` wraps them
so that any exception is logged and converted into a degraded Signal with
``error=True`` and a neutral score.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from vibe.logging import get_logger
from vibe.models import Location, Signal

if TYPE_CHECKING:
    from vibe.sources.cache import TTLCache
    from vibe.sources.http import HttpClient

logger = get_logger(__name__)

#: Score reported by a source that could not be reached.
DEGRADED_SCORE = 50


def clamp(value: int, lower: int, upper: int) -> int:
    """Clamp ``value`` into [lower, upper]."""
    return max(lower, min(upper, value))


class SignalSource(ABC):
    """Base class for the four external signal sources.

    Args:
        http: Shared HTTP client.
        cache: Shared signal cache.
    """

    #: Machine name, also the aggregator component name.
    name: str = ""
    #: Short Norwegian label used in failure notices.
    label: str = ""
    #: Icon shown when the source is unavailable.
    degraded_icon: str = ""

    def __init__(self, http: HttpClient, cache: TTLCache[Signal]) -> None:
        self._http = http
        self._cache = cache

    @abstractmethod
    def cache_key(self, location: Location) -> str:
        """Deterministic cache key for this source and location."""
        ...

    @abstractmethod
    async def _fetch(self, location: Location) -> Signal:
        """Call the external source and normalize its response.

        May raise anything; fetch() handles it.
        """
        ...

    async def fetch(self, location: Location) -> Signal:
        """Return this source's Signal for ``location``. Never raises.

        Serves from the cache when possible. Fresh successful results are
        cached unless the cache was cleared while the request was in flight.
        """
        key = self.cache_key(location)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("signal_cache_hit", source=self.name, key=key)
            return cached

        generation = self._cache.generation
        try:
            signal = await self._fetch(location)
        except Exception as e:
            logger.warning(
                "source_fetch_failed",
                source=self.name,
                error=str(e),
                exc_info=True,
            )
            return await self._recover(location)

        self._cache.set(key, signal, generation=generation)
        logger.debug("signal_fetched", source=self.name, score=signal.score)
        return signal

    async def _recover(self, location: Location) -> Signal:
        """Produce a result after the primary request failed. Must not raise."""
        return self.degraded()

    def degraded(self) -> Signal:
        """Neutral placeholder Signal for an unavailable source."""
        return Signal(
            score=DEGRADED_SCORE,
            display="--",
            description="Utilgjengelig",
            icon=self.degraded_icon,
            error=True,
        )
