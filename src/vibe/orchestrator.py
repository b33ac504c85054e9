"""Fetch cycle orchestration: fan out to every source, join, aggregate, persist.

Each cycle:
  1. TAG: advance the cycle generation and put the aggregator in loading state
  2. FETCH: run all sources concurrently and wait for every one to settle
  3. DISCARD: drop the results if a newer cycle started meanwhile
  4. AGGREGATE: feed scores (fresh, cached or degraded) to the aggregator
  5. PERSIST: record today's total in the history
  6. REPORT: classify which sources failed

Sources never raise by contract; anything that escapes one anyway is
converted into that source's degraded Signal here, so one failure never
cancels or delays the others.
"""

from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from vibe.exceptions import UnknownLocationError
from vibe.logging import get_logger
from vibe.models import LOCATIONS, Availability, Location, Mood, Signal, find_location
from vibe.scoring.models import DayScore

if TYPE_CHECKING:
    from vibe.data.history import HistoryStore
    from vibe.data.user_settings import SettingsStore
    from vibe.models import HistoryEntry
    from vibe.scoring.aggregator import Aggregator
    from vibe.sources.base import SignalSource
    from vibe.sources.cache import TTLCache

logger = get_logger(__name__)

ALL_UNAVAILABLE_NOTICE = "Ingen data tilgjengelig. Sjekk internettforbindelsen."


def build_notice(failed_labels: list[str], total_sources: int) -> tuple[Availability, str | None]:
    """Classify a cycle's failures and build the user-facing notice."""
    if not failed_labels:
        return Availability.OK, None
    if len(failed_labels) >= total_sources:
        return Availability.UNAVAILABLE, ALL_UNAVAILABLE_NOTICE
    return Availability.PARTIAL, f"Kunne ikke hente: {', '.join(failed_labels)}"


@dataclass
class RefreshResult:
    """Everything presentation needs from one completed fetch cycle."""

    generation: int
    location: Location
    signals: dict[str, Signal]
    day_score: DayScore
    availability: Availability
    failed_sources: list[str]
    notice: str | None

    def to_dict(self) -> dict:
        return {
            "generation": self.generation,
            "location": self.location.to_dict(),
            "signals": {name: signal.to_dict() for name, signal in self.signals.items()},
            "day_score": self.day_score.to_dict(),
            "availability": self.availability.value,
            "failed_sources": list(self.failed_sources),
            "notice": self.notice,
        }


class Orchestrator:
    """Runs fetch cycles and owns the current location and latest result.

    Args:
        sources: One fetcher per source component.
        aggregator: Working score state.
        history: Daily score history.
        user_settings: Persisted location choice.
        cache: Shared signal cache, flushed on location change.
    """

    def __init__(
        self,
        sources: list[SignalSource],
        aggregator: Aggregator,
        history: HistoryStore,
        user_settings: SettingsStore,
        cache: TTLCache[Signal],
    ) -> None:
        self._sources = sources
        self._aggregator = aggregator
        self._history = history
        self._user_settings = user_settings
        self._cache = cache
        self._location = user_settings.get_location()
        self._generation = 0
        self._last_result: RefreshResult | None = None

    @property
    def location(self) -> Location:
        return self._location

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def last_result(self) -> RefreshResult | None:
        return self._last_result

    async def refresh(self) -> RefreshResult | None:
        """Run one fetch cycle.

        Returns:
            The cycle's result, or None if a newer cycle started before this
            one settled (its results are discarded).
        """
        self._generation += 1
        generation = self._generation
        location = self._location
        self._aggregator.begin_loading()

        with structlog.contextvars.bound_contextvars(cycle=generation):
            logger.info("fetch_cycle_started", location=location.id)

            results = await asyncio.gather(
                *(source.fetch(location) for source in self._sources),
                return_exceptions=True,
            )

            signals: dict[str, Signal] = {}
            for source, result in zip(self._sources, results):
                if isinstance(result, BaseException):
                    logger.error(
                        "source_escaped_error",
                        source=source.name,
                        error=repr(result),
                    )
                    result = source.degraded()
                signals[source.name] = result

            if generation != self._generation:
                logger.info(
                    "fetch_cycle_superseded",
                    current_generation=self._generation,
                )
                return None

            self._aggregator.update_signals(signals)
            day_score = self._aggregator.compute()
            self._history.record_today(day_score.total, day_score.mood)

            failed = [source.label for source in self._sources if signals[source.name].error]
            availability, notice = build_notice(failed, len(self._sources))
            if notice is not None:
                logger.warning(
                    "sources_unavailable",
                    availability=availability.value,
                    failed=failed,
                )

            result = RefreshResult(
                generation=generation,
                location=location,
                signals=signals,
                day_score=day_score,
                availability=availability,
                failed_sources=failed,
                notice=notice,
            )
            self._last_result = result
            logger.info(
                "fetch_cycle_completed",
                total=day_score.total,
                availability=availability.value,
            )
            return result

    def set_mood(self, mood: Mood) -> DayScore | None:
        """Apply a new mood and recompute the total if scores are ready.

        Returns:
            The new DayScore, or None while a fetch cycle is outstanding (the
            mood is still applied and used when that cycle completes).
        """
        self._aggregator.set_mood(mood)
        if not self._aggregator.ready:
            logger.debug("mood_set_while_loading", mood=mood.value)
            return None

        day_score = self._aggregator.compute()
        self._history.record_today(day_score.total, day_score.mood)
        if self._last_result is not None:
            self._last_result = dataclasses.replace(self._last_result, day_score=day_score)
        return day_score

    async def change_location(self, location_id: str) -> RefreshResult | None:
        """Switch location, flush the cache, and run a fresh cycle.

        Raises:
            UnknownLocationError: If ``location_id`` is not a configured location.
        """
        location = find_location(location_id)
        if location is None:
            raise UnknownLocationError(f"unknown location: {location_id}")

        self._location = location
        self._user_settings.save_settings(location_id=location.id)
        self._cache.clear()
        logger.info("location_changed", location=location.id, name=location.name)
        return await self.refresh()

    def get_history(self) -> list[HistoryEntry]:
        return self._history.get_history()

    def get_locations(self) -> tuple[Location, ...]:
        return LOCATIONS

    def get_status(self) -> dict:
        """Summary for the status endpoint."""
        return {
            "location": self._location.to_dict(),
            "mood": self._aggregator.mood.value,
            "ready": self._aggregator.ready,
            "generation": self._generation,
            "cached_signals": len(self._cache),
            "last_total": (
                self._last_result.day_score.total if self._last_result is not None else None
            ),
        }
