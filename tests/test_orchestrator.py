"""Tests for the Orchestrator fetch cycle.

Covers the all-settled join, failure classification, history recording,
mood updates, location changes with cache flush, and discarding results of
superseded cycles.
"""

import asyncio
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from conftest import make_signal

from vibe.config import ScoringSettings
from vibe.data.history import HistoryStore
from vibe.data.storage import JsonFileStorage
from vibe.data.user_settings import SettingsStore
from vibe.exceptions import UnknownLocationError
from vibe.models import Availability, Location, Mood, Signal
from vibe.orchestrator import ALL_UNAVAILABLE_NOTICE, Orchestrator, build_notice
from vibe.scoring.aggregator import Aggregator
from vibe.sources.base import SignalSource
from vibe.sources.cache import TTLCache


class StubSource(SignalSource):
    """Source returning a fixed Signal, optionally raising or waiting on a gate."""

    def __init__(
        self,
        name: str,
        label: str,
        cache: TTLCache,
        signal: Signal | None = None,
        raises: BaseException | None = None,
    ) -> None:
        super().__init__(AsyncMock(), cache)
        self.name = name
        self.label = label
        self.degraded_icon = "?"
        self.signal = signal or make_signal(60)
        self.raises = raises
        self.gate: asyncio.Event | None = None
        self.locations: list[Location] = []

    def cache_key(self, location: Location) -> str:
        return f"{self.name}_{location.id}"

    async def _fetch(self, location: Location) -> Signal:
        self.locations.append(location)
        if self.gate is not None:
            await self.gate.wait()
        if self.raises is not None:
            raise self.raises
        return self.signal


class EscapingSource(StubSource):
    """Source that breaks the never-raise contract."""

    async def fetch(self, location: Location) -> Signal:
        raise RuntimeError("escaped")


@pytest.fixture
def storage(tmp_path: Path) -> JsonFileStorage:
    return JsonFileStorage(tmp_path)


@pytest.fixture
def history(storage: JsonFileStorage) -> HistoryStore:
    return HistoryStore(storage, today=lambda: date(2026, 10, 19))


@pytest.fixture
def user_settings(storage: JsonFileStorage) -> SettingsStore:
    return SettingsStore(storage)


@pytest.fixture
def sources(cache: TTLCache) -> list[StubSource]:
    return [
        StubSource("weather", "vær", cache, make_signal(95)),
        StubSource("news", "nyheter", cache, make_signal(71)),
        StubSource("market", "marked", cache, make_signal(27)),
        StubSource("energy", "strøm", cache, make_signal(80)),
    ]


@pytest.fixture
def aggregator() -> Aggregator:
    return Aggregator(ScoringSettings().weights())


@pytest.fixture
def orchestrator(
    sources: list[StubSource],
    aggregator: Aggregator,
    history: HistoryStore,
    user_settings: SettingsStore,
    cache: TTLCache,
) -> Orchestrator:
    return Orchestrator(
        sources=sources,
        aggregator=aggregator,
        history=history,
        user_settings=user_settings,
        cache=cache,
    )


class TestBuildNotice:
    def test_no_failures(self) -> None:
        assert build_notice([], 4) == (Availability.OK, None)

    def test_partial(self) -> None:
        availability, notice = build_notice(["vær", "strøm"], 4)
        assert availability == Availability.PARTIAL
        assert notice == "Kunne ikke hente: vær, strøm"

    def test_all(self) -> None:
        assert build_notice(["a", "b", "c", "d"], 4) == (
            Availability.UNAVAILABLE,
            ALL_UNAVAILABLE_NOTICE,
        )


class TestRefresh:
    @pytest.mark.asyncio
    async def test_successful_cycle(
        self, orchestrator: Orchestrator, history: HistoryStore
    ) -> None:
        result = await orchestrator.refresh()

        assert result is not None
        assert result.generation == 1
        assert result.location.id == "NO1"
        assert result.day_score.total == 63  # 19 + 17.75 + 5.4 + 12 + 9
        assert result.availability == Availability.OK
        assert result.failed_sources == []
        assert result.notice is None
        assert orchestrator.last_result is result

        entries = history.get_history()
        assert len(entries) == 1
        assert entries[0].score == 63
        assert entries[0].mood == Mood.MEH

    @pytest.mark.asyncio
    async def test_partial_failure_does_not_block_others(
        self, orchestrator: Orchestrator, sources: list[StubSource]
    ) -> None:
        sources[0].raises = ConnectionError("no route")
        sources[3].raises = TimeoutError()

        result = await orchestrator.refresh()

        assert result is not None
        assert result.signals["weather"].error is True
        assert result.signals["energy"].error is True
        assert result.signals["news"].score == 71
        assert result.availability == Availability.PARTIAL
        assert result.failed_sources == ["vær", "strøm"]
        assert result.notice == "Kunne ikke hente: vær, strøm"

    @pytest.mark.asyncio
    async def test_all_sources_unavailable(
        self, orchestrator: Orchestrator, sources: list[StubSource]
    ) -> None:
        for source in sources:
            source.raises = ConnectionError("offline")

        result = await orchestrator.refresh()

        assert result is not None
        assert result.availability == Availability.UNAVAILABLE
        assert result.notice == ALL_UNAVAILABLE_NOTICE
        assert result.day_score.total == 49  # neutral 50s with meh mood

    @pytest.mark.asyncio
    async def test_escaped_exception_becomes_degraded(
        self,
        sources: list[StubSource],
        aggregator: Aggregator,
        history: HistoryStore,
        user_settings: SettingsStore,
        cache: TTLCache,
    ) -> None:
        sources[1] = EscapingSource("news", "nyheter", cache)
        orchestrator = Orchestrator(sources, aggregator, history, user_settings, cache)

        result = await orchestrator.refresh()

        assert result is not None
        assert result.signals["news"].error is True
        assert result.signals["news"].score == 50
        assert result.failed_sources == ["nyheter"]

    @pytest.mark.asyncio
    async def test_waits_for_slowest_source(
        self, orchestrator: Orchestrator, sources: list[StubSource], aggregator: Aggregator
    ) -> None:
        gate = asyncio.Event()
        sources[2].gate = gate

        task = asyncio.create_task(orchestrator.refresh())
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert not task.done()
        assert aggregator.ready is False

        gate.set()
        result = await task

        assert result is not None
        assert aggregator.ready is True

    @pytest.mark.asyncio
    async def test_second_cycle_served_from_cache(
        self, orchestrator: Orchestrator, sources: list[StubSource]
    ) -> None:
        await orchestrator.refresh()
        await orchestrator.refresh()

        assert all(len(source.locations) == 1 for source in sources)

    @pytest.mark.asyncio
    async def test_superseded_cycle_discarded(
        self, orchestrator: Orchestrator, sources: list[StubSource], history: HistoryStore
    ) -> None:
        gate = asyncio.Event()
        sources[0].gate = gate

        first = asyncio.create_task(orchestrator.refresh())
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        sources[0].gate = None
        sources[0].signal = make_signal(10)
        second = await orchestrator.refresh()

        gate.set()
        first_result = await first

        assert first_result is None
        assert second is not None
        assert second.generation == 2
        assert orchestrator.last_result is second
        assert history.get_history()[0].score == second.day_score.total


class TestSetMood:
    @pytest.mark.asyncio
    async def test_mood_before_first_cycle_is_deferred(
        self, orchestrator: Orchestrator, history: HistoryStore
    ) -> None:
        assert orchestrator.set_mood(Mood.GREAT) is None
        assert history.get_history() == []

        result = await orchestrator.refresh()

        assert result is not None
        assert result.day_score.mood == Mood.GREAT

    @pytest.mark.asyncio
    async def test_mood_recomputes_and_records(
        self, orchestrator: Orchestrator, history: HistoryStore
    ) -> None:
        await orchestrator.refresh()

        day_score = orchestrator.set_mood(Mood.GREAT)

        assert day_score is not None
        assert day_score.total == 74
        entries = history.get_history()
        assert len(entries) == 1
        assert entries[0].score == 74
        assert entries[0].mood == Mood.GREAT
        assert orchestrator.last_result is not None
        assert orchestrator.last_result.day_score.total == 74


class TestChangeLocation:
    @pytest.mark.asyncio
    async def test_flushes_cache_and_refetches(
        self,
        orchestrator: Orchestrator,
        sources: list[StubSource],
        cache: TTLCache,
        user_settings: SettingsStore,
    ) -> None:
        await orchestrator.refresh()
        assert "weather_NO1" in cache

        result = await orchestrator.change_location("NO5")

        assert result is not None
        assert result.location.name == "Bergen"
        assert orchestrator.location.id == "NO5"
        assert user_settings.get_location().id == "NO5"
        assert "weather_NO1" not in cache
        assert "weather_NO5" in cache
        assert [loc.id for loc in sources[0].locations] == ["NO1", "NO5"]

    @pytest.mark.asyncio
    async def test_unknown_location_rejected(
        self, orchestrator: Orchestrator, user_settings: SettingsStore
    ) -> None:
        with pytest.raises(UnknownLocationError):
            await orchestrator.change_location("XX9")
        assert user_settings.get_settings() == {}

    @pytest.mark.asyncio
    async def test_in_flight_result_does_not_repopulate_cache(
        self, orchestrator: Orchestrator, sources: list[StubSource], cache: TTLCache
    ) -> None:
        gate = asyncio.Event()
        sources[0].gate = gate

        stale = asyncio.create_task(orchestrator.refresh())
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        sources[0].gate = None
        await orchestrator.change_location("NO3")
        gate.set()
        assert await stale is None

        assert "weather_NO1" not in cache
        assert "weather_NO3" in cache

    def test_initial_location_from_settings(
        self,
        sources: list[StubSource],
        aggregator: Aggregator,
        history: HistoryStore,
        user_settings: SettingsStore,
        cache: TTLCache,
    ) -> None:
        user_settings.save_settings(location_id="NO2")
        orchestrator = Orchestrator(sources, aggregator, history, user_settings, cache)
        assert orchestrator.location.name == "Kristiansand"


@pytest.mark.asyncio
async def test_status(orchestrator: Orchestrator) -> None:
    assert orchestrator.get_status()["last_total"] is None

    await orchestrator.refresh()
    status = orchestrator.get_status()

    assert status["ready"] is True
    assert status["generation"] == 1
    assert status["mood"] == "meh"
    assert status["cached_signals"] == 4
    assert status["last_total"] == 63
