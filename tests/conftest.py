"""Shared test fixtures for the day score service."""

from unittest.mock import AsyncMock

import pytest

from vibe.config import SourceSettings
from vibe.models import Location, Signal
from vibe.sources.cache import TTLCache


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_signal(score: int = 60, error: bool = False) -> Signal:
    """Create a minimal Signal for testing."""
    return Signal(
        score=score,
        display="--" if error else str(score),
        description="test",
        icon="*",
        error=error,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache[Signal]:
    """Signal cache with a 300s TTL driven by the fake clock."""
    return TTLCache(ttl_seconds=300.0, clock=clock)


@pytest.fixture
def http() -> AsyncMock:
    """Mock HttpClient; tests set get_json/get_text return values or side effects."""
    client = AsyncMock()
    client.get_json = AsyncMock()
    client.get_text = AsyncMock()
    return client


@pytest.fixture
def source_settings() -> SourceSettings:
    """Source settings with the default public endpoints."""
    return SourceSettings()


@pytest.fixture
def oslo() -> Location:
    return Location(id="NO1", name="Oslo", lat=59.91, lon=10.75)


@pytest.fixture
def bergen() -> Location:
    return Location(id="NO5", name="Bergen", lat=60.39, lon=5.32)
