"""Shared data models for the day score service.

Scores are plain ints in the 0-100 range. Weights and prices use Decimal
so tier boundaries and weighted sums are exact.
"""

import time
from dataclasses import dataclass, field
from enum import Enum


class Mood(str, Enum):
    """User-selected mood category."""

    BAD = "bad"
    MEH = "meh"
    GOOD = "good"
    GREAT = "great"

    @property
    def score(self) -> int:
        return MOOD_SCORES[self]


MOOD_SCORES: dict[Mood, int] = {
    Mood.BAD: 15,
    Mood.MEH: 45,
    Mood.GOOD: 75,
    Mood.GREAT: 100,
}

DEFAULT_MOOD = Mood.MEH


class Availability(str, Enum):
    """How many sources answered in a fetch cycle."""

    OK = "ok"
    PARTIAL = "partial"  # 1-3 sources degraded
    UNAVAILABLE = "unavailable"  # every source degraded


@dataclass(frozen=True)
class Signal:
    """Normalized result of one external source.

    Produced only by a fetcher. Only ``score`` feeds the aggregator; the
    other fields are for presentation.
    """

    score: int  # 0-100
    display: str
    description: str
    icon: str
    error: bool = False
    headlines: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "display": self.display,
            "description": self.description,
            "icon": self.icon,
            "error": self.error,
            "headlines": list(self.headlines),
        }


@dataclass(frozen=True)
class Location:
    """Named geographic point. ``id`` is also the electricity price zone."""

    id: str
    name: str
    lat: float
    lon: float

    @property
    def price_zone(self) -> str:
        return self.id

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "lat": self.lat, "lon": self.lon}


LOCATIONS: tuple[Location, ...] = (
    Location(id="NO1", name="Oslo", lat=59.91, lon=10.75),
    Location(id="NO2", name="Kristiansand", lat=58.15, lon=8.00),
    Location(id="NO3", name="Trondheim", lat=63.43, lon=10.39),
    Location(id="NO4", name="Tromsø", lat=69.65, lon=18.96),
    Location(id="NO5", name="Bergen", lat=60.39, lon=5.32),
)

DEFAULT_LOCATION = LOCATIONS[0]


def find_location(location_id: str | None) -> Location | None:
    """Return the configured location with the given id, or None."""
    for location in LOCATIONS:
        if location.id == location_id:
            return location
    return None


@dataclass
class HistoryEntry:
    """One persisted day score. At most one entry exists per ``date``."""

    date: str  # ISO calendar day, local time
    score: int
    mood: Mood
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "score": self.score,
            "mood": self.mood.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        """Build an entry from its stored form. Raises on missing or invalid fields."""
        return cls(
            date=str(data["date"]),
            score=int(data["score"]),
            mood=Mood(data["mood"]),
            created_at=float(data["created_at"]),
        )
