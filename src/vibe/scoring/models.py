"""Day score data models.

Weights are Decimal so the weighted sum is exact before rounding.
"""

from dataclasses import dataclass
from enum import Enum

from vibe.models import Mood


class ScoreLevel(str, Enum):
    """Coarse colour band for a day score."""

    BAD = "bad"
    OK = "ok"
    GOOD = "good"


@dataclass(frozen=True)
class LevelBand:
    """One contiguous band of totals: ``below`` is exclusive, None means no upper bound."""

    below: int | None
    level: ScoreLevel
    status: str
    description: str


@dataclass
class DayScore:
    """Composite result of one aggregation."""

    total: int  # 0-100
    level: ScoreLevel
    status: str
    description: str
    mood: Mood
    components: dict[str, int]  # component name -> score that went into the total

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "level": self.level.value,
            "status": self.status,
            "description": self.description,
            "mood": self.mood.value,
            "components": dict(self.components),
        }
