"""Day score aggregation.

Provides the weighted composite computation, level bands, and the
Aggregator that holds the working state between fetch cycles.
"""

from vibe.scoring.aggregator import Aggregator
from vibe.scoring.composite import COMPONENTS, LEVEL_BANDS, classify_level, compute_total
from vibe.scoring.models import DayScore, LevelBand, ScoreLevel

__all__ = [
    "COMPONENTS",
    "LEVEL_BANDS",
    "Aggregator",
    "DayScore",
    "LevelBand",
    "ScoreLevel",
    "classify_level",
    "compute_total",
]
