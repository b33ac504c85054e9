"""Working state of the day score: latest source scores plus the user's mood.

The aggregator starts in a loading state and refuses to compute a total
until a complete set of source results has been delivered. The orchestrator
re-enters the loading state at the start of every fetch cycle, so a total is
never computed against a mix of old and new scores.
"""

from collections.abc import Mapping
from decimal import Decimal

from vibe.exceptions import ScoresNotReadyError
from vibe.logging import get_logger
from vibe.models import DEFAULT_MOOD, Mood, Signal
from vibe.scoring.composite import classify_level, compute_total, validate_weights
from vibe.scoring.models import DayScore
from vibe.sources.base import DEGRADED_SCORE

logger = get_logger(__name__)

SOURCE_COMPONENTS: tuple[str, ...] = ("weather", "news", "market", "energy")


class Aggregator:
    """Combines source scores and mood into a DayScore.

    Args:
        weights: Component name -> weight; must cover every component and sum to 1.
        mood: Initial mood (e.g. today's mood from history).
    """

    def __init__(self, weights: Mapping[str, Decimal], mood: Mood = DEFAULT_MOOD) -> None:
        self._weights = dict(weights)
        validate_weights(self._weights)
        self._scores: dict[str, int] = {name: DEGRADED_SCORE for name in SOURCE_COMPONENTS}
        self._mood = mood
        self._loading = True

    @property
    def ready(self) -> bool:
        """True once every source of the current cycle has settled."""
        return not self._loading

    @property
    def mood(self) -> Mood:
        return self._mood

    def begin_loading(self) -> None:
        """Mark source scores as outstanding until the next update_signals()."""
        self._loading = True

    def set_mood(self, mood: Mood) -> None:
        self._mood = mood

    def update_signals(self, signals: Mapping[str, Signal]) -> None:
        """Take the settled results of a fetch cycle and leave the loading state.

        Args:
            signals: One Signal per source component (degraded ones included).

        Raises:
            ValueError: If a source component is missing.
        """
        missing = [name for name in SOURCE_COMPONENTS if name not in signals]
        if missing:
            raise ValueError(f"missing signals for: {', '.join(missing)}")
        for name in SOURCE_COMPONENTS:
            self._scores[name] = signals[name].score
        self._loading = False

    def scores(self) -> dict[str, int]:
        """Current component scores, mood included."""
        return {**self._scores, "mood": self._mood.score}

    def compute(self) -> DayScore:
        """Compute the day score from the current state.

        Raises:
            ScoresNotReadyError: While a fetch cycle is outstanding.
        """
        if self._loading:
            raise ScoresNotReadyError("source scores are still loading")

        scores = self.scores()
        total = compute_total(scores, self._weights)
        band = classify_level(total)

        logger.info(
            "day_score_computed",
            total=total,
            level=band.level.value,
            mood=self._mood.value,
            **scores,
        )

        return DayScore(
            total=total,
            level=band.level,
            status=band.status,
            description=band.description,
            mood=self._mood,
            components=scores,
        )
