"""Market mood from the alternative.me Fear & Greed index.

The index value (0-100) is the score as-is. The classification string is
only translated for display.
"""

from enum import Enum

from vibe.config import SourceSettings
from vibe.exceptions import SourceUnavailableError
from vibe.models import Location, Signal
from vibe.sources.base import SignalSource
from vibe.sources.cache import TTLCache
from vibe.sources.http import HttpClient


class FearGreedClass(str, Enum):
    """Classification strings published by the index."""

    EXTREME_FEAR = "Extreme Fear"
    FEAR = "Fear"
    NEUTRAL = "Neutral"
    GREED = "Greed"
    EXTREME_GREED = "Extreme Greed"


#: Classification -> (Norwegian label, icon)
CLASSIFICATION_LABELS: dict[FearGreedClass, tuple[str, str]] = {
    FearGreedClass.EXTREME_FEAR: ("Ekstrem frykt", "😨"),
    FearGreedClass.FEAR: ("Frykt", "😟"),
    FearGreedClass.NEUTRAL: ("Nøytral", "😐"),
    FearGreedClass.GREED: ("Grådighet", "😊"),
    FearGreedClass.EXTREME_GREED: ("Ekstrem grådighet", "🤑"),
}

_UNKNOWN_ICON = "📊"


def describe_classification(classification: str) -> tuple[str, str]:
    """Return (display, icon); unknown classifications pass through untranslated."""
    try:
        return CLASSIFICATION_LABELS[FearGreedClass(classification)]
    except ValueError:
        return classification, _UNKNOWN_ICON


class MarketSource(SignalSource):
    """Fear & Greed sentiment, independent of location."""

    name = "market"
    label = "marked"
    degraded_icon = _UNKNOWN_ICON

    def __init__(
        self, http: HttpClient, cache: TTLCache[Signal], settings: SourceSettings
    ) -> None:
        super().__init__(http, cache)
        self._settings = settings

    def cache_key(self, location: Location) -> str:
        return "market"

    async def _fetch(self, location: Location) -> Signal:
        data = await self._http.get_json(self._settings.market_url)
        try:
            latest = data["data"][0]
            value = int(latest["value"])
            classification = str(latest["value_classification"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SourceUnavailableError(
                f"unexpected market payload: {e!r}", source=self.name
            ) from e

        if not 0 <= value <= 100:
            raise SourceUnavailableError(
                f"index value {value} outside 0-100", source=self.name
            )

        display, icon = describe_classification(classification)
        return Signal(
            score=value,
            display=display,
            description=f"Index: {value}/100",
            icon=icon,
        )
