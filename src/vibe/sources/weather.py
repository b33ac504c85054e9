"""Current weather from Open-Meteo, scored by WMO weather code.

Codes are bucketed into eight tiers by inclusive upper bound. Anything above
the last bound (thunderstorms, 95-99) falls into the storm tier.
"""

import math
from dataclasses import dataclass

from vibe.config import SourceSettings
from vibe.exceptions import SourceUnavailableError
from vibe.models import Location, Signal
from vibe.sources.base import SignalSource
from vibe.sources.cache import TTLCache
from vibe.sources.http import HttpClient


@dataclass(frozen=True)
class WeatherTier:
    max_code: int | None  # inclusive; None = everything above the previous tier
    score: int
    description: str
    icon: str


WEATHER_TIERS: tuple[WeatherTier, ...] = (
    WeatherTier(1, 95, "Strålende sol", "☀️"),
    WeatherTier(3, 80, "Delvis skyet", "⛅"),
    WeatherTier(48, 60, "Skyet/tåke", "🌥️"),
    WeatherTier(57, 45, "Yr", "🌧️"),
    WeatherTier(67, 30, "Regn", "🌧️"),
    WeatherTier(77, 35, "Snø", "❄️"),
    WeatherTier(82, 20, "Kraftig nedbør", "⛈️"),
    WeatherTier(None, 10, "Uvær", "🌪️"),
)


def classify_weather(code: int) -> WeatherTier:
    """Return the tier for a WMO weather code."""
    for tier in WEATHER_TIERS:
        if tier.max_code is None or code <= tier.max_code:
            return tier
    return WEATHER_TIERS[-1]


def format_temperature(celsius: float) -> str:
    """Whole degrees, halves rounded up (-0.5 -> 0, 2.5 -> 3)."""
    return f"{math.floor(celsius + 0.5)}°C"


class WeatherSource(SignalSource):
    """Weather signal keyed by coordinates."""

    name = "weather"
    label = "vær"
    degraded_icon = "🌡️"

    def __init__(
        self, http: HttpClient, cache: TTLCache[Signal], settings: SourceSettings
    ) -> None:
        super().__init__(http, cache)
        self._settings = settings

    def cache_key(self, location: Location) -> str:
        return f"weather_{location.lat}_{location.lon}"

    async def _fetch(self, location: Location) -> Signal:
        data = await self._http.get_json(
            self._settings.weather_url,
            params={
                "latitude": location.lat,
                "longitude": location.lon,
                "current_weather": "true",
                "timezone": "auto",
            },
        )
        try:
            current = data["current_weather"]
            code = int(current["weathercode"])
            temperature = float(current["temperature"])
        except (KeyError, TypeError, ValueError) as e:
            raise SourceUnavailableError(
                f"unexpected weather payload: {e!r}", source=self.name
            ) from e

        tier = classify_weather(code)
        return Signal(
            score=tier.score,
            display=format_temperature(temperature),
            description=tier.description,
            icon=tier.icon,
        )
