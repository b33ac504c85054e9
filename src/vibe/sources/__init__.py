"""External signal sources.

Each source turns one external API into a normalized Signal, consulting the
shared TTLCache first and degrading to a neutral Signal on any failure.
"""

from vibe.sources.base import DEGRADED_SCORE, SignalSource
from vibe.sources.cache import TTLCache
from vibe.sources.energy import EnergySource
from vibe.sources.http import HttpClient
from vibe.sources.market import MarketSource
from vibe.sources.news import NewsSource
from vibe.sources.weather import WeatherSource

__all__ = [
    "DEGRADED_SCORE",
    "EnergySource",
    "HttpClient",
    "MarketSource",
    "NewsSource",
    "SignalSource",
    "TTLCache",
    "WeatherSource",
]
