"""Electricity spot price from hvakosterstrommen.no for the location's price zone.

The API publishes one JSON array per zone and day, indexed by hour. The
current hour's ``NOK_per_kWh`` is bucketed into five tiers by ascending
exclusive upper bounds.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from zoneinfo import ZoneInfo

from vibe.config import SourceSettings
from vibe.exceptions import SourceUnavailableError
from vibe.models import Location, Signal
from vibe.sources.base import SignalSource
from vibe.sources.cache import TTLCache
from vibe.sources.http import HttpClient


@dataclass(frozen=True)
class PriceTier:
    below: Decimal | None  # exclusive; None = everything from the previous bound up
    score: int
    description: str
    icon: str


PRICE_TIERS: tuple[PriceTier, ...] = (
    PriceTier(Decimal("0.3"), 95, "Veldig lav", "💚"),
    PriceTier(Decimal("0.7"), 80, "Lav", "✅"),
    PriceTier(Decimal("1.5"), 55, "Moderat", "⚡"),
    PriceTier(Decimal("3.0"), 30, "Høy", "💸"),
    PriceTier(None, 10, "Veldig høy", "🔥"),
)


def classify_price(price: Decimal) -> PriceTier:
    """Return the tier for a price in NOK per kWh."""
    for tier in PRICE_TIERS:
        if tier.below is None or price < tier.below:
            return tier
    return PRICE_TIERS[-1]


def format_price(price: Decimal) -> str:
    """Two decimals with unit suffix, e.g. ``1.23 kr/kWh``."""
    return f"{price.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)} kr/kWh"


def price_path(moment: datetime, zone: str) -> str:
    """Path component for a zone's daily price file, e.g. ``2026/10-19_NO1.json``."""
    return f"{moment.year}/{moment.month:02d}-{moment.day:02d}_{zone}.json"


class EnergySource(SignalSource):
    """Current-hour electricity price for a price zone.

    Args:
        now: Returns the current local time. Defaults to the wall clock in
            the configured timezone; injected by tests.
    """

    name = "energy"
    label = "strøm"
    degraded_icon = "⚡"

    def __init__(
        self,
        http: HttpClient,
        cache: TTLCache[Signal],
        settings: SourceSettings,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(http, cache)
        self._settings = settings
        tz = ZoneInfo(settings.timezone)
        self._now = now or (lambda: datetime.now(tz))

    def cache_key(self, location: Location) -> str:
        return f"energy_{location.price_zone}"

    async def _fetch(self, location: Location) -> Signal:
        moment = self._now()
        base = self._settings.energy_url.rstrip("/")
        prices = await self._http.get_json(
            f"{base}/{price_path(moment, location.price_zone)}"
        )

        try:
            raw = prices[moment.hour]["NOK_per_kWh"]
        except (IndexError, KeyError, TypeError) as e:
            raise SourceUnavailableError(
                f"no price for hour {moment.hour}", source=self.name
            ) from e
        if raw is None:
            raise SourceUnavailableError(
                f"no price for hour {moment.hour}", source=self.name
            )
        try:
            price = Decimal(str(raw))
        except InvalidOperation as e:
            raise SourceUnavailableError(
                f"invalid price {raw!r}", source=self.name
            ) from e

        tier = classify_price(price)
        return Signal(
            score=tier.score,
            display=format_price(price),
            description=tier.description,
            icon=tier.icon,
        )
