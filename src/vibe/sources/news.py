"""News mood from NRK top stories, with Reddit r/norge as fallback.

Primary: the NRK RSS feed, fetched through an address-rewriting proxy.
The first ten headlines are matched (case-insensitive substring) against
fixed Norwegian negative and positive keyword lists.

Fallback: the hottest r/norge posts, scored by how far their upvote ratios
sit above 0.5. Fallback results are never cached so the primary feed is
retried on the next cycle.
"""

from urllib.parse import quote
from xml.etree import ElementTree

from vibe.config import SourceSettings
from vibe.exceptions import SourceUnavailableError
from vibe.logging import get_logger
from vibe.models import Location, Signal
from vibe.sources.base import SignalSource, clamp
from vibe.sources.cache import TTLCache
from vibe.sources.http import HttpClient

logger = get_logger(__name__)

NEGATIVE_KEYWORDS: tuple[str, ...] = (
    "krig", "konflikt", "død", "drept", "krise", "ulykke", "angrep",
    "trussel", "frykt", "fare", "katastrofe", "eksplosjon", "skadet",
    "terror", "vold", "brann", "flom", "ras", "dødsfall", "smitte",
)

POSITIVE_KEYWORDS: tuple[str, ...] = (
    "rekord", "seier", "vinner", "gjennombrudd", "fred", "vekst",
    "bedring", "suksess", "glede", "feiring", "reddet", "trygg",
    "fremgang", "avtale", "enighet", "prisvinner",
)

HEADLINE_LIMIT = 10

# Headline scoring: base, per-hit weights, clamp range
_BASE_SCORE = 55
_NEGATIVE_WEIGHT = 6
_POSITIVE_WEIGHT = 8
_MIN_SCORE = 15
_MAX_SCORE = 90

# Fallback scoring
_FALLBACK_MIN_SCORE = 30
_FALLBACK_MAX_SCORE = 75


def count_keywords(headlines: list[str]) -> tuple[int, int]:
    """Return (negative_hits, positive_hits) across the given headlines.

    A keyword counts once per headline it appears in.
    """
    negative = positive = 0
    for headline in headlines:
        title = headline.lower()
        negative += sum(1 for word in NEGATIVE_KEYWORDS if word in title)
        positive += sum(1 for word in POSITIVE_KEYWORDS if word in title)
    return negative, positive


def score_headlines(headlines: list[str]) -> int:
    """Keyword score for a set of headlines, clamped to [15, 90]."""
    negative, positive = count_keywords(headlines)
    score = _BASE_SCORE - negative * _NEGATIVE_WEIGHT + positive * _POSITIVE_WEIGHT
    return clamp(score, _MIN_SCORE, _MAX_SCORE)


def describe_headline_score(score: int) -> tuple[str, str]:
    """Return (display, icon) for a headline score."""
    if score > 65:
        return "Positivt", "📈"
    if score < 40:
        return "Urolig", "📉"
    return "Nøytralt", "📰"


def parse_rss_titles(document: str) -> list[str]:
    """Return the title of every <item> in an RSS document, in feed order.

    Items without a title yield an empty string.
    """
    try:
        root = ElementTree.fromstring(document)
    except ElementTree.ParseError as e:
        raise SourceUnavailableError(f"invalid RSS document: {e}", source="news") from e
    return [(item.findtext("title") or "").strip() for item in root.iter("item")]


def score_upvote_ratios(ratios: list[float | None]) -> int:
    """Fallback score from post upvote ratios, clamped to [30, 75].

    Missing or zero ratios count as a neutral 0.5.
    """
    total = float(_BASE_SCORE)
    for ratio in ratios:
        total += ((ratio or 0.5) - 0.5) * 10
    return clamp(int(total + 0.5), _FALLBACK_MIN_SCORE, _FALLBACK_MAX_SCORE)


class NewsSource(SignalSource):
    """Headline sentiment, independent of location."""

    name = "news"
    label = "nyheter"
    degraded_icon = "📰"

    def __init__(
        self, http: HttpClient, cache: TTLCache[Signal], settings: SourceSettings
    ) -> None:
        super().__init__(http, cache)
        self._settings = settings

    def cache_key(self, location: Location) -> str:
        return "news_nrk"

    def _feed_address(self) -> str:
        feed = self._settings.news_feed_url
        proxy = self._settings.news_proxy_url
        if not proxy:
            return feed
        return proxy + quote(feed, safe="")

    async def _fetch(self, location: Location) -> Signal:
        document = await self._http.get_text(self._feed_address())
        titles = parse_rss_titles(document)
        headlines = titles[:HEADLINE_LIMIT]

        score = score_headlines(headlines)
        display, icon = describe_headline_score(score)
        return Signal(
            score=score,
            display=display,
            description=f"{len(titles)} saker",
            icon=icon,
            headlines=tuple(headlines[:3]),
        )

    async def _recover(self, location: Location) -> Signal:
        logger.info("news_fallback_attempt", url=self._settings.news_fallback_url)
        try:
            data = await self._http.get_json(self._settings.news_fallback_url)
            posts = data["data"]["children"]
            score = score_upvote_ratios(
                [post["data"].get("upvote_ratio") for post in posts]
            )
        except Exception as e:
            logger.warning("news_fallback_failed", error=str(e), exc_info=True)
            return self.degraded()

        return Signal(
            score=score,
            display="OK stemning" if score > 55 else "Blandet",
            description="Reddit r/norge",
            icon="📱",
        )
