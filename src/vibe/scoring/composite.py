"""Weighted aggregation of component scores into the day score.

Combines the four source scores and the mood score into a single total:

    total = round_half_up(sum(weights[name] * scores[name]))

and maps the total onto four contiguous level bands (< 35, < 55, < 75, rest).
"""

from decimal import ROUND_HALF_UP, Decimal

from vibe.scoring.models import LevelBand, ScoreLevel

#: Components that make up the total, in display order.
COMPONENTS: tuple[str, ...] = ("weather", "news", "market", "energy", "mood")

LEVEL_BANDS: tuple[LevelBand, ...] = (
    LevelBand(
        35,
        ScoreLevel.BAD,
        "En tøff dag",
        "Mye motvind i dag. Ta vare på deg selv og fokuser på det positive.",
    ),
    LevelBand(
        55,
        ScoreLevel.OK,
        "En helt grei dag",
        "Dagen har sine opp- og nedturer. Det meste går sin gang.",
    ),
    LevelBand(
        75,
        ScoreLevel.OK,
        "En fin dag",
        "Ting ser bra ut! Nyt dagen og gjør noe hyggelig.",
    ),
    LevelBand(
        None,
        ScoreLevel.GOOD,
        "En fantastisk dag!",
        "Alt ligger til rette for en super dag. Grip mulighetene!",
    ),
)


def compute_total(scores: dict[str, int], weights: dict[str, Decimal]) -> int:
    """Compute the weighted day score.

    Args:
        scores: Component name -> score (0-100). Must contain every key of COMPONENTS.
        weights: Component name -> weight. Expected to sum to 1.0.

    Returns:
        Weighted sum rounded half up to an int. In [0, 100] when the
        weights sum to 1.0 and every score is in range.
    """
    weighted = sum(
        (weights[name] * Decimal(scores[name]) for name in COMPONENTS),
        Decimal("0"),
    )
    return int(weighted.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def classify_level(total: int) -> LevelBand:
    """Return the band containing ``total``."""
    for band in LEVEL_BANDS:
        if band.below is None or total < band.below:
            return band
    return LEVEL_BANDS[-1]


def validate_weights(weights: dict[str, Decimal]) -> None:
    """Raise ValueError unless the weight set covers every component and sums to 1."""
    missing = [name for name in COMPONENTS if name not in weights]
    if missing:
        raise ValueError(f"missing weights for: {', '.join(missing)}")
    total = sum(weights.values(), Decimal("0"))
    if total != Decimal("1"):
        raise ValueError(f"weights must sum to 1.0, got {total}")
