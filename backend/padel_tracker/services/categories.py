"""Player categories and their rating equivalents.

Categories run from ``8va`` (beginners) to ``1ra`` (top level). Each one has
a fixed starting rating, used when a player signs up, and a rating band used
to label players once their rating moves with results.
"""

from typing import Optional

CATEGORIES: list[str] = ["8va", "7ma", "6ta", "5ta", "4ta", "3ra", "2da", "1ra"]

CATEGORY_ELO_MAP: dict[str, int] = {
    "8va": 1000,
    "7ma": 1200,
    "6ta": 1400,
    "5ta": 1600,
    "4ta": 1800,
    "3ra": 2000,
    "2da": 2200,
    "1ra": 2400,
}

CATEGORY_LABELS: dict[str, str] = {
    category: f"{category} Categoría" for category in CATEGORIES
}

DEFAULT_CATEGORY = "8va"

# Bands are centred on the starting rating: 7ma covers 1100-1299, etc.
BAND_HALF_WIDTH = 100


def initial_rating(category: str) -> int:
    try:
        return CATEGORY_ELO_MAP[category]
    except KeyError:
        raise ValueError(f"unknown category '{category}'") from None


def category_bounds(category: str) -> tuple[Optional[int], Optional[int]]:
    """Return the inclusive ``(min, max)`` rating band of ``category``.

    The lowest category has no lower bound and the highest no upper bound.
    """

    base = initial_rating(category)
    lower = None if category == CATEGORIES[0] else base - BAND_HALF_WIDTH
    upper = None if category == CATEGORIES[-1] else base + BAND_HALF_WIDTH - 1
    return lower, upper


def category_for_rating(rating: float) -> str:
    for category in reversed(CATEGORIES[1:]):
        lower, _ = category_bounds(category)
        if lower is not None and rating >= lower:
            return category
    return CATEGORIES[0]
