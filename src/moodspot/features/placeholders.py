"""
Placeholder rating / review count.

OpenStreetMap carries no ratings, so list views get plausible stand-ins drawn from an
injected `random.Random`. They are not measurements; pass a seeded generator when
output has to be reproducible.
"""

from __future__ import annotations

import math
import random

RATING_MIN = 3.5
RATING_SPAN = 1.5
REVIEWS_MIN = 20
REVIEWS_SPAN = 500


def synthesize_rating(rng: random.Random) -> float:
    """Return a rating in [3.5, 5.0], rounded to one decimal."""
    return round(RATING_MIN + rng.random() * RATING_SPAN, 1)


def synthesize_review_count(rng: random.Random) -> int:
    """Return a review count in [20, 520)."""
    return REVIEWS_MIN + math.floor(rng.random() * REVIEWS_SPAN)


def build_rng(seed: int | None) -> random.Random:
    """Seeded generator when `seed` is set, otherwise a freshly seeded one."""
    return random.Random(seed)
