"""Answer classification and per-broker score calculation.

Maps quiz answer tokens to weight categories, sums a broker's category
weights over the answer set and rescales the sum by star rating.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Union


class WeightCategory(Enum):
    """The six dimensions a broker is scored on."""
    BEGINNER = "beginner"
    LOW_FEE = "low_fee"
    US_SHARES = "us_shares"
    SMSF = "smsf"
    CRYPTO = "crypto"
    ADVANCED = "advanced"


DEFAULT_CATEGORY = WeightCategory.BEGINNER

# Rating at which the multiplier is 1.0
NEUTRAL_RATING = 4.0

# Score change per rating point away from NEUTRAL_RATING
RATING_STEP = 0.1


ANSWER_WEIGHT_MAP: Mapping[str, WeightCategory] = MappingProxyType({
    "crypto": WeightCategory.CRYPTO,
    "trade": WeightCategory.ADVANCED,
    "income": WeightCategory.LOW_FEE,
    "grow": WeightCategory.BEGINNER,
    "beginner": WeightCategory.BEGINNER,
    "intermediate": WeightCategory.LOW_FEE,
    "pro": WeightCategory.ADVANCED,
    "small": WeightCategory.BEGINNER,
    "medium": WeightCategory.LOW_FEE,
    "large": WeightCategory.US_SHARES,
    "whale": WeightCategory.ADVANCED,
    "fees": WeightCategory.LOW_FEE,
    "safety": WeightCategory.BEGINNER,
    "tools": WeightCategory.ADVANCED,
    "simple": WeightCategory.BEGINNER,
})


@dataclass(frozen=True)
class QuizWeights:
    """Per-broker scoring profile, one weight per category."""
    beginner: float = 0
    low_fee: float = 0
    us_shares: float = 0
    smsf: float = 0
    crypto: float = 0
    advanced: float = 0

    def get(self, category: WeightCategory) -> float:
        """Return the weight for a category."""
        return getattr(self, category.value)

    def to_dict(self) -> dict[str, float]:
        return {c.value: self.get(c) for c in WeightCategory}


# Weight records may also arrive as plain mappings keyed by category name
WeightsLike = Union[QuizWeights, Mapping[str, float]]


def classify_answer(answer: str) -> WeightCategory:
    """Map an answer token to its weight category.

    Tokens missing from ANSWER_WEIGHT_MAP fall back to ``beginner``, which
    makes a broker's beginner weight its default relevance score.
    """
    return ANSWER_WEIGHT_MAP.get(answer, DEFAULT_CATEGORY)


def weight_for(weights: WeightsLike, category: WeightCategory) -> float:
    """Look up a category weight, treating missing or null fields as 0."""
    if isinstance(weights, QuizWeights):
        value = weights.get(category)
    else:
        value = weights.get(category.value)
    return value or 0


def compute_base_score(weights: WeightsLike, answers: Iterable[str]) -> float:
    """Sum the category weight of every answer.

    Args:
        weights: Broker weight record
        answers: Answer tokens; repeated categories are additive

    Returns:
        Base score (0 for no answers)
    """
    total: float = 0
    for answer in answers:
        total += weight_for(weights, classify_answer(answer))
    return total


def rating_multiplier(
    rating: float,
    neutral_rating: float = NEUTRAL_RATING,
    step: float = RATING_STEP,
) -> float:
    """Linear, unclamped multiplier: +/- ``step`` per point from neutral."""
    return 1 + (rating - neutral_rating) * step


def adjust_for_rating(
    base: float,
    rating: float | None,
    neutral_rating: float = NEUTRAL_RATING,
    step: float = RATING_STEP,
) -> float:
    """Rescale a base score by star rating.

    A ``None`` rating (unknown broker or unrated record) is treated as the
    neutral rating, leaving the score unchanged.
    """
    if rating is None:
        rating = neutral_rating
    return base * rating_multiplier(rating, neutral_rating, step)
