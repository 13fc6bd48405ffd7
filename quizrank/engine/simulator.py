"""Weight simulator.

Previews how the weight table ranks brokers for a given category emphasis,
without ratings or promotions. Used when tuning weights.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .scoring import WeightCategory, WeightsLike, weight_for

DEFAULT_EMPHASIS: dict[WeightCategory, float] = {
    WeightCategory.BEGINNER: 1,
    WeightCategory.LOW_FEE: 1,
    WeightCategory.US_SHARES: 1,
    WeightCategory.SMSF: 0,
    WeightCategory.CRYPTO: 0,
    WeightCategory.ADVANCED: 0,
}


@dataclass
class SimulationResult:
    slug: str
    score: float


def simulate_weights(
    weights_by_slug: Mapping[str, WeightsLike],
    emphasis: Mapping[WeightCategory, float] | None = None,
    limit: int | None = 5,
) -> list[SimulationResult]:
    """Score each broker as the dot product of its weights and ``emphasis``.

    Args:
        weights_by_slug: Weight record per broker slug
        emphasis: Multiplier per category; missing categories count as 0
        limit: Maximum number of results (None for all)

    Returns:
        Results ordered by score desc, then slug
    """
    if emphasis is None:
        emphasis = DEFAULT_EMPHASIS

    results = []
    for slug, weights in weights_by_slug.items():
        score: float = 0
        for category in WeightCategory:
            score += weight_for(weights, category) * emphasis.get(category, 0)
        results.append(SimulationResult(slug=slug, score=score))

    results.sort(key=lambda r: (-r.score, r.slug))
    if limit is not None:
        results = results[:limit]
    return results
