"""Broker ranking engine.

Ranks brokers by rating-adjusted quiz score with a deterministic tie-break.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .assembler import assemble_results, index_brokers, resolve_broker
from .models import Broker, ScoredResult
from .scoring import (
    NEUTRAL_RATING,
    RATING_STEP,
    WeightsLike,
    adjust_for_rating,
    classify_answer,
    compute_base_score,
    rating_multiplier,
    weight_for,
)


@dataclass
class RankingConfig:
    """Tunables for ranking and promotion."""
    result_limit: int = 3                    # Size of the returned result set
    neutral_rating: float = NEUTRAL_RATING   # Rating assumed for unknown brokers
    rating_step: float = RATING_STEP         # Multiplier change per rating point
    campaign_window: tuple[int, int] = (1, 4)  # Inclusive index range scanned for campaign winners


DEFAULT_CONFIG = RankingConfig()


class Ranker:
    """Scores and orders quiz candidates."""

    def __init__(self, config: RankingConfig | None = None):
        """Initialize ranker.

        Args:
            config: Optional ranking configuration (defaults to DEFAULT_CONFIG)
        """
        self.config = config or DEFAULT_CONFIG

    def rank(
        self,
        weights_by_slug: Mapping[str, WeightsLike],
        brokers: Iterable[Broker],
        answers: Sequence[str],
    ) -> list[ScoredResult]:
        """Rank candidates and keep the top ``result_limit``.

        Args:
            weights_by_slug: Weight record per broker slug; defines the candidates
            brokers: Known broker records
            answers: Quiz answer tokens

        Returns:
            At most ``result_limit`` results, best first
        """
        return assemble_results(
            self.score_all(weights_by_slug, brokers, answers),
            limit=self.config.result_limit,
        )

    def score_all(
        self,
        weights_by_slug: Mapping[str, WeightsLike],
        brokers: Iterable[Broker],
        answers: Sequence[str],
    ) -> list[ScoredResult]:
        """Score every weighted slug and sort without truncating.

        Returns:
            All candidates ordered by total desc, rating desc, name asc, slug asc
        """
        index = index_brokers(brokers)
        answers = list(answers)

        scored = []
        for slug, weights in weights_by_slug.items():
            broker = resolve_broker(index, slug)
            total = self.get_score(weights, broker, answers)
            scored.append(ScoredResult(slug=slug, broker=broker, total=total))

        scored.sort(key=self._sort_key)
        return scored

    def get_score(
        self,
        weights: WeightsLike,
        broker: Broker | None,
        answers: Sequence[str],
    ) -> float:
        """Get the rating-adjusted total for a single candidate."""
        return adjust_for_rating(
            compute_base_score(weights, answers),
            self._effective_rating(broker),
            neutral_rating=self.config.neutral_rating,
            step=self.config.rating_step,
        )

    def get_score_breakdown(
        self,
        weights: WeightsLike,
        broker: Broker | None,
        answers: Sequence[str],
    ) -> dict:
        """Get detailed score breakdown for a candidate.

        Returns:
            Dictionary with per-answer contributions, base score, rating
            used, multiplier and final total
        """
        contributions = []
        for answer in answers:
            category = classify_answer(answer)
            contributions.append({
                "answer": answer,
                "category": category.value,
                "weight": weight_for(weights, category),
            })

        rating = self._effective_rating(broker)
        base = compute_base_score(weights, answers)

        return {
            "contributions": contributions,
            "base": base,
            "rating": rating,
            "rating_assumed": broker is None or broker.rating is None,
            "multiplier": rating_multiplier(
                rating, self.config.neutral_rating, self.config.rating_step
            ),
            "total": self.get_score(weights, broker, answers),
        }

    def _effective_rating(self, broker: Broker | None) -> float:
        if broker is None or broker.rating is None:
            return self.config.neutral_rating
        return broker.rating

    def _sort_key(self, result: ScoredResult) -> tuple[float, float, str, str, str]:
        # Name compares case-insensitively first; slug makes the order total
        name = result.broker.name if result.broker is not None else result.slug
        return (
            -result.total,
            -self._effective_rating(result.broker),
            name.casefold(),
            name,
            result.slug,
        )


def rank_brokers(
    weights_by_slug: Mapping[str, WeightsLike],
    brokers: Iterable[Broker],
    answers: Sequence[str],
    config: RankingConfig | None = None,
) -> list[ScoredResult]:
    """Convenience function to rank with default settings.

    Returns:
        Top results, best first
    """
    ranker = Ranker(config=config)
    return ranker.rank(weights_by_slug, brokers, answers)
