"""Quiz scoring pipeline.

answers + weights + brokers -> ranked list -> promotions -> top results.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from .assembler import assemble_results
from .models import Broker, CampaignWinner, QuizOutcome, ScoredResult
from .promotion import PromotionEngine
from .ranker import Ranker, RankingConfig
from .scoring import WeightsLike

logger = logging.getLogger(__name__)


def _as_winner(item: CampaignWinner | Mapping[str, str]) -> CampaignWinner:
    if isinstance(item, CampaignWinner):
        return item
    return CampaignWinner(broker_slug=item["broker_slug"])


class QuizScorer:
    """Runs the full scoring pipeline for one set of answers."""

    def __init__(self, config: RankingConfig | None = None):
        self.ranker = Ranker(config=config)
        self.config = self.ranker.config
        self.promotions = PromotionEngine(config=self.config)

    def score(
        self,
        answers: Sequence[str],
        weights_by_slug: Mapping[str, WeightsLike],
        brokers: Iterable[Broker],
        campaign_winners: Iterable[CampaignWinner | Mapping[str, str]] | None = None,
    ) -> QuizOutcome:
        """Score, promote and truncate.

        Promotions run on the untruncated ranking so the campaign window can
        reach past the returned result set.

        Args:
            answers: Quiz answer tokens
            weights_by_slug: Weight record per broker slug; defines the candidates
            brokers: Known broker records
            campaign_winners: Optional campaign directives (records or
                ``{"broker_slug": ...}`` mappings)

        Returns:
            QuizOutcome with final results, natural order and promotions
        """
        answers = list(answers)
        winners = [_as_winner(w) for w in campaign_winners or []]

        ranked = self.ranker.score_all(weights_by_slug, brokers, answers)
        boosted, events = self.promotions.apply(ranked, winners)
        results = assemble_results(boosted, limit=self.config.result_limit)

        logger.debug(
            "Scored %d candidates for %d answers; %d promotions applied",
            len(ranked), len(answers), len(events),
        )

        return QuizOutcome(
            answers=answers,
            results=results,
            ranked=ranked,
            promotions=events,
        )


def score_quiz_results(
    answers: Sequence[str],
    weights_by_slug: Mapping[str, WeightsLike],
    brokers: Iterable[Broker],
    campaign_winners: Iterable[CampaignWinner | Mapping[str, str]] | None = None,
) -> list[ScoredResult]:
    """Rank brokers for a set of quiz answers.

    Returns:
        Up to three results, best first
    """
    return QuizScorer().score(
        answers, weights_by_slug, brokers, campaign_winners
    ).results
