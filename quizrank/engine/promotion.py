"""Promotional repositioning of ranked quiz results.

Two independent passes, each at most one swap of adjacent entries:

- sponsor boost: a featured partner in natural 2nd place moves to 1st
- campaign boost: the first campaign winner found in the campaign window
  moves up one position

Scores are never touched; only the order changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import (
    Broker,
    CampaignWinner,
    PromotionEvent,
    PromotionKind,
    ScoredResult,
    SponsorshipTier,
)
from .ranker import DEFAULT_CONFIG, RankingConfig

logger = logging.getLogger(__name__)


# Sort priority per sponsorship tier; lower sorts first
TIER_SORT_ORDER: dict[str, int] = {
    SponsorshipTier.FEATURED_PARTNER.value: 1,
    SponsorshipTier.EDITORS_PICK.value: 2,
    SponsorshipTier.DEAL_OF_MONTH.value: 3,
}

UNSPONSORED_PRIORITY = 99


def get_sponsor_sort_priority(tier: str | None) -> int:
    """Return the sort priority for a sponsorship tier (99 when unsponsored)."""
    if not tier:
        return UNSPONSORED_PRIORITY
    return TIER_SORT_ORDER.get(tier, UNSPONSORED_PRIORITY)


def is_sponsored(broker: Broker) -> bool:
    """Check if a broker has any sponsorship tier."""
    return bool(broker.sponsorship_tier)


def sort_with_sponsorship(brokers: Iterable[Broker]) -> list[Broker]:
    """Sort brokers with sponsored tiers first, then by rating.

    Featured partners come before editor's picks, which come before deals
    of the month; brokers sharing a tier are ordered by rating (highest
    first, unrated last).
    """
    return sorted(
        brokers,
        key=lambda b: (
            get_sponsor_sort_priority(b.sponsorship_tier),
            -(b.rating if b.rating is not None else 0),
        ),
    )


def _swap(results: list[ScoredResult], index: int) -> None:
    results[index - 1], results[index] = results[index], results[index - 1]


class PromotionEngine:
    """Applies the sponsor and campaign boosts to a ranked list."""

    def __init__(self, config: RankingConfig | None = None):
        self.config = config or DEFAULT_CONFIG

    def apply(
        self,
        results: list[ScoredResult],
        campaign_winners: Iterable[CampaignWinner] | None = None,
    ) -> tuple[list[ScoredResult], list[PromotionEvent]]:
        """Run the sponsor pass then the campaign pass.

        Args:
            results: Ranked results, best first (not modified)
            campaign_winners: Optional campaign directives

        Returns:
            Tuple of (reordered copy of results, swaps performed)
        """
        boosted = list(results)
        events = []

        event = self.apply_sponsor_boost(boosted)
        if event is not None:
            events.append(event)

        event = self.apply_campaign_boost(boosted, campaign_winners)
        if event is not None:
            events.append(event)

        return boosted, events

    def apply_sponsor_boost(
        self,
        results: list[ScoredResult],
    ) -> PromotionEvent | None:
        """Swap places 1 and 2 when 2nd place is a featured partner.

        Only natural 2nd place is considered. Mutates ``results`` in place.
        """
        if len(results) < 2:
            return None

        runner_up = results[1]
        if runner_up.broker is None or not runner_up.broker.is_featured_partner:
            return None

        _swap(results, 1)
        logger.debug("Sponsor boost: %s moved from 2nd to 1st", runner_up.slug)
        return PromotionEvent(
            kind=PromotionKind.SPONSOR,
            slug=runner_up.slug,
            from_index=1,
            to_index=0,
        )

    def apply_campaign_boost(
        self,
        results: list[ScoredResult],
        campaign_winners: Iterable[CampaignWinner] | None,
    ) -> PromotionEvent | None:
        """Move the first campaign winner in the window up one position.

        Only entries with a resolved broker qualify. Mutates ``results``
        in place.
        """
        if not campaign_winners:
            return None

        winner_slugs = {w.broker_slug for w in campaign_winners}
        if not winner_slugs:
            return None

        start, end = self.config.campaign_window
        start = max(start, 1)
        end = min(end, len(results) - 1)

        for index in range(start, end + 1):
            entry = results[index]
            if entry.broker is not None and entry.broker.slug in winner_slugs:
                _swap(results, index)
                logger.debug(
                    "Campaign boost: %s moved from index %d to %d",
                    entry.slug, index, index - 1,
                )
                return PromotionEvent(
                    kind=PromotionKind.CAMPAIGN,
                    slug=entry.slug,
                    from_index=index,
                    to_index=index - 1,
                )

        return None
