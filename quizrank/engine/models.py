"""Records exchanged between the scoring pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SponsorshipTier(Enum):
    """Promotional status of a broker record."""
    FEATURED_PARTNER = "featured_partner"
    EDITORS_PICK = "editors_pick"
    DEAL_OF_MONTH = "deal_of_month"


class PromotionKind(Enum):
    """Repositioning rule that moved a result."""
    SPONSOR = "sponsor"
    CAMPAIGN = "campaign"


@dataclass
class Broker:
    """A comparison subject, read-only to the engine."""
    slug: str
    name: str
    rating: float | None = None
    sponsorship_tier: str | None = None  # Raw tier string from the broker store
    tagline: str = ""
    affiliate_url: str = ""

    @property
    def is_featured_partner(self) -> bool:
        return self.sponsorship_tier == SponsorshipTier.FEATURED_PARTNER.value


@dataclass(frozen=True)
class CampaignWinner:
    """Broker granted a one-position boost for this invocation."""
    broker_slug: str


@dataclass
class ScoredResult:
    """A ranked candidate. ``broker`` is None when no record matches the slug."""
    slug: str
    broker: Broker | None
    total: float


@dataclass(frozen=True)
class PromotionEvent:
    """A single swap performed by a promotion pass."""
    kind: PromotionKind
    slug: str
    from_index: int
    to_index: int


@dataclass
class QuizOutcome:
    """Everything one scoring invocation produced."""
    answers: list[str]
    results: list[ScoredResult]
    ranked: list[ScoredResult] = field(default_factory=list)  # Natural order, untruncated
    promotions: list[PromotionEvent] = field(default_factory=list)

    def promotion_for(self, slug: str) -> PromotionEvent | None:
        """Return the promotion that put ``slug`` at its final position, if any.

        A promotion later undone by another swap is not reported.
        """
        position = next(
            (i for i, r in enumerate(self.results) if r.slug == slug), None
        )
        for event in reversed(self.promotions):
            if event.slug == slug:
                return event if event.to_index == position else None
        return None
