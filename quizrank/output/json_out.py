"""JSON output formatter for quiz results.

Generates structured JSON for programmatic use.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from .. import __version__
from ..engine.models import PromotionEvent, QuizOutcome, ScoredResult
from ..engine.ranker import Ranker
from ..engine.scoring import WeightsLike
from ..engine.simulator import SimulationResult


class JSONOutput:
    """JSON output formatter."""

    def __init__(self, ranker: Ranker | None = None):
        self.ranker = ranker or Ranker()

    def generate(
        self,
        outcome: QuizOutcome,
        weights_by_slug: Mapping[str, WeightsLike] | None = None,
        simulation: list[SimulationResult] | None = None,
    ) -> dict:
        """Generate JSON-serializable dictionary.

        Args:
            outcome: Result of a quiz scoring run
            weights_by_slug: Weights used for the run; enables score breakdowns
            simulation: Optional weight simulator results

        Returns:
            Dictionary ready for JSON serialization
        """
        result: dict[str, Any] = {
            "metadata": {
                "generated_at": datetime.now().isoformat(),
                "tool": "quizrank",
                "version": __version__,
                "candidates": len(outcome.ranked),
                "results_count": len(outcome.results),
            },
            "answers": list(outcome.answers),
        }

        result["results"] = [
            self._result_to_dict(r, outcome, weights_by_slug, rank=i)
            for i, r in enumerate(outcome.results, 1)
        ]

        result["natural_order"] = [r.slug for r in outcome.ranked]

        result["promotions"] = [
            self._promotion_to_dict(e) for e in outcome.promotions
        ]

        if simulation is not None:
            result["simulation"] = [
                {"slug": s.slug, "score": s.score} for s in simulation
            ]

        return result

    def to_json(
        self,
        outcome: QuizOutcome,
        indent: int = 2,
        **kwargs
    ) -> str:
        """Generate JSON string.

        Args:
            outcome: Result of a quiz scoring run
            indent: JSON indentation level
            **kwargs: Additional arguments passed to generate()
        """
        data = self.generate(outcome, **kwargs)
        return json.dumps(data, indent=indent, default=str)

    def save(
        self,
        outcome: QuizOutcome,
        output_path: str | Path,
        **kwargs
    ) -> None:
        """Save JSON report to file."""
        content = self.to_json(outcome, **kwargs)
        Path(output_path).write_text(content, encoding='utf-8')

    def _result_to_dict(
        self,
        result: ScoredResult,
        outcome: QuizOutcome,
        weights_by_slug: Mapping[str, WeightsLike] | None,
        rank: int,
    ) -> dict:
        """Convert ScoredResult to dictionary."""
        broker = result.broker
        data: dict[str, Any] = {
            "rank": rank,
            "slug": result.slug,
            "total": result.total,
            "broker": None,
        }

        if broker is not None:
            data["broker"] = {
                "name": broker.name,
                "rating": broker.rating,
                "sponsorship_tier": broker.sponsorship_tier,
                "tagline": broker.tagline,
                "affiliate_url": broker.affiliate_url,
            }

        promotion = outcome.promotion_for(result.slug)
        data["promoted_by"] = promotion.kind.value if promotion else None

        if weights_by_slug is not None and result.slug in weights_by_slug:
            data["breakdown"] = self.ranker.get_score_breakdown(
                weights_by_slug[result.slug], broker, outcome.answers
            )

        return data

    def _promotion_to_dict(self, event: PromotionEvent) -> dict:
        return {
            "kind": event.kind.value,
            "slug": event.slug,
            "from_position": event.from_index + 1,
            "to_position": event.to_index + 1,
        }
