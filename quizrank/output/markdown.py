"""Markdown output formatter for quiz results.

Generates a markdown report suitable for sharing or pasting into a CMS.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from ..engine.models import PromotionKind, QuizOutcome, ScoredResult
from ..engine.ranker import Ranker
from ..engine.scoring import WeightsLike
from ..engine.simulator import SimulationResult

_MD_SPECIAL = re.compile(r'([\\`*_\{\}\[\]()#+\-.!|])')

_PROMOTION_LABELS = {
    PromotionKind.SPONSOR: "featured partner boost",
    PromotionKind.CAMPAIGN: "campaign boost",
}


def _escape_md(text: str) -> str:
    """Escape markdown special characters in user-derived text."""
    return _MD_SPECIAL.sub(r'\\\1', text)


def _display_name(result: ScoredResult) -> str:
    return result.broker.name if result.broker is not None else result.slug


class MarkdownOutput:
    """Markdown output formatter."""

    def __init__(self, ranker: Ranker | None = None):
        self.ranker = ranker or Ranker()

    def generate(
        self,
        outcome: QuizOutcome,
        weights_by_slug: Mapping[str, WeightsLike] | None = None,
        simulation: list[SimulationResult] | None = None,
    ) -> str:
        """Generate full markdown report.

        Args:
            outcome: Result of a quiz scoring run
            weights_by_slug: Weights used for the run; enables score breakdowns
            simulation: Optional weight simulator results

        Returns:
            Markdown formatted string
        """
        sections = [
            self._generate_header(outcome),
            self._generate_results(outcome),
        ]

        if outcome.promotions:
            sections.append(self._generate_promotions(outcome))

        if weights_by_slug is not None and outcome.results:
            sections.append(self._generate_breakdowns(outcome, weights_by_slug))

        if simulation is not None:
            sections.append(self._generate_simulation(simulation))

        sections.append(self._generate_appendix())

        return "\n\n".join(sections)

    def save(
        self,
        outcome: QuizOutcome,
        output_path: str | Path,
        **kwargs
    ) -> None:
        """Save markdown report to file."""
        content = self.generate(outcome, **kwargs)
        Path(output_path).write_text(content, encoding='utf-8')

    def _generate_header(self, outcome: QuizOutcome) -> str:
        """Generate report header."""
        answers = ", ".join(_escape_md(a) for a in outcome.answers) or "_none_"
        return "\n".join([
            "# Broker Quiz Results",
            "",
            f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"**Answers:** {answers}",
            f"**Candidates scored:** {len(outcome.ranked)}",
        ])

    def _generate_results(self, outcome: QuizOutcome) -> str:
        """Generate the ranked results table."""
        lines = ["## Your Best Matches", ""]

        if not outcome.results:
            lines.append("No brokers could be scored.")
            return "\n".join(lines)

        lines.extend([
            "| # | Broker | Score | Rating | Note |",
            "|---|--------|-------|--------|------|",
        ])

        for i, result in enumerate(outcome.results, 1):
            broker = result.broker
            rating = f"{broker.rating:.1f}" if broker and broker.rating is not None else "-"
            promotion = outcome.promotion_for(result.slug)
            note = _PROMOTION_LABELS[promotion.kind] if promotion else ""
            if broker is None:
                note = "broker record not found"
            lines.append(
                f"| {i} | {_escape_md(_display_name(result))} | "
                f"{result.total:.2f} | {rating} | {note} |"
            )

        return "\n".join(lines)

    def _generate_promotions(self, outcome: QuizOutcome) -> str:
        lines = ["## Promotions", ""]
        for event in outcome.promotions:
            lines.append(
                f"- **{_escape_md(event.slug)}** moved from position "
                f"{event.from_index + 1} to {event.to_index + 1} "
                f"({_PROMOTION_LABELS[event.kind]})"
            )
        return "\n".join(lines)

    def _generate_breakdowns(
        self,
        outcome: QuizOutcome,
        weights_by_slug: Mapping[str, WeightsLike],
    ) -> str:
        """Generate per-result score breakdowns."""
        lines = ["## Score Breakdown", ""]

        for result in outcome.results:
            weights = weights_by_slug.get(result.slug)
            if weights is None:
                continue
            breakdown = self.ranker.get_score_breakdown(
                weights, result.broker, outcome.answers
            )

            lines.extend([
                f"### {_escape_md(_display_name(result))}",
                "",
                "| Answer | Category | Weight |",
                "|--------|----------|--------|",
            ])
            for item in breakdown["contributions"]:
                lines.append(
                    f"| {_escape_md(item['answer'])} | {item['category']} | {item['weight']:g} |"
                )

            rating_note = " (assumed)" if breakdown["rating_assumed"] else ""
            lines.extend([
                "",
                f"Base **{breakdown['base']:g}** x rating multiplier "
                f"**{breakdown['multiplier']:.2f}** "
                f"(rating {breakdown['rating']:.1f}{rating_note}) = "
                f"**{breakdown['total']:.2f}**",
                "",
            ])

        return "\n".join(lines)

    def _generate_simulation(self, simulation: list[SimulationResult]) -> str:
        lines = [
            "## Weight Simulation",
            "",
            "| # | Broker | Score |",
            "|---|--------|-------|",
        ]
        for i, sim in enumerate(simulation, 1):
            lines.append(f"| {i} | {_escape_md(sim.slug)} | {sim.score:g} |")
        return "\n".join(lines)

    def _generate_appendix(self) -> str:
        """Generate appendix."""
        config = self.ranker.config
        lines = [
            "## Appendix",
            "",
            "### Scoring Methodology",
            "",
            "Each answer maps to one of six categories (beginner, low fee, US shares, "
            "SMSF, crypto, advanced). A broker's score is the sum of its weights for "
            "the answered categories, multiplied by "
            f"`1 + (rating - {config.neutral_rating:g}) x {config.rating_step:g}`.",
            "",
            "Ties are broken by rating (highest first), then broker name.",
            "",
            "### Promotions",
            "",
            "- **Featured partner:** a featured partner ranked 2nd swaps with 1st",
            "- **Campaign:** a campaign winner ranked "
            f"{config.campaign_window[0] + 1}-{config.campaign_window[1] + 1} "
            "moves up one place",
            "",
        ]
        return "\n".join(lines)
