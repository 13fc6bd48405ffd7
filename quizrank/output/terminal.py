"""Rich terminal output for quiz results.

Provides formatted, color-coded terminal output using the Rich library.
Theme: Catppuccin Mocha (https://catppuccin.com/palette/)
"""

from __future__ import annotations

from collections.abc import Mapping

from rich.align import Align
from rich.box import ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from .. import __version__
from ..engine.models import PromotionKind, QuizOutcome, ScoredResult
from ..engine.ranker import Ranker
from ..engine.scoring import ANSWER_WEIGHT_MAP, DEFAULT_CATEGORY, WeightCategory, WeightsLike
from ..engine.simulator import SimulationResult
from ..loader import QuizQuestion

# Catppuccin Mocha palette (subset)
MOCHA = {
    "mauve": "#cba6f7",
    "red": "#f38ba8",
    "maroon": "#eba0ac",
    "peach": "#fab387",
    "yellow": "#f9e2af",
    "green": "#a6e3a1",
    "teal": "#94e2d5",
    "sapphire": "#74c7ec",
    "blue": "#89b4fa",
    "lavender": "#b4befe",
    "text": "#cdd6f4",
    "subtext1": "#bac2de",
    "subtext0": "#a6adc8",
    "overlay1": "#7f849c",
    "overlay0": "#6c7086",
    "surface2": "#585b70",
    "surface1": "#45475a",
    "surface0": "#313244",
    "crust": "#11111b",
}

MOCHA_THEME = Theme({
    "info": MOCHA["sapphire"],
    "warning": MOCHA["peach"],
    "danger": MOCHA["red"],
    "success": MOCHA["green"],
})

CATEGORY_COLORS = {
    WeightCategory.BEGINNER: MOCHA["green"],
    WeightCategory.LOW_FEE: MOCHA["yellow"],
    WeightCategory.US_SHARES: MOCHA["blue"],
    WeightCategory.SMSF: MOCHA["teal"],
    WeightCategory.CRYPTO: MOCHA["peach"],
    WeightCategory.ADVANCED: MOCHA["mauve"],
}

PROMOTION_BADGES = {
    PromotionKind.SPONSOR: ("FEATURED PARTNER", MOCHA["yellow"]),
    PromotionKind.CAMPAIGN: ("CAMPAIGN", MOCHA["peach"]),
}


# ── Badge / display helpers ──────────────────────────────────────────────


def _rating_badge(rating: float | None) -> Text:
    """Render a star rating as a colored pill, dimmed when unknown."""
    badge = Text()
    if rating is None:
        badge.append(" n/a ", style=MOCHA["overlay1"])
        return badge

    if rating >= 4.5:
        color = MOCHA["green"]
    elif rating >= 4.0:
        color = MOCHA["yellow"]
    else:
        color = MOCHA["peach"]
    badge.append(f" {rating:.1f} ", style=f"bold {MOCHA['crust']} on {color}")
    return badge


def _category_badge(category: WeightCategory) -> Text:
    """Render a category as an inline badge."""
    color = CATEGORY_COLORS.get(category, MOCHA["subtext1"])
    badge = Text()
    badge.append(f" {category.value.upper().replace('_', ' ')} ", style=f"bold {color}")
    return badge


def _display_name(result: ScoredResult) -> str:
    return result.broker.name if result.broker is not None else result.slug


# ── Main output class ────────────────────────────────────────────────────


class TerminalOutput:
    """Rich terminal output formatter."""

    def __init__(
        self,
        console: Console | None = None,
        no_color: bool = False,
        ranker: Ranker | None = None,
    ):
        """Initialize terminal output.

        Args:
            console: Optional Rich console instance
            no_color: If True, disable colored output
            ranker: Ranker used for score breakdowns
        """
        if console:
            self.console = console
        elif no_color:
            self.console = Console(no_color=True, highlight=False)
        else:
            self.console = Console(theme=MOCHA_THEME)

        self.ranker = ranker or Ranker()

    # ── Public API ────────────────────────────────────────────────────

    def print_header(self, outcome: QuizOutcome) -> None:
        """Print the banner and the answers that were scored."""
        self.console.print()
        self.console.print(
            Panel(
                Align.center(
                    Text(
                        f"QUIZRANK v{__version__} - Broker Quiz Results",
                        style=f"bold {MOCHA['mauve']}",
                    )
                ),
                box=ROUNDED,
                border_style=MOCHA["mauve"],
                padding=(0, 1),
            )
        )

        answers_text = Text()
        answers_text.append("Answers: ", style=MOCHA["subtext0"])
        if outcome.answers:
            for answer in outcome.answers:
                category = ANSWER_WEIGHT_MAP.get(answer, DEFAULT_CATEGORY)
                answers_text.append(answer, style=f"bold {MOCHA['text']}")
                answers_text.append_text(_category_badge(category))
                answers_text.append(" ")
        else:
            answers_text.append("none", style=MOCHA["overlay1"])

        answers_text.append("  ")
        answers_text.append(f"{len(outcome.ranked)} brokers scored", style=MOCHA["text"])

        self.console.print(answers_text)
        self.console.print()

    def print_results(self, outcome: QuizOutcome) -> None:
        """Print the final results table."""
        if not outcome.results:
            self.console.print(
                f"[{MOCHA['yellow']}]No brokers could be scored[/{MOCHA['yellow']}]"
            )
            return

        table = Table(box=ROUNDED, border_style=MOCHA["surface1"], expand=False)
        table.add_column("#", justify="right", style=f"bold {MOCHA['lavender']}")
        table.add_column("Broker", style=f"bold {MOCHA['text']}")
        table.add_column("Score", justify="right", style=MOCHA["green"])
        table.add_column("Rating", justify="center")
        table.add_column("Note")

        for i, result in enumerate(outcome.results, 1):
            rating = result.broker.rating if result.broker is not None else None
            table.add_row(
                str(i),
                _display_name(result),
                f"{result.total:.2f}",
                _rating_badge(rating),
                self._build_note(result, outcome),
            )

        title = "BEST MATCH" if len(outcome.results) == 1 else "YOUR BEST MATCHES"
        self.console.print(
            Panel(
                table,
                title=f"[bold {MOCHA['yellow']}]{title}[/bold {MOCHA['yellow']}]",
                title_align="left",
                box=ROUNDED,
                border_style=MOCHA["yellow"],
                padding=(0, 1),
            )
        )

        for event in outcome.promotions:
            label, color = PROMOTION_BADGES[event.kind]
            self.console.print(
                f"[{color}]{label}[/{color}] "
                f"[{MOCHA['subtext0']}]{event.slug} moved from position "
                f"{event.from_index + 1} to {event.to_index + 1}[/{MOCHA['subtext0']}]"
            )
        self.console.print()

    def print_breakdowns(
        self,
        outcome: QuizOutcome,
        weights_by_slug: Mapping[str, WeightsLike],
    ) -> None:
        """Print a score breakdown table for every result."""
        for result in outcome.results:
            weights = weights_by_slug.get(result.slug)
            if weights is None:
                continue
            breakdown = self.ranker.get_score_breakdown(
                weights, result.broker, outcome.answers
            )
            self._print_score_breakdown(_display_name(result), breakdown)

    def print_simulation(self, simulation: list[SimulationResult]) -> None:
        """Print weight simulator results."""
        table = Table(
            title=f"[bold {MOCHA['lavender']}]Weight Simulation[/bold {MOCHA['lavender']}]",
            box=ROUNDED,
            border_style=MOCHA["surface2"],
        )
        table.add_column("#", justify="right", style=MOCHA["subtext0"])
        table.add_column("Broker", style=MOCHA["sapphire"])
        table.add_column("Score", justify="right", style=f"bold {MOCHA['text']}")

        for i, sim in enumerate(simulation, 1):
            table.add_row(str(i), sim.slug, f"{sim.score:g}")

        self.console.print(table)

    def print_answer_map(self, questions: list[QuizQuestion] | None = None) -> None:
        """Print recognized answer tokens and, optionally, the bundled quiz."""
        table = Table(
            title=f"[bold {MOCHA['lavender']}]Answer Tokens[/bold {MOCHA['lavender']}]",
            box=ROUNDED,
            border_style=MOCHA["surface2"],
        )
        table.add_column("Token", style=MOCHA["sapphire"])
        table.add_column("Category")

        for token, category in ANSWER_WEIGHT_MAP.items():
            table.add_row(token, _category_badge(category))
        table.add_section()
        table.add_row(
            Text("anything else", style=MOCHA["overlay1"]),
            _category_badge(DEFAULT_CATEGORY),
        )
        self.console.print(table)

        for i, question in enumerate(questions or [], 1):
            self.console.print()
            self.console.print(f"[bold {MOCHA['text']}]{i}. {question.question}[/bold {MOCHA['text']}]")
            for option in question.options:
                self.console.print(
                    f"   [{MOCHA['sapphire']}]{option.token:<14}[/{MOCHA['sapphire']}]"
                    f"[{MOCHA['subtext0']}]{option.label}[/{MOCHA['subtext0']}]"
                )

    # ── Internals ─────────────────────────────────────────────────────

    def _build_note(self, result: ScoredResult, outcome: QuizOutcome) -> Text:
        note = Text()
        if result.broker is None:
            note.append("broker not found", style=MOCHA["overlay1"])
            return note

        promotion = outcome.promotion_for(result.slug)
        if promotion is not None:
            label, color = PROMOTION_BADGES[promotion.kind]
            note.append(f" {label} ", style=f"bold {MOCHA['crust']} on {color}")
        elif result.broker.is_featured_partner:
            note.append("featured partner", style=MOCHA["yellow"])

        if result.broker.tagline:
            if note.plain:
                note.append("  ")
            note.append(result.broker.tagline, style=MOCHA["subtext0"])
        return note

    def _print_score_breakdown(self, name: str, breakdown: dict) -> None:
        """Print detailed score breakdown."""
        table = Table(
            title=f"[bold {MOCHA['lavender']}]{name}[/bold {MOCHA['lavender']}]",
            box=ROUNDED,
            border_style=MOCHA["surface2"],
        )
        table.add_column("Answer", style=MOCHA["sapphire"])
        table.add_column("Category")
        table.add_column("Weight", justify="right", style=MOCHA["text"])

        for item in breakdown["contributions"]:
            table.add_row(
                item["answer"],
                _category_badge(WeightCategory(item["category"])),
                f"{item['weight']:g}",
            )

        rating_label = f"{breakdown['rating']:.1f}"
        if breakdown["rating_assumed"]:
            rating_label += " (assumed)"

        table.add_section()
        table.add_row("Base", "", f"{breakdown['base']:g}")
        table.add_row(f"Rating {rating_label}", "", f"x{breakdown['multiplier']:.2f}")
        table.add_row(
            f"[bold {MOCHA['text']}]Final Score[/bold {MOCHA['text']}]",
            "",
            f"[bold {MOCHA['green']}]{breakdown['total']:.2f}[/bold {MOCHA['green']}]",
        )

        self.console.print(table)


def print_outcome(
    outcome: QuizOutcome,
    weights_by_slug: Mapping[str, WeightsLike] | None = None,
    no_color: bool = False,
) -> None:
    """Convenience function to print quiz results.

    Args:
        outcome: Result of a quiz scoring run
        weights_by_slug: When given, score breakdowns are printed too
        no_color: Disable colored output
    """
    output = TerminalOutput(no_color=no_color)
    output.print_header(outcome)
    output.print_results(outcome)
    if weights_by_slug is not None:
        output.print_breakdowns(outcome, weights_by_slug)
