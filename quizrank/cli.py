"""quizrank CLI - Broker Quiz Scoring Engine.

Command-line interface for scoring quiz answers against broker weights.
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path

from . import __version__
from .engine.quiz import QuizScorer
from .engine.ranker import RankingConfig
from .engine.scoring import WeightCategory
from .engine.simulator import simulate_weights
from .loader import (
    load_brokers,
    load_campaign_winners,
    load_default_brokers,
    load_default_weights,
    load_questions,
    load_weights,
    parse_campaign_winners,
)

_CATEGORY_NAMES = ", ".join(c.value for c in WeightCategory)

_ANSWER_SPLIT_RE = re.compile(r'[\s,]+')


def read_answers(tokens: list[str], stdin_text: str | None = None) -> list[str]:
    """Collect answer tokens from arguments and optional piped text.

    Tokens may be separated by whitespace or commas; empty tokens are
    dropped and case is normalized to lower.
    """
    answers = []
    for chunk in list(tokens) + ([stdin_text] if stdin_text else []):
        for token in _ANSWER_SPLIT_RE.split(chunk):
            token = token.strip().lower()
            if token:
                answers.append(token)
    return answers


def parse_emphasis(emphasis_str: str) -> dict[WeightCategory, float]:
    """Parse ``CAT=N[,CAT=N...]`` into a simulator emphasis mapping.

    Raises:
        argparse.ArgumentTypeError: If a category or number is invalid
    """
    valid = {c.value: c for c in WeightCategory}
    emphasis: dict[WeightCategory, float] = {}
    for part in emphasis_str.split(','):
        part = part.strip()
        if not part:
            continue
        name, sep, value = part.partition('=')
        name = name.strip().lower()
        if not sep or name not in valid:
            raise argparse.ArgumentTypeError(
                f"Invalid emphasis '{part}'. Use CATEGORY=NUMBER with categories: {_CATEGORY_NAMES}"
            )
        try:
            emphasis[valid[name]] = float(value)
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"Invalid number '{value.strip()}' for category '{name}'"
            ) from None
    return emphasis


def _check_file(path: Path | None, label: str) -> str | None:
    """Return an error message if ``path`` is given but unusable."""
    if path is None:
        return None
    if not path.exists():
        return f"{label} file not found: {path}"
    if not path.is_file():
        return f"{label} is not a file: {path}"
    return None


def main(args: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog='quizrank',
        description='Broker Quiz Scoring Engine - Rank brokers for a set of quiz answers',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quizrank beginner grow small simple
  echo "pro trade whale tools" | quizrank
  quizrank crypto --weights weights.json --brokers brokers.json
  quizrank beginner --campaign stake --format json
  quizrank fees --format markdown --output results.md --breakdown
  quizrank --simulate beginner=1,low_fee=2
  quizrank --list-answers
        """
    )

    parser.add_argument(
        'answers',
        nargs='*',
        help='Answer tokens (omit when piping answers via stdin)'
    )

    parser.add_argument(
        '--list-answers',
        action='store_true',
        help='Print the recognized answer tokens and the bundled quiz, then exit'
    )

    parser.add_argument(
        '-w', '--weights',
        type=Path,
        help='Quiz weights JSON file (default: bundled weights)'
    )

    parser.add_argument(
        '-b', '--brokers',
        type=Path,
        help='Broker list JSON file (default: bundled brokers)'
    )

    campaign = parser.add_mutually_exclusive_group()
    campaign.add_argument(
        '--campaign-winners',
        type=Path,
        metavar='FILE',
        help='Campaign winner JSON file'
    )
    campaign.add_argument(
        '--campaign',
        metavar='SLUG[,SLUG...]',
        help='Campaign winner slugs (comma-separated)'
    )

    parser.add_argument(
        '-f', '--format',
        choices=['terminal', 'markdown', 'json'],
        default='terminal',
        help='Output format (default: terminal)'
    )

    parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Output file (markdown and json formats; default: stdout)'
    )

    parser.add_argument(
        '-n', '--limit',
        type=int,
        default=RankingConfig.result_limit,
        help=f'Number of results (and simulation rows) to return (default: {RankingConfig.result_limit})'
    )

    parser.add_argument(
        '--breakdown',
        action='store_true',
        help='Include per-answer score breakdowns'
    )

    parser.add_argument(
        '--simulate',
        metavar='CAT=N[,CAT=N...]',
        help=(
            'Run the weight simulator with the given category emphasis. '
            f'Valid categories: {_CATEGORY_NAMES}'
        )
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output (terminal only)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    if parsed_args.list_answers:
        from .output.terminal import TerminalOutput
        TerminalOutput(no_color=parsed_args.no_color).print_answer_map(load_questions())
        return 0

    if parsed_args.limit < 1:
        print("Error: --limit must be at least 1", file=sys.stderr)
        return 1

    if parsed_args.output and parsed_args.format == 'terminal':
        print("Error: --output requires --format markdown or json", file=sys.stderr)
        return 1

    for path, label in (
        (parsed_args.weights, "Weights"),
        (parsed_args.brokers, "Brokers"),
        (parsed_args.campaign_winners, "Campaign winners"),
    ):
        error = _check_file(path, label)
        if error:
            print(f"Error: {error}", file=sys.stderr)
            return 1

    emphasis = None
    if parsed_args.simulate:
        try:
            emphasis = parse_emphasis(parsed_args.simulate)
        except argparse.ArgumentTypeError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    try:
        stdin_text = None
        if not parsed_args.answers and emphasis is None and not sys.stdin.isatty():
            stdin_text = sys.stdin.read()
        answers = read_answers(parsed_args.answers, stdin_text)

        if parsed_args.verbose:
            print(f"Answers: {', '.join(answers) or '(none)'}", file=sys.stderr)

        weights = (
            load_weights(parsed_args.weights) if parsed_args.weights
            else load_default_weights()
        )
        brokers = (
            load_brokers(parsed_args.brokers) if parsed_args.brokers
            else load_default_brokers()
        )

        winners = []
        if parsed_args.campaign_winners:
            winners = load_campaign_winners(parsed_args.campaign_winners)
        elif parsed_args.campaign:
            winners = parse_campaign_winners(
                [s.strip() for s in parsed_args.campaign.split(',') if s.strip()]
            )

        if parsed_args.verbose:
            print(
                f"Loaded {len(weights)} weight records, {len(brokers)} brokers, "
                f"{len(winners)} campaign winners",
                file=sys.stderr,
            )

        config = RankingConfig(result_limit=parsed_args.limit)
        scorer = QuizScorer(config=config)
        outcome = scorer.score(answers, weights, brokers, winners)

        simulation = None
        if emphasis is not None:
            simulation = simulate_weights(weights, emphasis, limit=parsed_args.limit)

        breakdown_weights = weights if parsed_args.breakdown else None

        if parsed_args.format == 'terminal':
            from .output.terminal import TerminalOutput

            output = TerminalOutput(no_color=parsed_args.no_color, ranker=scorer.ranker)
            if simulation is not None and not answers:
                output.print_simulation(simulation)
            else:
                output.print_header(outcome)
                output.print_results(outcome)
                if breakdown_weights is not None:
                    output.print_breakdowns(outcome, breakdown_weights)
                if simulation is not None:
                    output.print_simulation(simulation)

        elif parsed_args.format == 'markdown':
            from .output.markdown import MarkdownOutput

            md_output = MarkdownOutput(ranker=scorer.ranker)
            content = md_output.generate(
                outcome, weights_by_slug=breakdown_weights, simulation=simulation
            )

            if parsed_args.output:
                parsed_args.output.write_text(content, encoding='utf-8')
                print(f"Report saved to: {parsed_args.output}", file=sys.stderr)
            else:
                print(content)

        elif parsed_args.format == 'json':
            from .output.json_out import JSONOutput

            json_output = JSONOutput(ranker=scorer.ranker)
            content = json_output.to_json(
                outcome, weights_by_slug=breakdown_weights, simulation=simulation
            )

            if parsed_args.output:
                parsed_args.output.write_text(content, encoding='utf-8')
                print(f"Report saved to: {parsed_args.output}", file=sys.stderr)
            else:
                print(content)

        return 0

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except (MemoryError, RecursionError):
        raise
    except Exception as e:
        print(f"Error ({type(e).__name__}): {e}", file=sys.stderr)
        if parsed_args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print("Use --verbose for full traceback", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
