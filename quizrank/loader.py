"""Snapshot loaders for broker, weight and campaign data.

Reads the JSON exports of the broker repository, the quiz weight store and
the campaign directive list, plus the bundled default quiz data.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .engine.models import Broker, CampaignWinner
from .engine.scoring import QuizWeights, WeightCategory

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

# Weight store rows name their columns "<category>_weight"
_ROW_SUFFIX = "_weight"


class QuizDataError(ValueError):
    """Raised when a data snapshot cannot be read or has the wrong shape."""


@dataclass
class QuizOption:
    label: str
    token: str


@dataclass
class QuizQuestion:
    question: str
    options: list[QuizOption] = field(default_factory=list)


def _read_json(path: str | Path) -> Any:
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise QuizDataError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise QuizDataError(f"Invalid JSON in {path}: {e}") from e


def _unwrap(data: Any, key: str) -> Any:
    """Accept both a bare payload and ``{key: payload}``."""
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


def _to_number(value: Any, context: str) -> float:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning("%s is not numeric (%r) - counting as 0", context, value)
        return 0
    return value


# ── Brokers ───────────────────────────────────────────────────────────────


def parse_brokers(data: Any) -> list[Broker]:
    """Build Broker records from decoded JSON.

    Entries that are not objects or lack a slug are skipped with a warning.
    """
    data = _unwrap(data, "brokers")
    if not isinstance(data, list):
        raise QuizDataError("Broker data must be a list of broker objects")

    brokers = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            logger.warning("Broker entry %d is malformed (not an object) - skipping", i)
            continue
        slug = entry.get("slug")
        if not slug or not isinstance(slug, str):
            logger.warning("Broker entry %d has no slug - skipping", i)
            continue

        rating = entry.get("rating")
        if rating is not None and (
            isinstance(rating, bool) or not isinstance(rating, (int, float))
        ):
            logger.warning(
                "Broker %r rating is not numeric (%r) - treating as unrated",
                slug, rating,
            )
            rating = None

        brokers.append(Broker(
            slug=slug,
            name=str(entry.get("name") or slug),
            rating=rating,
            sponsorship_tier=entry.get("sponsorship_tier") or None,
            tagline=entry.get("tagline") or "",
            affiliate_url=entry.get("affiliate_url") or "",
        ))

    return brokers


def load_brokers(path: str | Path) -> list[Broker]:
    """Load brokers from a JSON file."""
    return parse_brokers(_read_json(path))


# ── Weights ───────────────────────────────────────────────────────────────


def _weights_from_record(record: dict, slug: str, suffix: str = "") -> QuizWeights:
    values = {}
    for category in WeightCategory:
        key = category.value + suffix
        values[category.value] = _to_number(
            record.get(key), f"Weight {key!r} for {slug!r}"
        )
    return QuizWeights(**values)


def parse_weights(data: Any) -> dict[str, QuizWeights]:
    """Build the weights-by-slug mapping from decoded JSON.

    Accepts ``{slug: {category: n}}`` or a list of weight store rows
    (``{"broker_slug": ..., "beginner_weight": n, ...}``). Missing
    categories count as 0.
    """
    data = _unwrap(data, "weights")

    weights: dict[str, QuizWeights] = {}

    if isinstance(data, dict):
        for slug, record in data.items():
            if not isinstance(record, dict):
                logger.warning("Weights for %r are malformed (not an object) - skipping", slug)
                continue
            weights[slug] = _weights_from_record(record, slug)
        return weights

    if isinstance(data, list):
        for i, row in enumerate(data):
            if not isinstance(row, dict):
                logger.warning("Weight row %d is malformed (not an object) - skipping", i)
                continue
            slug = row.get("broker_slug")
            if not slug or not isinstance(slug, str):
                logger.warning("Weight row %d has no broker_slug - skipping", i)
                continue
            if slug in weights:
                logger.warning("Duplicate weight row for %r - later row wins", slug)
            weights[slug] = _weights_from_record(row, slug, suffix=_ROW_SUFFIX)
        return weights

    raise QuizDataError("Weight data must be an object keyed by slug or a list of rows")


def load_weights(path: str | Path) -> dict[str, QuizWeights]:
    """Load quiz weights from a JSON file."""
    return parse_weights(_read_json(path))


# ── Campaign winners ──────────────────────────────────────────────────────


def parse_campaign_winners(data: Any) -> list[CampaignWinner]:
    """Build campaign directives from decoded JSON (objects or bare slugs)."""
    data = _unwrap(data, "winners")
    if not isinstance(data, list):
        raise QuizDataError("Campaign winner data must be a list")

    winners = []
    for i, entry in enumerate(data):
        if isinstance(entry, str) and entry:
            winners.append(CampaignWinner(broker_slug=entry))
        elif isinstance(entry, dict) and isinstance(entry.get("broker_slug"), str):
            winners.append(CampaignWinner(broker_slug=entry["broker_slug"]))
        else:
            logger.warning("Campaign winner entry %d is malformed - skipping", i)
    return winners


def load_campaign_winners(path: str | Path) -> list[CampaignWinner]:
    """Load campaign winners from a JSON file."""
    return parse_campaign_winners(_read_json(path))


# ── Bundled quiz ──────────────────────────────────────────────────────────


def load_questions(data_dir: Path | None = None) -> list[QuizQuestion]:
    """Load the bundled quiz questions."""
    data = _read_json((data_dir or DATA_DIR) / "quiz_questions.json")

    questions = []
    for entry in data.get("questions", []):
        options = [
            QuizOption(label=o["label"], token=o["token"])
            for o in entry.get("options", [])
        ]
        questions.append(QuizQuestion(question=entry["question"], options=options))
    return questions


def load_default_brokers(data_dir: Path | None = None) -> list[Broker]:
    return load_brokers((data_dir or DATA_DIR) / "brokers.json")


def load_default_weights(data_dir: Path | None = None) -> dict[str, QuizWeights]:
    return load_weights((data_dir or DATA_DIR) / "quiz_weights.json")
