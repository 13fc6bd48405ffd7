"""Joins ranked slugs back to broker records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import Broker, ScoredResult


def index_brokers(brokers: Iterable[Broker]) -> dict[str, Broker]:
    """Index brokers by slug. A later duplicate slug wins."""
    return {broker.slug: broker for broker in brokers}


def resolve_broker(index: Mapping[str, Broker], slug: str) -> Broker | None:
    """Return the broker for ``slug`` or None when it is not loaded."""
    return index.get(slug)


def assemble_results(
    results: Iterable[ScoredResult],
    limit: int | None = None,
) -> list[ScoredResult]:
    """Produce the final result list.

    Copies each entry unchanged (slug, broker or None, total) and keeps at
    most ``limit`` of them.
    """
    assembled = [
        ScoredResult(slug=r.slug, broker=r.broker, total=r.total)
        for r in results
    ]
    if limit is not None:
        assembled = assembled[:limit]
    return assembled
