"""
bountera.engine.ranking — Competition Ranking
==============================================

Rank is ``1 + number of strictly higher scores``.  Equal scores share a
rank and the next distinct score skips ahead (100, 100, 50 → 1, 1, 3).
"""

from __future__ import annotations

from collections.abc import Sequence


def rank_from_count(higher: int) -> int:
    """Rank given how many scores are strictly higher."""
    return higher + 1


def competition_ranks(scores: Sequence[int]) -> list[int]:
    """Return the competition rank of each score, in input order."""
    ordered = sorted(scores, reverse=True)
    first_seen: dict[int, int] = {}
    for index, score in enumerate(ordered):
        first_seen.setdefault(score, index)
    return [rank_from_count(first_seen[score]) for score in scores]
