"""Sorting rules shared by the CSV and PDF exports."""

from __future__ import annotations

from typing import Iterable, List

from ..persistence.models import Contest, Entrant


def rank_entrants(contest: Contest) -> List[Entrant]:
    """Entrants by score descending, ties by case-insensitive name."""
    return sorted(contest.entrants, key=lambda e: (-e.score, e.name.casefold()))


def top_entrants(contest: Contest, limit: int = 5) -> List[Entrant]:
    return rank_entrants(contest)[:limit]


def contests_by_name(contests: Iterable[Contest]) -> List[Contest]:
    return sorted(contests, key=lambda c: c.name.casefold())
