"""
Frequency ranking of candidates.

Order: most used first, then by name. The same key drives both the sort and
the binary-search membership check, so the two can never disagree.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Mapping, Sequence


def rank_key(name: str, table: Mapping[str, int]) -> tuple[int, str]:
    return (-table.get(name, 0), name)


def rank(candidates: Iterable[str], table: Mapping[str, int]) -> list[str]:
    """Return candidates sorted by descending count, then ascending name."""
    return sorted(candidates, key=lambda name: rank_key(name, table))


def contains(ranked: Sequence[str], name: str, table: Mapping[str, int]) -> bool:
    """
    Check whether name is in a list produced by rank() with the same table.

    Binary search; the result is only meaningful if the table has not changed
    since ranking.
    """
    key = rank_key(name, table)
    index = bisect_left(ranked, key, key=lambda candidate: rank_key(candidate, table))
    return index < len(ranked) and ranked[index] == name
