"""Constrained top-k selection over scored candidates.

Forced (always-include) tools bypass the score threshold and are listed first
in encounter order; the remaining slots go to the best eligible tools, score
descending, earliest candidate first on ties. Exclusion happens upstream, so
excluded tools never reach this module.
"""

from __future__ import annotations

from typing import Iterable

from .heap import BoundedHeap
from .models import ScoredTool

# Pools larger than this use a bounded heap instead of a full sort
HEAP_THRESHOLD = 500


def _score(tool: ScoredTool) -> float:
    return tool.score


def select_top_k(
    candidates: list[ScoredTool],
    k: int,
    heap_threshold: int = HEAP_THRESHOLD,
) -> list[ScoredTool]:
    """Return the ``k`` highest-scoring candidates, stable on ties.

    Both strategies yield the same ranking; only their cost differs.
    """
    if k <= 0:
        return []
    if k >= len(candidates) or len(candidates) <= heap_threshold:
        # sorted() is stable, also with reverse=True
        return sorted(candidates, key=_score, reverse=True)[:k]

    heap: BoundedHeap[ScoredTool] = BoundedHeap(k, key=_score)
    heap.extend(candidates)
    return heap.sorted_items()


def select_tools(
    candidates: Iterable[ScoredTool],
    top_k: int,
    min_score: float,
    always_include: Iterable[str] = (),
    heap_threshold: int = HEAP_THRESHOLD,
) -> list[ScoredTool]:
    """Apply always-include, threshold and top-k constraints.

    Output length never exceeds ``top_k`` plus the number of forced tools.
    """
    forced_names = set(always_include)
    forced: list[ScoredTool] = []
    eligible: list[ScoredTool] = []

    for scored in candidates:
        if scored.tool_name in forced_names:
            forced.append(scored)
        elif scored.score >= min_score:
            eligible.append(scored)

    remaining_slots = max(0, top_k - len(forced))
    return forced + select_top_k(eligible, remaining_slots, heap_threshold)
