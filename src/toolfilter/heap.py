"""Bounded min-heap for top-k selection.

Keeps the ``capacity`` highest-keyed items seen so far in O(n log k). Ties are
broken by arrival order: an item that arrives later never displaces an earlier
item with the same key.
"""

from __future__ import annotations

import heapq
from typing import Callable, Generic, Iterable, TypeVar

T = TypeVar("T")


class BoundedHeap(Generic[T]):
    """Fixed-capacity container retaining the items with the largest keys."""

    def __init__(self, capacity: int, key: Callable[[T], float]) -> None:
        self.capacity = max(0, capacity)
        self._key = key
        # Entries are (key, -sequence, item); the root is the weakest entry.
        self._heap: list[tuple[float, int, T]] = []
        self._seq = 0

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, item: T) -> None:
        if self.capacity == 0:
            return
        entry = (self._key(item), -self._seq, item)
        self._seq += 1
        if len(self._heap) < self.capacity:
            heapq.heappush(self._heap, entry)
        elif entry[:2] > self._heap[0][:2]:
            heapq.heapreplace(self._heap, entry)

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.push(item)

    def sorted_items(self) -> list[T]:
        """Retained items, key descending, earliest arrival first on ties."""
        return [entry[2] for entry in sorted(self._heap, key=lambda e: (-e[0], -e[1]))]
