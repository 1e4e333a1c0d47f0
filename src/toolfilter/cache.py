"""Least-recently-used cache for context embeddings.

Recency reflects reads as well as writes, so ``get`` mutates the ordering and
is guarded by the same lock as ``put``. The lock is held only for the map
operation itself; callers must never hold it across an embedding call.
"""

from __future__ import annotations

import threading
import zlib
from collections import OrderedDict
from typing import Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_CACHE_SIZE = 100


def fingerprint(text: str) -> str:
    """Stable, non-cryptographic 32-bit fingerprint of a context string."""
    return format(zlib.crc32(text.encode("utf-8")), "08x")


class LRUCache(Generic[K, V]):
    """Thread-safe fixed-capacity LRU mapping."""

    def __init__(self, capacity: int = DEFAULT_CACHE_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        # Ordered oldest → newest; move_to_end() marks most-recently-used.
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: K) -> Optional[V]:
        """Return the cached value and mark it most-recently-used, or None on miss."""
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key: K, value: V) -> None:
        """Insert or replace a value, evicting the least-recently-used entry when full."""
        with self._lock:
            if key in self._entries:
                self._entries[key] = value
                self._entries.move_to_end(key)
                return
            if len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[key] = value

    def has(self, key: K) -> bool:
        """Membership test. Does not affect recency."""
        with self._lock:
            return key in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
