"""Abstract embedding capability consumed by the registry and the filter."""

from __future__ import annotations

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Turns text into fixed-length vectors.

    Implementations return raw (not necessarily normalized) vectors as fresh
    lists; the caller owns the returned buffers. Failures propagate as-is.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed many texts, returning one vector per input in input order."""
        ...

    @abstractmethod
    def dimension(self) -> int:
        """Length of the vectors this provider returns."""
        ...

    async def aclose(self) -> None:
        """Release any held resources. No-op by default."""
