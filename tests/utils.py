"""Shared test helpers: a deterministic in-memory embedding provider."""

import asyncio
from typing import Optional

from src.toolfilter.embedding.base import EmbeddingProvider


class FakeEmbeddingProvider(EmbeddingProvider):
    """Returns fixed vectors chosen by text prefix.

    ``rules`` is a list of ``(prefix, vector)``; the first prefix that the
    text starts with wins, otherwise ``default`` is returned. Every returned
    vector is a fresh list.
    """

    def __init__(
        self,
        rules: list[tuple[str, list[float]]],
        default: Optional[list[float]] = None,
        dims: Optional[int] = None,
        delay: float = 0.0,
    ):
        self.rules = rules
        self.dims = dims or len(rules[0][1])
        self.default = default or [0.0] * (self.dims - 1) + [1.0]
        self.delay = delay
        self.embed_calls: list[str] = []
        self.batch_calls: list[list[str]] = []
        self.error: Optional[Exception] = None
        self.closed = False

    def _lookup(self, text: str) -> list[float]:
        for prefix, vector in self.rules:
            if text.startswith(prefix):
                return list(vector)
        return list(self.default)

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self._lookup(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [self._lookup(t) for t in texts]

    def dimension(self) -> int:
        return self.dims

    async def aclose(self) -> None:
        self.closed = True


# Unit vectors whose dot product with CONTEXT_VECTOR is exactly the first component
CONTEXT_VECTOR = [1.0, 0.0, 0.0]


def unit_with_score(score: float) -> list[float]:
    return [score, (1.0 - score * score) ** 0.5, 0.0]


def make_servers():
    """The three-tool catalog used across filter tests."""
    return [
        {
            "id": "test-server",
            "name": "Test Server",
            "description": "A test MCP server",
            "tools": [
                {
                    "name": "email_search",
                    "description": "Search emails in your inbox.",
                    "keywords": ["email", "search", "inbox"],
                    "category": "email",
                },
                {
                    "name": "calendar_list",
                    "description": "List calendar events and meetings.",
                    "keywords": ["calendar", "events"],
                    "category": "calendar",
                },
                {
                    "name": "web_search",
                    "description": "Search the internet for information.",
                    "keywords": ["search", "web"],
                    "category": "web",
                    "inputSchema": {
                        "type": "object",
                        "properties": {"query": {"type": "string"}},
                    },
                },
            ],
        }
    ]


def make_provider(**kwargs) -> FakeEmbeddingProvider:
    """Provider scoring email_search 0.9, calendar_list 0.3, web_search 0.1 against any query."""
    return FakeEmbeddingProvider(
        rules=[
            ("Search emails", unit_with_score(0.9)),
            ("List calendar", unit_with_score(0.3)),
            ("Search the internet", unit_with_score(0.1)),
        ],
        default=CONTEXT_VECTOR,
        **kwargs,
    )
