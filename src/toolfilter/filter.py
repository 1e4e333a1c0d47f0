"""ToolFilter — single entry point for semantic tool filtering.

Per request: build context → cache lookup (embed on miss) → score every
registry record → select. The registry and the context cache are long-lived
and shared by concurrent requests.
"""

from __future__ import annotations

import time
from typing import Any, Iterable, Optional, Union

import numpy as np

from src.utils.logger import get_logger

from .cache import LRUCache, fingerprint
from .config import ToolFilterSettings
from .context import build_context_string
from .embedding import EmbeddingProvider, create_embedding_provider
from .errors import DimensionMismatchError, UninitializedError
from .models import (
    FilterDefaults,
    FilterInput,
    FilterMetrics,
    FilterOptions,
    FilterResult,
    MCPServer,
    ScoredTool,
)
from .registry import ToolRegistry
from .selector import select_tools
from .vector_ops import normalize


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class ToolFilter:
    """Selects the catalog tools most relevant to a conversation.

    The embedding provider is either passed in or built from
    ``settings.embedding``. Call ``initialize()`` once before filtering.
    """

    def __init__(
        self,
        provider: Optional[EmbeddingProvider] = None,
        settings: Optional[ToolFilterSettings] = None,
        **overrides: Any,
    ) -> None:
        self.settings = settings or ToolFilterSettings(**overrides)
        self.logger = get_logger("ToolFilter")

        if provider is None:
            if self.settings.embedding is None:
                raise ValueError("No embedding provider configured")
            provider = create_embedding_provider(self.settings.embedding)
        self.provider = provider

        self.registry = ToolRegistry(
            include_server_description=self.settings.include_server_description,
            debug=self.settings.debug,
        )
        self.cache: LRUCache[str, np.ndarray] = LRUCache(self.settings.cache_size)
        self._log(f"ToolFilter created with provider {type(provider).__name__}")

    async def initialize(self, servers: Iterable[Union[MCPServer, dict[str, Any]]]) -> None:
        """Precompute and store embeddings for every tool in the catalog."""
        start = time.perf_counter()
        await self.registry.build(servers, self.provider)
        self._log(f"Initialization complete in {_elapsed_ms(start):.2f}ms")

    def is_initialized(self) -> bool:
        return self.registry.initialized

    async def filter(
        self,
        input: FilterInput,
        options: Optional[Union[FilterOptions, dict[str, Any]]] = None,
    ) -> FilterResult:
        """Rank catalog tools against a text or message-history context.

        Raises:
            UninitializedError: If initialize() has not completed.
            DimensionMismatchError: If the context embedding does not match the registry.
        Provider errors propagate unchanged.
        """
        if not self.registry.initialized:
            raise UninitializedError()

        total_start = time.perf_counter()
        opts = self._resolve_options(options)

        stage = time.perf_counter()
        context = build_context_string(input, opts.context_messages, opts.max_context_tokens)
        context_time = _elapsed_ms(stage)
        self._log(f"[1/4] Context built ({len(context)} chars): {context_time:.2f}ms")

        stage = time.perf_counter()
        key = fingerprint(context)
        embedding = self.cache.get(key)
        cache_time = _elapsed_ms(stage)

        if embedding is not None:
            embedding_time = 0.0
            self._log(f"[2/4] Cache HIT (lookup: {cache_time:.2f}ms, embedding: 0ms)")
        else:
            self._log(f"[2/4] Cache MISS (lookup: {cache_time:.2f}ms)")
            stage = time.perf_counter()
            raw = await self.provider.embed(context)
            embedding = normalize(raw, in_place=True)
            embedding.flags.writeable = False
            embedding_time = _elapsed_ms(stage)
            dimension = self.registry.dimension
            if dimension is not None and len(embedding) != dimension:
                raise DimensionMismatchError(dimension, len(embedding))
            self.cache.put(key, embedding)
            self._log(f"      Embedding generated: {embedding_time:.2f}ms")

        stage = time.perf_counter()
        candidates = self._score(embedding, opts.exclude)
        similarity_time = _elapsed_ms(stage)
        self._log(f"[3/4] Similarities computed: {similarity_time:.2f}ms ({len(candidates)} tools)")

        stage = time.perf_counter()
        tools = select_tools(candidates, opts.top_k, opts.min_score, opts.always_include)
        selection_time = _elapsed_ms(stage)
        self._log(f"[4/4] Tools selected: {selection_time:.2f}ms ({len(tools)} tools returned)")

        total_time = _elapsed_ms(total_start)
        self._log(f"Total filter time: {total_time:.2f}ms")

        return FilterResult(
            tools=tools,
            metrics=FilterMetrics(
                total_time=total_time,
                context_time=context_time,
                cache_time=cache_time,
                embedding_time=embedding_time,
                similarity_time=similarity_time,
                selection_time=selection_time,
                tools_evaluated=len(candidates),
            ),
        )

    def _resolve_options(
        self, options: Optional[Union[FilterOptions, dict[str, Any]]]
    ) -> FilterDefaults:
        defaults = self.settings.default_options
        if options is None:
            return defaults
        if not isinstance(options, FilterOptions):
            options = FilterOptions.model_validate(options)
        return options.resolve(defaults)

    def _score(self, embedding: np.ndarray, exclude: Iterable[str]) -> list[ScoredTool]:
        """Score every non-excluded record. Excluded names never reach selection."""
        excluded = set(exclude)
        scores = self.registry.scores(embedding)
        return [
            ScoredTool(
                server_id=record.server_id,
                tool_name=record.tool_name,
                tool=record.tool,
                score=float(score),
            )
            for record, score in zip(self.registry.records(), scores)
            if record.tool_name not in excluded
        ]

    def clear_cache(self) -> None:
        self.cache.clear()
        self._log("Context cache cleared")

    def stats(self) -> dict[str, Any]:
        return {
            "initialized": self.registry.initialized,
            "tool_count": len(self.registry),
            "cache_size": len(self.cache),
            "embedding_dimensions": self.registry.dimension or self.provider.dimension(),
        }

    async def aclose(self) -> None:
        await self.provider.aclose()

    def _log(self, message: str) -> None:
        if self.settings.debug:
            self.logger.debug(message)
