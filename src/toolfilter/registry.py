"""Tool registry: precomputed, normalized embeddings for every catalog tool.

Built once from a catalog and an embedding provider, then read-only. A rebuild
swaps in a complete new record set only after it succeeded, so concurrent
readers never observe a partial registry.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Union

import numpy as np
from pydantic import ValidationError

from src.utils.logger import get_logger

from .embedding.base import EmbeddingProvider
from .errors import DimensionMismatchError, EmbeddingProviderError, InvalidInputError, UninitializedError
from .models import MCPServer, MCPTool, ToolRecord
from .vector_ops import similarities

ToolKey = tuple[str, str]


def generate_tool_description(
    tool: MCPTool,
    server: Optional[MCPServer] = None,
    include_server_description: bool = False,
) -> str:
    """Synthesize the text that gets embedded for a tool.

    Keywords, category and parameter names are appended to the description
    because the richer text retrieves better than the description alone.
    """
    parts = [tool.description]

    if include_server_description and server is not None and server.description:
        parts.append(f"Context: {server.description}")

    if tool.keywords:
        parts.append(f"Keywords: {', '.join(tool.keywords)}")

    if tool.category:
        parts.append(f"Category: {tool.category}")

    param_names = tool.parameter_names()
    if param_names:
        parts.append(f"Parameters: {', '.join(param_names)}")

    return " | ".join(parts)


def validate_servers(servers: Iterable[Union[MCPServer, dict[str, Any]]]) -> list[MCPServer]:
    """Validate raw catalog entries, failing on the first malformed one."""
    validated = []
    for i, server in enumerate(servers):
        if isinstance(server, MCPServer):
            validated.append(server)
            continue
        try:
            validated.append(MCPServer.model_validate(server))
        except ValidationError as e:
            raise InvalidInputError(f"Invalid server entry at index {i}: {e}") from e
    return validated


class ToolRegistry:
    """Maps ``(server_id, tool_name)`` to a ToolRecord."""

    def __init__(self, include_server_description: bool = False, debug: bool = False) -> None:
        self.include_server_description = include_server_description
        self._debug = debug
        self.logger = get_logger("ToolRegistry")
        self._records: dict[ToolKey, ToolRecord] = {}
        self._matrix = np.empty((0, 0), dtype=np.float32)
        self._dimension: Optional[int] = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: ToolKey) -> bool:
        return key in self._records

    def get(self, server_id: str, tool_name: str) -> Optional[ToolRecord]:
        return self._records.get((server_id, tool_name))

    def records(self) -> Iterator[ToolRecord]:
        """Iterate records in build order.

        Raises:
            UninitializedError: If build() has not completed.
        """
        if not self._initialized:
            raise UninitializedError()
        return iter(self._records.values())

    async def build(
        self,
        servers: Iterable[Union[MCPServer, dict[str, Any]]],
        provider: EmbeddingProvider,
    ) -> None:
        """Embed every tool in the catalog and replace the registry contents.

        Raises:
            InvalidInputError: A catalog entry is structurally malformed.
            EmbeddingProviderError: The provider returned the wrong number of vectors.
            DimensionMismatchError: The provider returned vectors of differing lengths.
        """
        catalog = validate_servers(servers)

        entries: list[tuple[MCPServer, MCPTool, str]] = []
        for server in catalog:
            for tool in server.tools:
                description = generate_tool_description(
                    tool, server, self.include_server_description
                )
                entries.append((server, tool, description))
        self._log(f"Found {len(entries)} tools across {len(catalog)} servers")

        if entries:
            self._log("Computing tool embeddings...")
            embeddings = await provider.embed_batch([d for _, _, d in entries])
        else:
            embeddings = []

        if len(embeddings) != len(entries):
            raise EmbeddingProviderError(
                f"Provider returned {len(embeddings)} embeddings for {len(entries)} tools"
            )

        dimension = len(embeddings[0]) if embeddings else None
        for raw in embeddings:
            if len(raw) != dimension:
                raise DimensionMismatchError(dimension, len(raw))

        # Later duplicates replace earlier ones but keep the first-seen position
        chosen: dict[ToolKey, int] = {}
        for i, (server, tool, _) in enumerate(entries):
            key = (server.id, tool.name)
            if key in chosen:
                self.logger.warning(
                    f"⚠️ Duplicate tool '{tool.name}' on server '{server.id}', keeping the later definition"
                )
            chosen[key] = i

        matrix = np.array(
            [embeddings[i] for i in chosen.values()], dtype=np.float32
        ).reshape(len(chosen), dimension or 0)
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        # Zero rows stay zero
        np.divide(matrix, norms, out=matrix, where=norms > 0)
        matrix.flags.writeable = False

        records: dict[ToolKey, ToolRecord] = {}
        for row, (key, i) in enumerate(chosen.items()):
            server, tool, description = entries[i]
            records[key] = ToolRecord(
                server_id=server.id,
                server_name=server.name,
                tool=tool,
                description=description,
                embedding=matrix[row],
            )

        self._records = records
        self._matrix = matrix
        self._dimension = dimension
        self._initialized = True
        self._log(f"Registry built: {len(records)} tools, {dimension} dimensions")

    def scores(self, embedding: np.ndarray) -> np.ndarray:
        """Similarity of ``embedding`` to every record, in records() order.

        Raises:
            UninitializedError: If build() has not completed.
            DimensionMismatchError: If ``embedding`` does not match the registry.
        """
        if not self._initialized:
            raise UninitializedError()
        if not self._records:
            return np.empty(0, dtype=np.float32)
        return similarities(self._matrix, embedding)

    def _log(self, message: str) -> None:
        if self._debug:
            self.logger.debug(message)
