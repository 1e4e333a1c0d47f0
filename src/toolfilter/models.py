"""Core data models for tool filtering.

Catalog and request models are pydantic (validated at the boundary); records
and results produced internally are plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class MCPTool(BaseModel):
    """A tool definition from the catalog."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    description: str
    keywords: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    input_schema: Optional[dict[str, Any]] = Field(default=None, alias="inputSchema")

    def parameter_names(self) -> list[str]:
        """Property names declared by the input schema, in declaration order."""
        if not isinstance(self.input_schema, dict):
            return []
        props = self.input_schema.get("properties")
        if isinstance(props, dict):
            return list(props)
        return []


class MCPServer(BaseModel):
    """A server and the tools it exposes."""

    id: str = Field(min_length=1)
    name: str
    description: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    tools: list[MCPTool] = Field(default_factory=list)


class ChatMessage(BaseModel):
    """Chat completion message (OpenAI-compatible)."""

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    name: Optional[str] = None


FilterInput = Union[str, list[ChatMessage], list[dict[str, Any]]]


class FilterDefaults(BaseModel):
    """Fully resolved filter options with sensible defaults."""

    top_k: int = 20
    min_score: float = 0.3
    context_messages: int = 3
    always_include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    max_context_tokens: int = 500


class FilterOptions(BaseModel):
    """Per-request overrides. Unset fields fall back to the configured defaults."""

    top_k: Optional[int] = None
    min_score: Optional[float] = None
    context_messages: Optional[int] = None
    always_include: Optional[list[str]] = None
    exclude: Optional[list[str]] = None
    max_context_tokens: Optional[int] = None

    def resolve(self, defaults: FilterDefaults) -> FilterDefaults:
        return defaults.model_copy(update=self.model_dump(exclude_none=True), deep=True)


@dataclass(frozen=True)
class ToolRecord:
    """A registry entry: normalized embedding plus catalog metadata."""

    server_id: str
    server_name: str
    tool: MCPTool
    description: str
    # Read-only row of the registry matrix
    embedding: np.ndarray = field(compare=False, repr=False)

    @property
    def tool_name(self) -> str:
        return self.tool.name

    @property
    def key(self) -> tuple[str, str]:
        return (self.server_id, self.tool.name)


@dataclass
class ScoredTool:
    """A tool with its similarity score against the request context."""

    server_id: str
    tool_name: str
    tool: MCPTool
    score: float


@dataclass
class FilterMetrics:
    """Per-stage timings in milliseconds."""

    total_time: float = 0.0
    context_time: float = 0.0
    cache_time: float = 0.0
    embedding_time: float = 0.0
    similarity_time: float = 0.0
    selection_time: float = 0.0
    tools_evaluated: int = 0


@dataclass
class FilterResult:
    tools: list[ScoredTool] = field(default_factory=list)
    metrics: FilterMetrics = field(default_factory=FilterMetrics)

    @property
    def tool_names(self) -> list[str]:
        return [t.tool_name for t in self.tools]
