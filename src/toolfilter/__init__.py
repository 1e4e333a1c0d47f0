"""Semantic tool filtering for MCP tool catalogs."""

from .cache import LRUCache, fingerprint
from .config import ToolFilterSettings, load_settings
from .embedding import EmbeddingProvider, create_embedding_provider
from .errors import (
    DimensionMismatchError,
    EmbeddingProviderError,
    InvalidInputError,
    ToolFilterError,
    UninitializedError,
)
from .filter import ToolFilter
from .models import (
    ChatMessage,
    FilterMetrics,
    FilterOptions,
    FilterResult,
    MCPServer,
    MCPTool,
    ScoredTool,
)
from .registry import ToolRegistry

__all__ = [
    "ChatMessage",
    "DimensionMismatchError",
    "EmbeddingProvider",
    "EmbeddingProviderError",
    "FilterMetrics",
    "FilterOptions",
    "FilterResult",
    "InvalidInputError",
    "LRUCache",
    "MCPServer",
    "MCPTool",
    "ScoredTool",
    "ToolFilter",
    "ToolFilterError",
    "ToolFilterSettings",
    "ToolRegistry",
    "UninitializedError",
    "create_embedding_provider",
    "fingerprint",
    "load_settings",
]
