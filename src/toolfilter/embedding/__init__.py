"""Embedding providers, selected by configuration."""

from __future__ import annotations

from ..config import APIEmbeddingConfig, EmbeddingConfig, LocalEmbeddingConfig
from .base import EmbeddingProvider
from .http import (
    CohereEmbeddingProvider,
    HTTPEmbeddingProvider,
    OpenAIEmbeddingProvider,
    VoyageEmbeddingProvider,
    WorkersAIEmbeddingProvider,
)
from .local import LocalEmbeddingProvider


def create_embedding_provider(config: EmbeddingConfig) -> EmbeddingProvider:
    """Build the provider variant named by ``config.provider``."""
    if isinstance(config, LocalEmbeddingConfig):
        return LocalEmbeddingProvider(config)

    if config.provider == "openai":
        # Workers AI models are served through an OpenAI-compatible endpoint
        if config.model and config.model.startswith("@cf/"):
            return WorkersAIEmbeddingProvider(config)
        return OpenAIEmbeddingProvider(config)
    if config.provider == "voyage":
        return VoyageEmbeddingProvider(config)
    if config.provider == "cohere":
        return CohereEmbeddingProvider(config)
    raise ValueError(f"Unknown embedding provider: {config.provider}")


__all__ = [
    "APIEmbeddingConfig",
    "CohereEmbeddingProvider",
    "EmbeddingProvider",
    "HTTPEmbeddingProvider",
    "LocalEmbeddingConfig",
    "LocalEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "VoyageEmbeddingProvider",
    "WorkersAIEmbeddingProvider",
    "create_embedding_provider",
]
