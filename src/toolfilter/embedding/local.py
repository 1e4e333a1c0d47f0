"""Local sentence-transformers embedding provider.

The model loads lazily on first use, once, under a lock. Inference is
CPU-bound and runs in a worker thread so the event loop stays responsive.
"""

from __future__ import annotations

import threading
from typing import Any, Optional

import anyio.to_thread

from src.utils.logger import get_logger

from ..config import LocalEmbeddingConfig
from .base import EmbeddingProvider

logger = get_logger("embedding.local")

DEFAULT_LOCAL_MODEL = "sentence-transformers/all-MiniLM-L6-v2"

# Known output sizes, so dimension() works before the model is loaded
_KNOWN_DIMENSIONS = {
    "all-MiniLM-L6-v2": 384,
    "all-MiniLM-L12-v2": 384,
    "bge-small": 384,
    "bge-base": 768,
    "all-mpnet-base-v2": 768,
}


def _guess_dimension(model_name: str) -> Optional[int]:
    for fragment, dims in _KNOWN_DIMENSIONS.items():
        if fragment in model_name:
            return dims
    return None


class LocalEmbeddingProvider(EmbeddingProvider):
    """Embeds text with a locally loaded sentence-transformers model."""

    def __init__(self, config: Optional[LocalEmbeddingConfig] = None) -> None:
        config = config or LocalEmbeddingConfig()
        self.model_name = config.model or DEFAULT_LOCAL_MODEL
        self.device = config.device
        self._dimension = _guess_dimension(self.model_name)
        self._model: Any = None
        self._load_lock = threading.Lock()

    def _get_model(self) -> Any:
        with self._load_lock:
            if self._model is None:
                from sentence_transformers import SentenceTransformer

                logger.info(f"Loading local embedding model '{self.model_name}'")
                self._model = SentenceTransformer(self.model_name, device=self.device)
                self._dimension = self._model.get_sentence_embedding_dimension()
            return self._model

    def _encode(self, texts: list[str]) -> list[list[float]]:
        model = self._get_model()
        embeddings = model.encode(texts, convert_to_numpy=True, show_progress_bar=False)
        return [row.tolist() for row in embeddings]

    async def embed(self, text: str) -> list[float]:
        vectors = await anyio.to_thread.run_sync(self._encode, [text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await anyio.to_thread.run_sync(self._encode, texts)

    def dimension(self) -> int:
        if self._dimension is None:
            self._get_model()
        return self._dimension
