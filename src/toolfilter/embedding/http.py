"""HTTP embedding providers (OpenAI, Workers AI, Voyage, Cohere).

All variants share one ``httpx.AsyncClient``. Non-2xx responses, transport
errors and malformed payloads raise ``EmbeddingProviderError``; nothing is
retried here.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from ..config import APIEmbeddingConfig
from ..errors import EmbeddingProviderError
from .base import EmbeddingProvider


class HTTPEmbeddingProvider(EmbeddingProvider):
    """Base class for JSON-over-HTTP embedding APIs with bearer auth."""

    label = "Embedding"
    default_base_url = ""
    default_model = ""
    default_dimensions = 0
    endpoint = "/embeddings"
    batch_size = 2048

    def __init__(
        self,
        config: APIEmbeddingConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.model = config.model or self.default_model
        self.dimensions = config.dimensions or self.default_dimensions
        self.base_url = (config.base_url or self.default_base_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

    def dimension(self) -> int:
        return self.dimensions

    async def embed(self, text: str) -> list[float]:
        vectors = await self._embed_chunk([text], single=True)
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        results: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            chunk = texts[start:start + self.batch_size]
            results.extend(await self._embed_chunk(chunk, single=False))
        return results

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _embed_chunk(self, texts: list[str], single: bool) -> list[list[float]]:
        payload = self._build_payload(texts, single)
        data = await self._post(payload)
        try:
            vectors = self._parse_vectors(data)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise EmbeddingProviderError(f"{self.label} API returned a malformed response: {e}") from e
        if len(vectors) != len(texts):
            raise EmbeddingProviderError(
                f"{self.label} API returned {len(vectors)} embeddings for {len(texts)} inputs"
            )
        return vectors

    async def _post(self, payload: dict[str, Any]) -> Any:
        url = f"{self.base_url}{self.endpoint}"
        try:
            response = await self._client.post(url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise EmbeddingProviderError(f"{self.label} API request failed: {e}") from e

        if response.is_error:
            raise EmbeddingProviderError(
                f"{self.label} API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise EmbeddingProviderError(f"{self.label} API returned invalid JSON: {e}") from e

    def _build_payload(self, texts: list[str], single: bool) -> dict[str, Any]:
        raise NotImplementedError

    def _parse_vectors(self, data: Any) -> list[list[float]]:
        """Parse an OpenAI-style ``{"data": [{"index", "embedding"}]}`` body."""
        items = sorted(data["data"], key=lambda d: d.get("index", 0))
        return [[float(x) for x in item["embedding"]] for item in items]


class OpenAIEmbeddingProvider(HTTPEmbeddingProvider):
    label = "OpenAI"
    default_base_url = "https://api.openai.com/v1"
    default_model = "text-embedding-3-small"
    default_dimensions = 1536

    def _build_payload(self, texts: list[str], single: bool) -> dict[str, Any]:
        return {
            "model": self.model,
            "input": texts[0] if single else texts,
            "dimensions": self.dimensions,
        }


class WorkersAIEmbeddingProvider(HTTPEmbeddingProvider):
    """Cloudflare Workers AI through its OpenAI-compatible endpoint.

    Workers AI rejects the ``dimensions`` field, so it is never sent.
    """

    label = "Workers AI"
    default_model = "@cf/baai/bge-base-en-v1.5"
    default_dimensions = 768

    def _build_payload(self, texts: list[str], single: bool) -> dict[str, Any]:
        return {"model": self.model, "input": texts[0] if single else texts}


class VoyageEmbeddingProvider(HTTPEmbeddingProvider):
    label = "Voyage"
    default_base_url = "https://api.voyageai.com/v1"
    default_model = "voyage-3-lite"
    default_dimensions = 512
    batch_size = 128

    def _build_payload(self, texts: list[str], single: bool) -> dict[str, Any]:
        return {
            "model": self.model,
            "input": texts,
            "input_type": "query" if single else "document",
        }


class CohereEmbeddingProvider(HTTPEmbeddingProvider):
    label = "Cohere"
    default_base_url = "https://api.cohere.com/v2"
    default_model = "embed-english-v3.0"
    default_dimensions = 1024
    endpoint = "/embed"
    batch_size = 96

    def _build_payload(self, texts: list[str], single: bool) -> dict[str, Any]:
        return {
            "model": self.model,
            "texts": texts,
            "input_type": "search_query" if single else "search_document",
            "embedding_types": ["float"],
        }

    def _parse_vectors(self, data: Any) -> list[list[float]]:
        return [[float(x) for x in vec] for vec in data["embeddings"]["float"]]
