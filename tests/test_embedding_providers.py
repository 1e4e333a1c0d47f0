"""Tests for HTTP embedding providers against a mocked transport."""
import json
import httpx
import pytest
from src.toolfilter.config import APIEmbeddingConfig, LocalEmbeddingConfig
from src.toolfilter.embedding import (
    CohereEmbeddingProvider,
    LocalEmbeddingProvider,
    OpenAIEmbeddingProvider,
    VoyageEmbeddingProvider,
    WorkersAIEmbeddingProvider,
    create_embedding_provider,
)
from src.toolfilter.errors import EmbeddingProviderError


def _openai_handler(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append((request, body))
        inputs = body["input"] if isinstance(body["input"], list) else [body["input"]]
        # Return items out of order to exercise index sorting
        data = [
            {"index": i, "embedding": [float(i), 1.0]}
            for i in range(len(inputs))
        ]
        return httpx.Response(200, json={"data": list(reversed(data))})
    return handler


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_embed_single(self):
        requests = []
        config = APIEmbeddingConfig(provider="openai", api_key="sk-test", dimensions=2)
        provider = OpenAIEmbeddingProvider(config, client=_client(_openai_handler(requests)))

        vector = await provider.embed("hello")

        assert vector == [0.0, 1.0]
        request, body = requests[0]
        assert str(request.url) == "https://api.openai.com/v1/embeddings"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert body == {"model": "text-embedding-3-small", "input": "hello", "dimensions": 2}

    @pytest.mark.asyncio
    async def test_embed_batch_preserves_order(self):
        requests = []
        config = APIEmbeddingConfig(provider="openai", api_key="k")
        provider = OpenAIEmbeddingProvider(config, client=_client(_openai_handler(requests)))

        vectors = await provider.embed_batch(["a", "b", "c"])

        assert vectors == [[0.0, 1.0], [1.0, 1.0], [2.0, 1.0]]
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_batches_large_inputs(self):
        requests = []
        config = APIEmbeddingConfig(provider="openai", api_key="k")
        provider = OpenAIEmbeddingProvider(config, client=_client(_openai_handler(requests)))
        provider.batch_size = 2

        vectors = await provider.embed_batch(["a", "b", "c", "d", "e"])

        assert len(vectors) == 5
        assert [len(body["input"]) for _, body in requests] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_custom_base_url(self):
        requests = []
        config = APIEmbeddingConfig(
            provider="openai", api_key="k", base_url="https://gateway.example.com/v1/"
        )
        provider = OpenAIEmbeddingProvider(config, client=_client(_openai_handler(requests)))
        await provider.embed("x")
        assert str(requests[0][0].url) == "https://gateway.example.com/v1/embeddings"

    def test_defaults(self):
        provider = OpenAIEmbeddingProvider(APIEmbeddingConfig(provider="openai", api_key="k"))
        assert provider.model == "text-embedding-3-small"
        assert provider.dimension() == 1536

    @pytest.mark.asyncio
    async def test_http_error(self):
        def handler(request):
            return httpx.Response(401, text="invalid api key")

        config = APIEmbeddingConfig(provider="openai", api_key="bad")
        provider = OpenAIEmbeddingProvider(config, client=_client(handler))
        with pytest.raises(EmbeddingProviderError) as exc_info:
            await provider.embed("x")
        assert exc_info.value.status_code == 401
        assert "invalid api key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        config = APIEmbeddingConfig(provider="openai", api_key="k")
        provider = OpenAIEmbeddingProvider(config, client=_client(handler))
        with pytest.raises(EmbeddingProviderError):
            await provider.embed("x")

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        def handler(request):
            return httpx.Response(200, json={"unexpected": True})

        config = APIEmbeddingConfig(provider="openai", api_key="k")
        provider = OpenAIEmbeddingProvider(config, client=_client(handler))
        with pytest.raises(EmbeddingProviderError):
            await provider.embed("x")

    @pytest.mark.asyncio
    async def test_count_mismatch(self):
        def handler(request):
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0]}]})

        config = APIEmbeddingConfig(provider="openai", api_key="k")
        provider = OpenAIEmbeddingProvider(config, client=_client(handler))
        with pytest.raises(EmbeddingProviderError):
            await provider.embed_batch(["a", "b"])

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        client = _client(_openai_handler([]))
        provider = OpenAIEmbeddingProvider(
            APIEmbeddingConfig(provider="openai", api_key="k"), client=client
        )
        await provider.aclose()
        assert not client.is_closed
        await client.aclose()


class TestOtherHTTPProviders:
    @pytest.mark.asyncio
    async def test_workers_ai_omits_dimensions(self):
        requests = []
        config = APIEmbeddingConfig(
            provider="openai",
            api_key="k",
            model="@cf/baai/bge-base-en-v1.5",
            base_url="https://api.cloudflare.com/client/v4/accounts/abc/ai/v1",
        )
        provider = WorkersAIEmbeddingProvider(config, client=_client(_openai_handler(requests)))
        await provider.embed("x")
        assert "dimensions" not in requests[0][1]
        assert provider.dimension() == 768

    @pytest.mark.asyncio
    async def test_voyage_input_types(self):
        requests = []
        config = APIEmbeddingConfig(provider="voyage", api_key="k")
        provider = VoyageEmbeddingProvider(config, client=_client(_openai_handler(requests)))
        await provider.embed("query text")
        await provider.embed_batch(["doc one", "doc two"])

        assert str(requests[0][0].url) == "https://api.voyageai.com/v1/embeddings"
        assert requests[0][1]["input"] == ["query text"]
        assert requests[0][1]["input_type"] == "query"
        assert requests[1][1]["input_type"] == "document"
        assert provider.dimension() == 512

    @pytest.mark.asyncio
    async def test_cohere_request_and_parse(self):
        requests = []

        def handler(request):
            body = json.loads(request.content)
            requests.append((request, body))
            return httpx.Response(
                200, json={"embeddings": {"float": [[0.5, 0.5] for _ in body["texts"]]}}
            )

        config = APIEmbeddingConfig(provider="cohere", api_key="k")
        provider = CohereEmbeddingProvider(config, client=_client(handler))
        vectors = await provider.embed_batch(["a", "b"])
        vector = await provider.embed("q")

        assert vectors == [[0.5, 0.5], [0.5, 0.5]]
        assert vector == [0.5, 0.5]
        assert str(requests[0][0].url) == "https://api.cohere.com/v2/embed"
        assert requests[0][1]["input_type"] == "search_document"
        assert requests[1][1]["input_type"] == "search_query"
        assert requests[0][1]["embedding_types"] == ["float"]
        assert provider.dimension() == 1024


class TestFactory:
    def test_openai(self):
        provider = create_embedding_provider(APIEmbeddingConfig(provider="openai", api_key="k"))
        assert isinstance(provider, OpenAIEmbeddingProvider)

    def test_workers_ai_model_selects_workers_provider(self):
        provider = create_embedding_provider(
            APIEmbeddingConfig(provider="openai", api_key="k", model="@cf/baai/bge-small-en-v1.5")
        )
        assert isinstance(provider, WorkersAIEmbeddingProvider)

    def test_voyage_and_cohere(self):
        assert isinstance(
            create_embedding_provider(APIEmbeddingConfig(provider="voyage", api_key="k")),
            VoyageEmbeddingProvider,
        )
        assert isinstance(
            create_embedding_provider(APIEmbeddingConfig(provider="cohere", api_key="k")),
            CohereEmbeddingProvider,
        )

    def test_local_is_lazy(self):
        provider = create_embedding_provider(LocalEmbeddingConfig())
        assert isinstance(provider, LocalEmbeddingProvider)
        assert provider._model is None
        assert provider.dimension() == 384

    def test_local_known_dimensions(self):
        provider = LocalEmbeddingProvider(LocalEmbeddingConfig(model="BAAI/bge-base-en-v1.5"))
        assert provider.dimension() == 768
