"""
Тесты для получения вектора запроса (src/search/resolver.py, src/search/provider.py).

ЧТО ТЕСТИРУЕМ:
1. Hybrid lookup имеет приоритет - provider не вызывается даже с ключом
2. Provider вызывается только при hybrid_only=False И наличии ключа
3. Provider получает ИСХОДНЫЙ текст запроса
4. NoEmbeddingAvailable во всех остальных случаях
5. Ошибки provider'а -> ProviderRequestError
"""

import json

import httpx
import pytest

from src.search.errors import NoEmbeddingAvailable, ProviderRequestError
from src.search.provider import OpenAIEmbeddingProvider
from src.search.resolver import QueryEmbeddingResolver
from src.search.store import HybridLookup


class FakeProvider:
    """Provider, который запоминает тексты и отдаёт фиксированный вектор."""

    def __init__(self, vector=None):
        self.vector = vector or [0.0, 0.0, 1.0]
        self.texts = []

    async def embed(self, text):
        self.texts.append(text)
        return self.vector


class TestQueryEmbeddingResolver:
    """Тесты для QueryEmbeddingResolver.resolve_query_vector."""

    @pytest.fixture(autouse=True)
    def setup(self, source):
        self.provider = FakeProvider()
        self.keys = []

        def factory(api_key):
            self.keys.append(api_key)
            return self.provider

        self.resolver = QueryEmbeddingResolver(HybridLookup(source), factory)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["dns outage", "DNS Outage", "  dns OUTAGE \n"])
    async def test_hybrid_hit_after_normalization(self, query):
        vector = await self.resolver.resolve_query_vector(query)
        assert vector == [1.0, 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_hybrid_hit_never_calls_provider(self):
        """Даже с ключом и hybrid_only=False."""
        vector = await self.resolver.resolve_query_vector(
            "DNS Outage", provider_api_key="sk-test", hybrid_only=False
        )

        assert vector == [1.0, 0.0, 0.0]
        assert self.provider.texts == []
        assert self.keys == []

    @pytest.mark.asyncio
    async def test_miss_with_key_calls_provider_with_original_text(self):
        vector = await self.resolver.resolve_query_vector(
            "  Kafka Rebalance Storm ", provider_api_key="sk-test", hybrid_only=False
        )

        assert vector == [0.0, 0.0, 1.0]
        assert self.provider.texts == ["  Kafka Rebalance Storm "]
        assert self.keys == ["sk-test"]

    @pytest.mark.asyncio
    async def test_miss_hybrid_only_without_key(self):
        with pytest.raises(NoEmbeddingAvailable) as exc_info:
            await self.resolver.resolve_query_vector("unrecognized term", hybrid_only=True)

        assert exc_info.value.query == "unrecognized term"
        assert "NO_EMBEDDING_AVAILABLE" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_miss_hybrid_only_with_key(self):
        with pytest.raises(NoEmbeddingAvailable):
            await self.resolver.resolve_query_vector(
                "unrecognized term", provider_api_key="sk-test", hybrid_only=True
            )

        assert self.provider.texts == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("api_key", [None, ""])
    async def test_miss_provider_allowed_but_no_key(self, api_key):
        with pytest.raises(NoEmbeddingAvailable):
            await self.resolver.resolve_query_vector(
                "unrecognized term", provider_api_key=api_key, hybrid_only=False
            )

    @pytest.mark.asyncio
    async def test_no_provider_factory(self, source):
        resolver = QueryEmbeddingResolver(HybridLookup(source))

        with pytest.raises(NoEmbeddingAvailable):
            await resolver.resolve_query_vector(
                "unrecognized term", provider_api_key="sk-test", hybrid_only=False
            )


class TestOpenAIEmbeddingProvider:
    """Тесты для OpenAIEmbeddingProvider поверх httpx.MockTransport."""

    URL = "https://provider.test/v1/embeddings"

    def make_provider(self, handler):
        return OpenAIEmbeddingProvider(
            api_key="sk-test", url=self.URL, transport=httpx.MockTransport(handler)
        )

    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2], "index": 0}]})

        vector = await self.make_provider(handler).embed("Original Query")

        assert vector == [0.1, 0.2]
        request = seen[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert json.loads(request.content) == {
            "model": "text-embedding-3-small",
            "input": "Original Query",
        }

    @pytest.mark.asyncio
    async def test_error_message_from_provider(self):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}})

        with pytest.raises(ProviderRequestError) as exc_info:
            await self.make_provider(handler).embed("query")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Incorrect API key provided"

    @pytest.mark.asyncio
    async def test_error_without_body(self):
        def handler(request):
            return httpx.Response(429, content=b"")

        with pytest.raises(ProviderRequestError) as exc_info:
            await self.make_provider(handler).embed("query")

        assert exc_info.value.status_code == 429
        assert "429" in exc_info.value.detail

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"data": []},
        {"data": [{"embedding": []}]},
        {"data": [{"embedding": ["x"]}]},
        {"result": "ok"},
    ])
    async def test_malformed_response(self, body):
        def handler(request):
            return httpx.Response(200, json=body)

        with pytest.raises(ProviderRequestError, match="malformed"):
            await self.make_provider(handler).embed("query")

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ProviderRequestError, match="request failed"):
            await self.make_provider(handler).embed("query")
