"""
src/search/service.py

ЧТО: Composition root поиска - собирает source, кэши, resolver и ranker
ЗАЧЕМ: Кэши живут в объекте сервиса, а не в глобальных переменных.
       В тестах создаём свежий сервис на каждый кейс.

ИСПОЛЬЗОВАНИЕ:
    from src.search import build_search_service

    service = build_search_service()
    results = await service.search("dns outage", top_k=5)

    # Произвольный запрос через provider
    results = await service.search(
        "bgp route leak took down the cdn",
        hybrid_only=False,
        api_key="sk-...",
    )
"""

from typing import List, Optional

import httpx

from src.config import Config, get_config
from src.search.models import SearchFilters, SearchRequest, SimilarityResult
from src.search.provider import ProviderFactory, make_openai_provider_factory
from src.search.resolver import QueryEmbeddingResolver
from src.search.similarity import SimilarityRanker
from src.search.source import StaticDataSource
from src.search.store import HybridLookup, VectorStore
from src.utils import get_logger

logger = get_logger(__name__)


class SimilaritySearchService:
    """
    Caller-facing API поиска похожих инцидентов.

    Attributes:
        store: Кэш векторов инцидентов
        lookup: Кэш hybrid lookup
        resolver: Текст запроса -> вектор
        ranker: Вектор -> top_k SimilarityResult
    """

    def __init__(
        self,
        store: VectorStore,
        lookup: HybridLookup,
        provider_factory: Optional[ProviderFactory] = None,
        default_top_k: int = 5,
        default_hybrid_only: bool = True,
    ):
        self.store = store
        self.lookup = lookup
        self.resolver = QueryEmbeddingResolver(lookup, provider_factory)
        self.ranker = SimilarityRanker(store)
        self.default_top_k = default_top_k
        self.default_hybrid_only = default_hybrid_only

    async def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        filters: Optional[SearchFilters] = None,
        hybrid_only: Optional[bool] = None,
        api_key: Optional[str] = None,
    ) -> List[SimilarityResult]:
        """
        Ищет инциденты, похожие на запрос.

        Raises:
            LoadError: Статические данные недоступны
            NoEmbeddingAvailable: Запроса нет в hybrid lookup и provider недоступен
            ProviderRequestError: Provider вернул ошибку
        """
        if top_k is None:
            top_k = self.default_top_k
        if hybrid_only is None:
            hybrid_only = self.default_hybrid_only

        # Сначала коллекция, потом вектор запроса
        await self.store.load_embeddings()
        query_vector = await self.resolver.resolve_query_vector(
            query, provider_api_key=api_key, hybrid_only=hybrid_only
        )

        results = await self.ranker.search(query_vector, top_k, filters)
        logger.info(f"Search '{query}' -> {len(results)} results (top_k={top_k})")
        return results

    async def search_request(self, request: SearchRequest) -> List[SimilarityResult]:
        """То же самое, но параметры одним объектом."""
        return await self.search(
            request.query,
            top_k=request.top_k,
            filters=request.filters,
            hybrid_only=request.use_hybrid_only,
            api_key=request.embedding_api_key,
        )

    def cache_status(self) -> dict:
        """Для health check: какие кэши уже заполнены."""
        return {
            "embeddings_loaded": self.store.is_loaded,
            "hybrid_lookup_loaded": self.lookup.is_loaded,
        }


def build_search_service(
    config: Optional[Config] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SimilaritySearchService:
    """
    Собирает сервис из конфигурации.

    Args:
        config: Конфигурация (default: get_config())
        transport: httpx transport для source и provider'а (в тестах - MockTransport)
    """
    if config is None:
        config = get_config()

    source = StaticDataSource(
        config.API_BASE_URL, timeout=config.HTTP_TIMEOUT_SECONDS, transport=transport
    )
    provider_factory = make_openai_provider_factory(
        model=config.EMBEDDING_MODEL,
        url=config.EMBEDDING_PROVIDER_URL,
        timeout=config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )

    logger.info(f"Building search service over {config.API_BASE_URL}")

    return SimilaritySearchService(
        store=VectorStore(source, config.EMBEDDINGS_FILE),
        lookup=HybridLookup(source, config.HYBRID_LOOKUP_FILE),
        provider_factory=provider_factory,
        default_top_k=config.TOP_K_DEFAULT,
        default_hybrid_only=config.USE_HYBRID_ONLY_DEFAULT,
    )
