"""
src.search - Поиск похожих инцидентов по предрассчитанным эмбеддингам

Модули:
- errors.py - LoadError, NoEmbeddingAvailable, ProviderRequestError
- models.py - EmbeddingRecord, SearchFilters, SimilarityResult
- source.py - Чтение статических JSON (http или локальная папка)
- store.py - Кэши embeddings.json и hybrid_lookup.json
- provider.py - Внешний embedding provider (OpenAI-совместимый)
- resolver.py - Текст запроса -> вектор
- similarity.py - Cosine similarity + ранжирование
- service.py - Composition root

Использование:
    from src.search import build_search_service

    service = build_search_service()
    results = await service.search("dns outage", top_k=5)
"""

from src.search.errors import (
    LoadError,
    NoEmbeddingAvailable,
    ProviderRequestError,
    SearchError,
)
from src.search.models import (
    EmbeddingRecord,
    SearchFilters,
    SearchRequest,
    SimilarityResult,
)
from src.search.service import SimilaritySearchService, build_search_service
from src.search.similarity import cosine_similarity, results_to_dataframe

__all__ = [
    "LoadError",
    "NoEmbeddingAvailable",
    "ProviderRequestError",
    "SearchError",
    "EmbeddingRecord",
    "SearchFilters",
    "SearchRequest",
    "SimilarityResult",
    "SimilaritySearchService",
    "build_search_service",
    "cosine_similarity",
    "results_to_dataframe",
]
