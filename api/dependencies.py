"""
API Dependencies для Tech Failures Search

ЧТО: Сервис поиска и каталог создаются ОДИН РАЗ и переиспользуются
ЗАЧЕМ: Внутри них кэши embeddings.json / hybrid_lookup.json / failures.json.
       Новый сервис на каждый запрос = новая загрузка данных.

В тестах подменяем через app.dependency_overrides[get_search_service].
"""

from typing import Optional

from src.catalog import IncidentCatalog, build_catalog
from src.search import SimilaritySearchService, build_search_service
from src.search.errors import LoadError
from src.utils import get_logger

logger = get_logger(__name__)


# =============================================================================
# ГЛОБАЛЬНЫЕ ЭКЗЕМПЛЯРЫ (создаются при первом обращении)
# =============================================================================

_search_service: Optional[SimilaritySearchService] = None
_catalog: Optional[IncidentCatalog] = None


def get_search_service() -> SimilaritySearchService:
    """
    Dependency для FastAPI endpoints.

    КАК ИСПОЛЬЗОВАТЬ:
        @app.post("/api/v1/search")
        async def search(
            request: SearchApiRequest,
            service = Depends(get_search_service)
        ):
            ...
    """
    global _search_service

    if _search_service is None:
        _search_service = build_search_service()

    return _search_service


def get_catalog() -> IncidentCatalog:
    """Dependency: каталог инцидентов."""
    global _catalog

    if _catalog is None:
        _catalog = build_catalog()

    return _catalog


def reset_dependencies() -> None:
    """Сбрасывает сервис и каталог (кэши загрузятся заново). Полезно для тестов."""
    global _search_service, _catalog
    _search_service = None
    _catalog = None


async def preload_data() -> None:
    """
    Предзагружает эмбеддинги и hybrid lookup при старте API.

    ЗАЧЕМ: Первый поиск не будет ждать загрузки данных.
    Если данные недоступны - API всё равно стартует, health покажет degraded.
    """
    service = get_search_service()
    try:
        await service.store.load_embeddings()
        await service.lookup.load_hybrid_lookup()
        logger.info("Search data preloaded successfully")
    except LoadError as e:
        logger.error(f"Failed to preload search data: {e}")
