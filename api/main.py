"""
FastAPI Application для Tech Failures Search

ЧТО: REST API поверх поиска похожих инцидентов и каталога отказов
ЗАЧЕМ: UI и внешние клиенты получают ранжированные инциденты по HTTP

КАК ЗАПУСТИТЬ:
    uvicorn api.main:app --reload --host 0.0.0.0 --port 8000

ENDPOINTS:
    GET  /                        - Информация об API
    GET  /health                  - Health check
    POST /api/v1/search           - Поиск похожих инцидентов
    GET  /api/v1/failures         - Листинг каталога
    GET  /api/v1/failures/{id}    - Один инцидент
    GET  /api/v1/patterns         - Паттерны отказов
    GET  /api/v1/tags             - Таксономия тегов
    GET  /docs                    - Swagger UI

Версия: 1.0.0
"""

import time
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import get_catalog, get_search_service, preload_data
from api.schemas import (
    ErrorResponse,
    HealthResponse,
    SearchApiRequest,
    SearchResponse,
    SearchResultItem,
)
from src.catalog import FailuresPage, IncidentCatalog, IncidentRecord, hydrate_results
from src.search import SimilaritySearchService
from src.search.errors import LoadError, NoEmbeddingAvailable, ProviderRequestError
from src.utils import get_logger

logger = get_logger(__name__)

API_VERSION = "1.0.0"


# =============================================================================
# FASTAPI APPLICATION
# =============================================================================

app = FastAPI(
    title="Tech Failures Search API",
    description="""
    Каталог документированных отказов технологий + семантический поиск похожих.

    Возможности:
      Поиск похожих инцидентов по cosine similarity предрассчитанных эмбеддингов
      Частые запросы - из hybrid lookup, без внешних вызовов и без ключа
      Произвольные запросы - через embedding provider с ключом пользователя
      Фильтры по category / severity / tags
    """,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# =============================================================================
# MIDDLEWARE (CORS, логирование)
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Логирует все HTTP запросы + заголовок X-Process-Time."""
    start_time = time.time()

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000

    logger.info(
        f"{request.method} {request.url.path} "
        f"- {response.status_code} "
        f"- {process_time:.2f}ms"
    )

    response.headers["X-Process-Time"] = f"{process_time:.2f}ms"

    return response


# =============================================================================
# STARTUP / SHUTDOWN EVENTS
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Предзагружаем данные поиска, чтобы первый запрос был быстрым."""
    logger.info("=" * 80)
    logger.info(" Starting Tech Failures Search API")
    logger.info("=" * 80)

    await preload_data()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(" Shutting down Tech Failures Search API")


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error, detail=detail, status_code=status_code
        ).model_dump(),
    )


@app.exception_handler(NoEmbeddingAvailable)
async def no_embedding_handler(request: Request, exc: NoEmbeddingAvailable):
    """Не сбой, а подсказка пользователю: термина нет в hybrid lookup."""
    logger.info(f"No embedding available for query '{exc.query}'")
    return _error(422, "No Embedding Available", NoEmbeddingAvailable.GUIDANCE)


@app.exception_handler(ProviderRequestError)
async def provider_error_handler(request: Request, exc: ProviderRequestError):
    logger.warning(f"Embedding provider failed: {exc}")
    return _error(502, "Embedding Provider Error", exc.detail)


@app.exception_handler(LoadError)
async def load_error_handler(request: Request, exc: LoadError):
    logger.error(f"Static data unavailable: {exc}")
    return _error(503, "Data Unavailable", str(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Ловим все необработанные ошибки и возвращаем понятный JSON."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error(500, "Internal Server Error", str(exc))


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/", tags=["Информация об API"])
def root():
    """Корневой endpoint - информация об API."""
    return {
        "name": "Tech Failures Search API",
        "version": API_VERSION,
        "description": "Семантический поиск по каталогу отказов технологий",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "search": "/api/v1/search",
            "failures": "/api/v1/failures",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["Состояние API"])
def health_check(service: SimilaritySearchService = Depends(get_search_service)):
    """
    Health check endpoint.

    degraded - данные поиска ещё не загружены (или не загрузились при старте)
    """
    caches = service.cache_status()
    status = "healthy" if all(caches.values()) else "degraded"

    return HealthResponse(status=status, caches=caches, version=API_VERSION)


@app.post(
    "/api/v1/search",
    response_model=SearchResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Нет вектора для запроса"},
        502: {"model": ErrorResponse, "description": "Ошибка embedding provider"},
        503: {"model": ErrorResponse, "description": "Статические данные недоступны"},
    },
    tags=["Search"],
)
async def search_incidents(
    request: SearchApiRequest,
    service: SimilaritySearchService = Depends(get_search_service),
    catalog: IncidentCatalog = Depends(get_catalog),
):
    """
    Ищет инциденты, похожие на текст запроса.

    ЧТО ДЕЛАЕТ:
    1. Превращает запрос в вектор (hybrid lookup или provider)
    2. Фильтрует и ранжирует все инциденты по cosine similarity
    3. (hydrate=true) прикладывает полные записи из каталога
    """
    start_time = time.time()

    results = await service.search_request(request)

    if request.hydrate:
        hydrated = hydrate_results(results, await catalog.load_failures())
        items = [
            SearchResultItem(
                id=h.result.id,
                category=h.result.category,
                severity=h.result.severity,
                tags=sorted(h.result.tags),
                similarity_score=h.result.similarity_score,
                incident=h.incident,
            )
            for h in hydrated
        ]
    else:
        items = [
            SearchResultItem(
                id=r.id,
                category=r.category,
                severity=r.severity,
                tags=sorted(r.tags),
                similarity_score=r.similarity_score,
            )
            for r in results
        ]

    processing_time = (time.time() - start_time) * 1000

    return SearchResponse(
        query=request.query,
        top_k=request.top_k,
        filters=request.filters,
        results=items,
        processing_time_ms=round(processing_time, 2),
    )


@app.get("/api/v1/failures", response_model=FailuresPage, tags=["Catalog"])
async def list_failures(
    category: Optional[str] = None,
    tags: Optional[List[str]] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1),
    offset: Optional[int] = Query(default=None, ge=0),
    catalog: IncidentCatalog = Depends(get_catalog),
):
    """Листинг каталога с фильтрами и пагинацией."""
    return await catalog.get_failures(
        category=category, tags=tags, limit=limit, offset=offset
    )


@app.get("/api/v1/failures/{failure_id}", response_model=IncidentRecord, tags=["Catalog"])
async def get_failure(failure_id: str, catalog: IncidentCatalog = Depends(get_catalog)):
    failure = await catalog.get_failure_by_id(failure_id)
    if failure is None:
        raise HTTPException(status_code=404, detail=f"Failure not found: {failure_id}")
    return failure


@app.get("/api/v1/patterns", tags=["Catalog"])
async def get_patterns(catalog: IncidentCatalog = Depends(get_catalog)):
    return await catalog.get_patterns()


@app.get("/api/v1/tags", tags=["Catalog"])
async def get_tags(catalog: IncidentCatalog = Depends(get_catalog)):
    return await catalog.get_tags()


# =============================================================================
# MAIN (для запуска через python -m api.main)
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    from src.config import get_config

    config = get_config()

    uvicorn.run(
        "api.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=config.API_RELOAD,
        log_level="info"
    )
