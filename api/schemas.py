"""
API Schemas для Tech Failures Search

ЧТО: Pydantic модели для валидации входящих/исходящих данных
ЗАЧЕМ: FastAPI автоматически проверяет типы и возвращает 422 если данные неверные
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.catalog.models import IncidentRecord
from src.search.models import SearchFilters, SearchRequest


# REQUEST SCHEMAS
class SearchApiRequest(SearchRequest):
    """
    Запрос на поиск похожих инцидентов

    ЧТО: Текст запроса + фильтры + разрешение на внешний provider
    ЗАЧЕМ: Частые запросы работают без ключа, произвольные - с ключом пользователя
    """

    hydrate: bool = Field(default=False, description="Приложить полную запись инцидента")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "dns outage",
                "top_k": 5,
                "filters": {"category": "outage", "tags": ["dns"]},
                "use_hybrid_only": True,
                "hydrate": True,
            }
        }
    )


# RESPONSE SCHEMAS
class SearchResultItem(BaseModel):
    """Один результат поиска (вектор не отдаём - он большой и клиенту не нужен)."""

    id: str
    category: str
    severity: str
    tags: List[str]
    similarity_score: float = Field(..., ge=-1.0, le=1.0)
    incident: Optional[IncidentRecord] = None


class SearchResponse(BaseModel):
    """
    Ответ API с результатами поиска

    ЧТО: Ранжированный список + сколько времени заняло
    """

    query: str
    top_k: int
    filters: Optional[SearchFilters] = None
    results: List[SearchResultItem]
    processing_time_ms: float = Field(..., ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "dns outage",
                "top_k": 2,
                "filters": None,
                "results": [
                    {"id": "dyn-ddos-2016", "category": "outage", "severity": "critical",
                     "tags": ["dns"], "similarity_score": 1.0, "incident": None},
                ],
                "processing_time_ms": 3.2,
            }
        }
    )


class ErrorResponse(BaseModel):
    error: str
    detail: str
    status_code: int


class HealthResponse(BaseModel):
    """Health check ответ"""

    status: str = Field(..., description="Статус API (healthy/degraded)")
    caches: Dict[str, bool] = Field(..., description="Какие кэши уже загружены")
    version: str = Field(default="1.0.0", description="Версия API")
