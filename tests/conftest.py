"""
Общие фикстуры для pytest тестов.

ЧТО: Переиспользуемые тестовые данные (фикстуры)
ЗАЧЕМ: Избежать дублирования кода в тестах

ФИКСТУРЫ:
- embeddings_payload: Три инцидента A, B, C с векторами в 3D
- hybrid_payload: hybrid lookup с термином "dns outage"
- failures_payload: Полные записи каталога (только A и C)
- routes / request_log / transport: httpx.MockTransport вместо сети
- service / catalog: Свежие экземпляры на каждый тест (свои кэши)
"""

import asyncio

import httpx
import pytest
from tenacity import wait_none

from src.catalog import IncidentCatalog
from src.search import SimilaritySearchService
from src.search.provider import make_openai_provider_factory
from src.search.source import StaticDataSource
from src.search.store import HybridLookup, VectorStore

BASE_URL = "https://data.test/api/v1"
PROVIDER_URL = "https://provider.test/v1/embeddings"


def build_transport(routes: dict, request_log: list) -> httpx.MockTransport:
    """
    MockTransport, отвечающий по последнему сегменту пути.

    routes: {"embeddings.json": (200, [...]), "embeddings": callable(request) -> Response}
    """
    async def handler(request: httpx.Request) -> httpx.Response:
        request_log.append(request)
        # Отдаём управление циклу - чтобы конкурентные загрузки реально пересекались
        await asyncio.sleep(0)

        route = routes.get(request.url.path.rsplit("/", 1)[-1])
        if route is None:
            return httpx.Response(404, json={"error": {"message": "not found"}})
        if callable(route):
            return route(request)

        status_code, body = route
        return httpx.Response(status_code, json=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def embeddings_payload() -> list:
    """
    Записи из примера:
        A [1, 0, 0]       - совпадает с "dns outage"
        B [0, 1, 0]       - ортогонален
        C [0.7, 0.7, 0]   - ~0.7071
    """
    return [
        {"id": "A", "vector": [1.0, 0.0, 0.0], "category": "outage",
         "severity": "high", "tags": ["dns", "cloud"]},
        {"id": "B", "vector": [0.0, 1.0, 0.0], "category": "security",
         "severity": "critical", "tags": ["auth"]},
        {"id": "C", "vector": [0.7, 0.7, 0.0], "category": "outage",
         "severity": "medium", "tags": ["dns"]},
    ]


@pytest.fixture
def hybrid_payload() -> dict:
    return {
        "terms": {
            "dns outage": {"vector": [1.0, 0.0, 0.0]},
            "Credential Leak ": {"vector": [0.0, 1.0, 0.0]},
        }
    }


@pytest.fixture
def failures_payload() -> dict:
    """failures.json в формате {"data": [...]}; для B записи нет."""
    return {
        "data": [
            {
                "id": "A",
                "title": "Dyn — Mirai botnet takes down DNS",
                "year": 2016,
                "category": "outage",
                "cause": "architecture",
                "severity": {"level": "high", "score": 8},
                "summary": "DDoS against a managed DNS provider.",
                "tags": ["dns", "cloud"],
                "sources": [{"title": "Postmortem", "url": "https://example.com/dyn",
                             "kind": "primary"}],
            },
            {
                "id": "C",
                "title": "Cloudflare regex rollout",
                "year": 2019,
                "category": "outage",
                "cause": "deployment-validation",
                "severity": "medium",
                "summary": "A WAF rule exhausted CPU globally.",
                "tags": ["dns"],
            },
        ]
    }


@pytest.fixture
def request_log() -> list:
    """Все запросы, прошедшие через MockTransport."""
    return []


@pytest.fixture
def routes(embeddings_payload, hybrid_payload, failures_payload) -> dict:
    return {
        "embeddings.json": (200, embeddings_payload),
        "hybrid_lookup.json": (200, hybrid_payload),
        "failures.json": (200, failures_payload),
        "patterns.json": (200, [{"id": "config-push", "title": "Global config push"}]),
        "tags.json": (200, {"version": "1.0", "free_tags": []}),
        "embeddings": (200, {"data": [{"embedding": [0.0, 1.0, 0.0], "index": 0}]}),
    }


@pytest.fixture
def transport(routes, request_log) -> httpx.MockTransport:
    return build_transport(routes, request_log)


@pytest.fixture
def source(transport) -> StaticDataSource:
    return StaticDataSource(BASE_URL, transport=transport)


@pytest.fixture
def service(source, transport) -> SimilaritySearchService:
    """Сервис поиска поверх MockTransport, кэши пустые."""
    return SimilaritySearchService(
        store=VectorStore(source),
        lookup=HybridLookup(source),
        provider_factory=make_openai_provider_factory(url=PROVIDER_URL, transport=transport),
    )


@pytest.fixture
def catalog(source) -> IncidentCatalog:
    """Каталог без пауз между повторами."""
    return IncidentCatalog(source, retry_wait=wait_none())
