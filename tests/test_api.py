"""
Тесты для FastAPI endpoints (api/main.py).

ЧТО ТЕСТИРУЕМ:
1. GET / - информация об API
2. GET /health - состояние кэшей
3. POST /api/v1/search - поиск, фильтры, hydrate, коды ошибок (422, 502, 503)
4. GET /api/v1/failures - листинг и поиск по id

АРХИТЕКТУРА:
- Используем TestClient от FastAPI
- Тесты НЕ запускают реальный сервер и НЕ ходят в сеть
- Сервис и каталог подменяются через dependency_overrides (MockTransport)
"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_catalog, get_search_service
from api.main import app


@pytest.fixture
def client(service, catalog):
    """
    Тестовый клиент с подменёнными зависимостями.

    ЗАЧЕМ: У каждого теста свежие кэши, данные из conftest.
    """
    app.dependency_overrides[get_search_service] = lambda: service
    app.dependency_overrides[get_catalog] = lambda: catalog

    yield TestClient(app)

    app.dependency_overrides.clear()


class TestRootEndpoint:
    """Тесты для корневого эндпоинта (GET /)."""

    def test_root_returns_200(self, client):
        response = client.get("/")
        assert response.status_code == 200

    def test_root_has_correct_info(self, client):
        data = client.get("/").json()

        assert data["name"] == "Tech Failures Search API"
        assert data["endpoints"]["search"] == "/api/v1/search"


class TestHealthEndpoint:
    """Тесты для health check эндпоинта (GET /health)."""

    def test_degraded_before_data_is_loaded(self, client):
        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["caches"] == {"embeddings_loaded": False, "hybrid_lookup_loaded": False}

    def test_healthy_after_search(self, client):
        client.post("/api/v1/search", json={"query": "dns outage"})

        data = client.get("/health").json()

        assert data["status"] == "healthy"


class TestSearchEndpoint:
    """Тесты для поиска (POST /api/v1/search)."""

    def test_search_returns_ranked_results(self, client):
        response = client.post("/api/v1/search", json={"query": "DNS Outage", "top_k": 2})

        assert response.status_code == 200
        data = response.json()
        assert [r["id"] for r in data["results"]] == ["A", "C"]
        assert data["results"][0]["similarity_score"] == pytest.approx(1.0)
        assert data["results"][0]["incident"] is None
        assert "vector" not in data["results"][0]

    def test_search_response_structure(self, client):
        data = client.post("/api/v1/search", json={"query": "dns outage"}).json()

        assert data["query"] == "dns outage"
        assert data["top_k"] == 5
        assert data["processing_time_ms"] >= 0
        assert set(data["results"][0]) >= {"id", "category", "severity", "tags", "similarity_score"}

    def test_search_with_filters(self, client):
        response = client.post("/api/v1/search", json={
            "query": "dns outage",
            "filters": {"category": "outage", "tags": ["dns", "cloud"]},
        })

        assert response.status_code == 200
        assert [r["id"] for r in response.json()["results"]] == ["A"]

    def test_search_hydrate_attaches_incidents(self, client):
        """B нет в каталоге - при hydrate он отбрасывается."""
        response = client.post("/api/v1/search", json={"query": "dns outage", "hydrate": True})

        results = response.json()["results"]
        assert [r["id"] for r in results] == ["A", "C"]
        assert results[0]["incident"]["companies"] == ["Dyn"]

    def test_unknown_term_returns_guidance(self, client):
        response = client.post("/api/v1/search", json={"query": "unrecognized term"})

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "No Embedding Available"
        assert "hybrid lookup" in data["detail"]

    def test_provider_fallback(self, client):
        response = client.post("/api/v1/search", json={
            "query": "leaked oauth tokens",
            "top_k": 1,
            "use_hybrid_only": False,
            "embedding_api_key": "sk-test",
        })

        assert response.status_code == 200
        assert response.json()["results"][0]["id"] == "B"

    def test_provider_error_returns_502(self, client, routes):
        routes["embeddings"] = (401, {"error": {"message": "Incorrect API key provided"}})

        response = client.post("/api/v1/search", json={
            "query": "leaked oauth tokens",
            "use_hybrid_only": False,
            "embedding_api_key": "sk-bad",
        })

        assert response.status_code == 502
        assert response.json()["detail"] == "Incorrect API key provided"

    def test_data_unavailable_returns_503(self, client, routes):
        routes["embeddings.json"] = (500, {})

        response = client.post("/api/v1/search", json={"query": "dns outage"})

        assert response.status_code == 503
        assert response.json()["error"] == "Data Unavailable"

    def test_empty_query_rejected(self, client):
        response = client.post("/api/v1/search", json={"query": ""})
        assert response.status_code == 422

    def test_missing_query_rejected(self, client):
        response = client.post("/api/v1/search", json={"top_k": 3})
        assert response.status_code == 422


class TestCatalogEndpoints:
    """Тесты для каталога (GET /api/v1/failures...)."""

    def test_list_failures(self, client):
        data = client.get("/api/v1/failures").json()

        assert data["total"] == 2
        assert [f["id"] for f in data["data"]] == ["A", "C"]

    def test_list_failures_with_filters(self, client):
        response = client.get(
            "/api/v1/failures", params={"category": "outage", "tags": ["cloud"], "limit": 1}
        )

        data = response.json()
        assert data["total"] == 1
        assert data["data"][0]["id"] == "A"

    def test_get_failure_by_id(self, client):
        response = client.get("/api/v1/failures/C")

        assert response.status_code == 200
        assert response.json()["severity"] == {"level": "medium", "score": None, "financial": None}

    def test_unknown_failure_returns_404(self, client):
        response = client.get("/api/v1/failures/nope")
        assert response.status_code == 404

    def test_patterns_and_tags(self, client):
        assert client.get("/api/v1/patterns").json()[0]["id"] == "config-push"
        assert client.get("/api/v1/tags").json()["version"] == "1.0"


class TestOpenApiSchema:
    """Тесты для документации ошибок в OpenAPI."""

    def test_search_documents_error_responses(self, client):
        schema = client.get("/openapi.json").json()
        responses = schema["paths"]["/api/v1/search"]["post"]["responses"]

        for code in ("422", "502", "503"):
            ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
            assert ref.endswith("/ErrorResponse")
