"""Tests for the HTTP routes."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from stylescout.agents.search_agent import SearchAgent
from stylescout.api.middleware import RequestLoggingMiddleware
from stylescout.api.routes.discovery import router as discovery_router
from stylescout.api.routes.styling import router as styling_router
from stylescout.api.routes.trends import router as trends_router
from stylescout.state.models import SearchOutcome


def create_test_app(agent: SearchAgent, trend_store) -> FastAPI:
    """Create a minimal FastAPI app for testing."""
    app = FastAPI()
    app.include_router(discovery_router)
    app.include_router(styling_router)
    app.include_router(trends_router)
    app.state.search_agent = agent
    app.state.trend_store = trend_store
    return app


@pytest.fixture
def agent(catalog_fetcher, trend_store):
    return SearchAgent(catalog_fetcher, trend_store)


@pytest.fixture
def client(agent, trend_store):
    return TestClient(create_test_app(agent, trend_store))


class TestDiscoverySearchRoute:
    """Tests for POST /api/discovery/search."""

    def test_search_returns_camel_case_products(self, client):
        response = client.post(
            "/api/discovery/search",
            json={"userId": "u1", "query": "summer dress", "platform": "HM"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [p["id"] for p in data["products"]] == ["h4"]
        product = data["products"][0]
        assert "confidenceScore" in product
        assert "imageUrl" in product
        assert data["intent"]["productType"] == "dresses"
        assert data["trendMethod"] == "vector"

    def test_platforms_list_wins_over_platform(self, client, agent):
        agent.discovery_search = AsyncMock(return_value=SearchOutcome(products=[]))

        client.post(
            "/api/discovery/search",
            json={"userId": "u1", "query": "shirt", "platform": "zara", "platforms": ["Myntra", "hm"]},
        )

        kwargs = agent.discovery_search.call_args.kwargs
        assert kwargs["platforms"] == ["myntra", "hm"]

    def test_no_results_message(self, client):
        response = client.post(
            "/api/discovery/search",
            json={"userId": "u1", "query": "saree", "platforms": ["zara"]},
        )

        data = response.json()
        assert data["products"] == []
        assert data["message"] == "No matching saree found. Try a different search."

    def test_missing_user_id(self, client):
        response = client.post("/api/discovery/search", json={"query": "shirt"})
        assert response.status_code == 422

    def test_failure_returns_error_body(self, client, agent):
        agent.discovery_search = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/api/discovery/search", json={"userId": "u1", "query": "shirt"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Search failed"}


class TestUniversalSearchRoute:
    def test_universal_search(self, client):
        response = client.post("/api/universal/search", json={"userId": "u1", "query": "kurta"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["products"]
        assert data["trendMethod"] == "keyword"

    def test_query_required(self, client):
        response = client.post("/api/universal/search", json={"userId": "u1", "query": ""})
        assert response.status_code == 422


class TestSuggestRoute:
    """Tests for POST /api/suggest."""

    def test_fallback_suggestion(self, client):
        response = client.post("/api/suggest", json={"userId": "u1", "query": "beach holiday"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["llmUsed"] is False
        assert "linen or cotton" in data["suggestion"]

    def test_blank_query(self, client):
        response = client.post("/api/suggest", json={"userId": "u1", "query": "   "})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Please enter a query."}

    def test_failure(self, client, agent):
        agent.suggest = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/api/suggest", json={"userId": "u1", "query": "gym"})

        assert response.status_code == 500
        assert response.json()["success"] is False


class TestAnalyzeRoute:
    """Tests for POST /api/analyze."""

    def test_fallback_analysis(self, client):
        response = client.post(
            "/api/analyze",
            json={"userId": "u1", "product": {"title": "Linen Shirt", "price": "1299"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["llmUsed"] is False
        assert set(data["analysis"]) == {"occasion", "pairing", "tips"}

    def test_product_required(self, client):
        response = client.post("/api/analyze", json={"userId": "u1"})
        assert response.status_code == 422

    def test_failure(self, client, agent):
        agent.analyze_product = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/api/analyze", json={"userId": "u1", "product": {"title": "Tee"}})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed"}


class TestBodyRecommendRoute:
    """Tests for POST /api/body-recommend."""

    def test_recommendations(self, client):
        response = client.post("/api/body-recommend", json={"userId": "u1", "bodyType": "pear"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["bodyType"] == "pear"
        assert data["products"]
        assert data["styleGuide"]["flattering"]
        assert data["matchedTrends"] == ["Relaxed Tailoring"]

    def test_invalid_body_type(self, client):
        response = client.post("/api/body-recommend", json={"userId": "u1", "bodyType": "triangle"})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"].startswith("Invalid body type. Must be one of: apple, pear")

    def test_failure(self, client, agent):
        agent.recommend_for_body_type = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/api/body-recommend", json={"userId": "u1", "bodyType": "apple"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to get recommendations"}


class TestTrendRoutes:
    """Tests for the /api/trends endpoints."""

    def test_list_trends(self, client):
        response = client.get("/api/trends")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == len(data["trends"]) > 0
        assert all("embedding" not in t for t in data["trends"])
        assert all(t["confidence_label"] in {"High", "Medium", "Low"} for t in data["trends"])

    def test_retrieve_keyword(self, client):
        response = client.post("/api/trends/retrieve", json={"query": "kurta"})

        data = response.json()
        assert data["method"] == "keyword"
        assert [t["trend_name"] for t in data["trends"]] == ["Elevated Ethnic"]

    def test_retrieve_with_options(self, client):
        response = client.post(
            "/api/trends/retrieve",
            json={"query": "boat neck structured clothing", "minConfidence": 0.5, "topK": 2},
        )

        assert [t["trend_name"] for t in response.json()["trends"]] == ["Relaxed Tailoring"]

    def test_top_k_bounds(self, client):
        response = client.post("/api/trends/retrieve", json={"query": "dress", "topK": 0})
        assert response.status_code == 422


class TestRequestLoggingMiddleware:
    def test_request_id_echoed(self, agent, trend_store):
        app = create_test_app(agent, trend_store)
        app.add_middleware(RequestLoggingMiddleware)
        client = TestClient(app)

        response = client.get("/api/trends", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"

    def test_request_id_generated(self, agent, trend_store):
        app = create_test_app(agent, trend_store)
        app.add_middleware(RequestLoggingMiddleware)

        response = TestClient(app).get("/api/trends")

        assert len(response.headers["X-Request-ID"]) == 8


class TestHealthCheck:
    """Tests for GET /health on the assembled app."""

    def test_reports_trend_count(self, trend_store, monkeypatch):
        from stylescout.main import app

        monkeypatch.setattr(app.state, "trend_store", trend_store, raising=False)

        response = TestClient(app).get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["trends_loaded"] == 12
        assert data["llm_enabled"] is False
        assert "hits" in data["cache"]

    def test_no_store_yet(self, monkeypatch):
        from stylescout.main import app

        monkeypatch.setattr(app.state, "trend_store", None, raising=False)

        assert TestClient(app).get("/health").json()["trends_loaded"] == 0
