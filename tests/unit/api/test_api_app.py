"""Tests for the FastAPI application wiring."""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    from booking_api.main import app
    return TestClient(app)


class TestHealthCheck:
    """Tests for the health check endpoints."""

    def test_ping_returns_ok(self, client: TestClient):
        """Health check should return ok status."""
        response = client.get("/api/ping")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "booking-api"
        assert "timestamp" in data

    def test_health_endpoint_returns_healthy(self, client: TestClient):
        """Health router endpoint should return healthy status."""
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["environment"] == "dev"


class TestCorrelationId:
    """Tests for correlation ID propagation."""

    def test_incoming_id_echoed(self, client: TestClient):
        response = client.get("/api/ping", headers={"X-Correlation-ID": "req-123"})

        assert response.headers["X-Correlation-ID"] == "req-123"

    def test_id_generated_when_missing(self, client: TestClient):
        response = client.get("/api/ping")

        assert response.headers["X-Correlation-ID"]


class TestCorsConfiguration:
    """Tests for CORS middleware configuration."""

    def test_cors_allows_localhost(self, client: TestClient):
        """Preflight from the local frontend is allowed."""
        response = client.options(
            "/api/checkout",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestRoutesRegistered:
    """Tests that all expected routes are registered."""

    def test_api_routes_registered(self):
        from booking_api.main import app

        route_paths = {route.path for route in app.routes}

        assert {
            "/api/ping",
            "/api/health",
            "/api/availability",
            "/api/checkout",
            "/api/payments/stripe",
            "/api/payments/forte",
            "/api/webhooks/stripe",
        } <= route_paths
