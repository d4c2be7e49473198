"""
Unit tests for the API layer.
"""

import pytest
from fastapi.testclient import TestClient

from projectdesk.api.main import app


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the API."""
    return TestClient(app)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_liveness(self, client: TestClient) -> None:
        """Test the liveness check returns alive."""
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_without_database(self, client: TestClient) -> None:
        """Without a connected database the service reports not ready."""
        response = client.get("/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["checks"]["postgres"] == "unhealthy"
        assert "version" in data


def test_metrics_endpoint(client: TestClient) -> None:
    response = client.get("/metrics/")
    assert response.status_code == 200
    assert "projectdesk_allocation_decisions" in response.text


def test_openapi_lists_allocation_routes(client: TestClient) -> None:
    paths = client.get("/openapi.json").json()["paths"]
    assert "/api/v1/projects/{project_id}/resource-allocations" in paths
    assert "/api/v1/projects/{project_id}/resource-allocations/{allocation_id}" in paths
