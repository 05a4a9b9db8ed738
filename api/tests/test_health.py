"""Tests for health endpoints."""

from fastapi.testclient import TestClient


def test_liveness(client: TestClient) -> None:
    """Test the liveness endpoint."""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness_without_database(client: TestClient) -> None:
    """Readiness reports degraded while Cassandra is not connected."""
    response = client.get("/health/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] is False
    assert "environment" in data


def test_health(client: TestClient) -> None:
    """Test the general health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["app_name"] == "inkwell"
    assert "version" in data
    assert "environment" in data


def test_root(client: TestClient) -> None:
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "Inkwell" in data["message"]
    assert "version" in data


def test_request_id_is_echoed(client: TestClient) -> None:
    """Incoming X-Request-ID is returned on the response."""
    response = client.get("/health/live", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client: TestClient) -> None:
    """A request id is generated when the client sends none."""
    response = client.get("/health/live")
    assert response.headers["X-Request-ID"]


def test_missing_service_is_unavailable(client: TestClient) -> None:
    """Endpoints answer 503 while the database-backed services are down."""
    response = client.get("/v1/posts")
    assert response.status_code == 503
    data = response.json()
    assert data["error"] is True
    assert data["status_code"] == 503
    assert "request_id" in data
