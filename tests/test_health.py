# tests/test_health.py
from fastapi import status
from fastapi.testclient import TestClient


def test_health(client: TestClient) -> None:
    """Verify that the health endpoint reports the service as healthy."""
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["status"] == "healthy"
    assert data["service"] == "justify-api"
    assert data["uptime_seconds"] >= 0


def test_root_lists_endpoints(client: TestClient) -> None:
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    assert "POST /api/justify" in r.json()["endpoints"]


def test_request_id_is_echoed(client: TestClient) -> None:
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").headers["X-Request-ID"]


def test_unknown_route(client: TestClient) -> None:
    r = client.get("/api/nope")
    assert r.status_code == status.HTTP_404_NOT_FOUND
