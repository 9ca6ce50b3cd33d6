from __future__ import annotations


def test_health_endpoint(client):
    """GET /api/health should return 200 with status=healthy."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "tagsync"
    assert data["version"] == "0.1.0"
    assert data["checks"]["database"] == "ok"


def test_readiness_endpoint(client):
    """GET /api/health/ready should return 200 with status=ready."""
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_health_no_identity_required(client_no_auth):
    """Health endpoints work without the user identity header."""
    assert client_no_auth.get("/api/health").status_code == 200
    assert client_no_auth.get("/api/health/ready").status_code == 200
