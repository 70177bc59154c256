import pytest
from httpx import ASGITransport, AsyncClient

from heartline.domain.matching import service
from heartline.main import app
from heartline.obs import health
from heartline.settings import settings


@pytest.mark.asyncio
async def test_liveness(api_client):
    response = await api_client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_readiness_reports_degraded(monkeypatch, api_client):
    async def fake_readiness():
        return 503, {"status": "degraded", "checks": {}}

    monkeypatch.setattr(health, "readiness", fake_readiness)

    response = await api_client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_metrics_requires_admin_token(monkeypatch, api_client):
    monkeypatch.setattr(settings, "obs_metrics_public", False)
    monkeypatch.setattr(settings, "obs_admin_token", "ops-token")

    denied = await api_client.get("/metrics")
    assert denied.status_code == 403

    allowed = await api_client.get("/metrics", headers={"X-Admin-Token": "ops-token"})
    assert allowed.status_code == 200
    assert "heartline_matches_created_total" in allowed.text


@pytest.mark.asyncio
async def test_unknown_route_uses_failure_envelope(api_client):
    response = await api_client.get("/api/v1/nope", headers={"X-Request-Id": "rid-404"})
    assert response.status_code == 404
    body = response.json()
    assert body["status"] == "fail"
    assert body["request_id"] == "rid-404"


@pytest.mark.asyncio
async def test_unexpected_errors_become_500(monkeypatch):
    async def boom(auth_user, params):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(service, "list_matches", boom)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/api/v1/matches", headers={"X-User-Id": "u-1"})

    assert response.status_code == 500
    body = response.json()
    assert body["status"] == "error"
    assert body["reason"] == "internal_error"
    # dev mode exposes the exception text
    assert body["message"] == "database exploded"
