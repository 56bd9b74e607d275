"""Tests for health endpoint and the structured error format."""

import pytest
from httpx import ASGITransport, AsyncClient

from linkedin_growth.main import app
from linkedin_growth.schemas import ReconnectResponse


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_missing_authorization_is_401(client: AsyncClient):
    response = await client.get("/v1/dashboard")
    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "UNAUTHORIZED"
    assert body["error"]["message"] == "Authorization header required"


@pytest.mark.asyncio
async def test_blank_authorization_is_401(client: AsyncClient):
    response = await client.get("/v1/algo", headers={"Authorization": "   "})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/v1/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_dashboard_reconnect_payload(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    """Members without DMA consent get HTTP 200 with needsReconnect."""
    from linkedin_growth.routes import reports as reports_routes

    async def fake_build_dashboard_report(client, now=None):
        return ReconnectResponse(message="Please reconnect your LinkedIn account with DMA permissions")

    monkeypatch.setattr(reports_routes, "build_dashboard_report", fake_build_dashboard_report)

    response = await client.get("/v1/dashboard", headers={"Authorization": "Bearer test-token"})
    assert response.status_code == 200
    data = response.json()
    assert data["needsReconnect"] is True
    assert data["error"] == "DMA not enabled"


@pytest.mark.asyncio
async def test_analytics_rejects_unknown_time_range(client: AsyncClient):
    response = await client.get(
        "/v1/analytics",
        params={"timeRange": "1y"},
        headers={"Authorization": "Bearer test-token"},
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
