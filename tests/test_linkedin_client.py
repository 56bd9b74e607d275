import httpx
import pytest

from linkedin_growth.services.linkedin_client import (
    LinkedInAPIError,
    LinkedInDMAClient,
    normalize_authorization,
    token_fingerprint,
)


def _client(handler) -> LinkedInDMAClient:
    return LinkedInDMAClient("Bearer test-token", transport=httpx.MockTransport(handler))


def test_normalize_authorization():
    assert normalize_authorization("abc") == "Bearer abc"
    assert normalize_authorization("bearer  abc ") == "Bearer abc"
    assert normalize_authorization("Bearer abc") == "Bearer abc"


def test_token_fingerprint_does_not_leak_token():
    fp = token_fingerprint("Bearer secret-token")
    assert "secret-token" not in fp
    assert fp == token_fingerprint("secret-token")
    assert fp != token_fingerprint("other-token")


@pytest.mark.asyncio
async def test_verify_consent_active_with_member_urn():
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["restli"] = request.headers["X-Restli-Protocol-Version"]
        return httpx.Response(
            200,
            json={"elements": [{"memberComplianceAuthorizationKey": {"member": "urn:li:person:abc"}}]},
        )

    async with _client(handler) as client:
        consent = await client.verify_consent()

    assert consent.is_active is True
    assert consent.member_urn == "urn:li:person:abc"
    assert seen["path"].endswith("/memberAuthorizations")
    assert seen["auth"] == "Bearer test-token"
    assert seen["restli"] == "2.0.0"


@pytest.mark.asyncio
async def test_verify_consent_inactive_cases():
    async with _client(lambda r: httpx.Response(200, json={"elements": []})) as client:
        assert (await client.verify_consent()).is_active is False

    async with _client(lambda r: httpx.Response(401, json={})) as client:
        consent = await client.verify_consent()
        assert consent.is_active is False
        assert consent.member_urn is None

    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    async with _client(boom) as client:
        assert (await client.verify_consent()).is_active is False


@pytest.mark.asyncio
async def test_fetch_snapshot_sends_domain_and_handles_404():
    domains: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        domains.append(request.url.params["domain"])
        if request.url.params["domain"] == "SKILLS":
            return httpx.Response(404)
        return httpx.Response(200, json={"elements": [{"snapshotData": [{"First Name": "Ava"}]}]})

    async with _client(handler) as client:
        profile = await client.fetch_snapshot("PROFILE")
        skills = await client.fetch_snapshot("SKILLS")

    assert profile["elements"][0]["snapshotData"][0]["First Name"] == "Ava"
    assert skills == {"elements": []}
    assert domains == ["PROFILE", "SKILLS"]


@pytest.mark.asyncio
async def test_fetch_snapshot_failure_returns_none():
    async with _client(lambda r: httpx.Response(500, text="oops")) as client:
        assert await client.fetch_snapshot("PROFILE") is None


@pytest.mark.asyncio
async def test_fetch_snapshots_and_count_connections():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["domain"] == "CONNECTIONS":
            return httpx.Response(200, json={"elements": [{"snapshotData": [{}, {}, {}]}]})
        return httpx.Response(500)

    async with _client(handler) as client:
        results = await client.fetch_snapshots("PROFILE", "CONNECTIONS")
        assert results["PROFILE"] is None
        assert await client.count_connections() == 3


@pytest.mark.asyncio
async def test_get_snapshot_raw_relays_upstream_status():
    async with _client(lambda r: httpx.Response(403, text="forbidden")) as client:
        with pytest.raises(LinkedInAPIError) as exc_info:
            await client.get_snapshot_raw("PROFILE")
    assert exc_info.value.status_code == 403
    assert exc_info.value.body == "forbidden"


@pytest.mark.asyncio
async def test_get_snapshot_raw_404_is_empty_page():
    async with _client(lambda r: httpx.Response(404)) as client:
        data = await client.get_snapshot_raw("POSITIONS")
    assert data["elements"] == []
    assert data["paging"]["total"] == 0


@pytest.mark.asyncio
async def test_snapshot_route_rejects_unknown_domain():
    from httpx import ASGITransport, AsyncClient

    from linkedin_growth.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get(
            "/v1/linkedin/snapshot",
            params={"domain": "passwords"},
            headers={"Authorization": "Bearer test-token"},
        )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Unsupported snapshot domain: PASSWORDS"
