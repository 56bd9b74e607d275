"""LinkedIn Member Data Portability (DMA) API client.

Endpoints used:
- memberAuthorizations?q=memberAndApplication (consent check + member URN)
- memberSnapshotData?q=criteria&domain=<DOMAIN> (snapshot records per domain)

Caching:
- Snapshot responses: TTL 15 minutes, keyed by a fingerprint of the bearer token
  (never the raw token) and the domain.

If Redis is unavailable (e.g. tests / local minimal env), the client still works
but skips caching.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import hashlib
import logging
from typing import Any

import httpx

from linkedin_growth.settings import get_settings
from linkedin_growth.services.snapshot import SnapshotDomain, snapshot_records
from linkedin_growth.stores.redis import get_snapshot_cache, set_snapshot_cache

logger = logging.getLogger("uvicorn.error")

RESTLI_PROTOCOL_VERSION = "2.0.0"


class LinkedInAPIError(RuntimeError):
    """Upstream LinkedIn failure carrying the HTTP status to relay."""

    def __init__(self, message: str, status_code: int = 502, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass(frozen=True)
class ConsentStatus:
    is_active: bool
    message: str
    member_urn: str | None = None


def normalize_authorization(authorization: str) -> str:
    """Ensure the header value carries the Bearer scheme."""
    value = authorization.strip()
    if value.lower().startswith("bearer "):
        return "Bearer " + value[7:].strip()
    return f"Bearer {value}"


def token_fingerprint(authorization: str) -> str:
    """Stable, non-reversible cache key component for a bearer token."""
    return hashlib.sha256(normalize_authorization(authorization).encode("utf-8")).hexdigest()[:40]


def _member_urn_from_authorizations(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    elements = data.get("elements")
    if not isinstance(elements, list) or not elements or not isinstance(elements[0], dict):
        return None
    key = elements[0].get("memberComplianceAuthorizationKey")
    if isinstance(key, dict) and isinstance(key.get("member"), str):
        return key["member"]
    return None


class LinkedInDMAClient:
    """Client for the LinkedIn DMA REST API, scoped to one member's token."""

    def __init__(
        self,
        authorization: str,
        *,
        base_url: str | None = None,
        version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.authorization = normalize_authorization(authorization)
        self.base_url = (base_url or settings.linkedin_api_base_url).rstrip("/")
        self.version = version or settings.linkedin_api_version
        self.timeout = timeout or settings.linkedin_timeout_seconds
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def fingerprint(self) -> str:
        return token_fingerprint(self.authorization)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> LinkedInDMAClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self.authorization,
            "LinkedIn-Version": self.version,
            "X-Restli-Protocol-Version": RESTLI_PROTOCOL_VERSION,
        }

    # ============================================================
    # Consent
    # ============================================================

    async def verify_consent(self) -> ConsentStatus:
        """Check that the member granted DMA consent to this application.

        Any upstream failure is reported as inactive consent.
        """
        url = f"{self.base_url}/memberAuthorizations"
        try:
            client = await self._get_client()
            response = await client.get(
                url,
                params={"q": "memberAndApplication"},
                headers=self._headers(),
            )
        except httpx.HTTPError:
            logger.exception("[linkedin] DMA consent check failed")
            return ConsentStatus(is_active=False, message="Error checking DMA consent status")

        if response.status_code >= 400:
            logger.warning(f"[linkedin] memberAuthorizations returned {response.status_code}")
            return ConsentStatus(is_active=False, message="Unable to verify DMA consent status")

        try:
            data = response.json()
        except ValueError:
            return ConsentStatus(is_active=False, message="Unable to verify DMA consent status")

        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list) or not elements:
            return ConsentStatus(is_active=False, message="DMA consent not active")

        return ConsentStatus(
            is_active=True,
            message="DMA consent active",
            member_urn=_member_urn_from_authorizations(data),
        )

    # ============================================================
    # Snapshots
    # ============================================================

    async def _request_snapshot(self, domain: str) -> httpx.Response:
        client = await self._get_client()
        return await client.get(
            f"{self.base_url}/memberSnapshotData",
            params={"q": "criteria", "domain": domain},
            headers=self._headers(),
        )

    async def fetch_snapshot(self, domain: str, use_cache: bool = True) -> dict[str, Any] | None:
        """Fetch one snapshot domain.

        Returns:
            The raw snapshot payload, `{"elements": []}` when LinkedIn has no data
            for the domain (404), or None on any other failure.
        """
        if use_cache:
            cached = await self._try_get_cached(domain)
            if cached is not None:
                return cached

        try:
            response = await self._request_snapshot(domain)
        except httpx.HTTPError:
            logger.exception(f"[linkedin] snapshot fetch failed domain={domain}")
            return None

        if response.status_code == 404:
            payload: dict[str, Any] = {"elements": []}
        elif response.status_code >= 400:
            logger.warning(f"[linkedin] snapshot domain={domain} returned {response.status_code}")
            return None
        else:
            try:
                payload = response.json()
            except ValueError:
                logger.warning(f"[linkedin] snapshot domain={domain} returned invalid JSON")
                return None
            if not isinstance(payload, dict):
                return None

        await self._try_set_cached(domain, payload)
        return payload

    async def fetch_snapshots(self, *domains: str) -> dict[str, dict[str, Any] | None]:
        """Fetch several domains concurrently."""
        results = await asyncio.gather(*(self.fetch_snapshot(d) for d in domains))
        return dict(zip(domains, results))

    async def count_connections(self) -> int:
        """Number of CONNECTIONS records, 0 on failure."""
        payload = await self.fetch_snapshot(SnapshotDomain.CONNECTIONS)
        return len(snapshot_records(payload))

    async def get_snapshot_raw(self, domain: str) -> dict[str, Any]:
        """Proxy variant of fetch_snapshot that surfaces upstream failures.

        Raises:
            LinkedInAPIError: For transport errors and non-404 error statuses.
        """
        try:
            response = await self._request_snapshot(domain)
        except httpx.HTTPError as e:
            raise LinkedInAPIError(f"LinkedIn API request failed: {e}", status_code=502) from e

        if response.status_code == 404:
            return {"elements": [], "paging": {"count": 0, "start": 0, "total": 0}}
        if response.status_code >= 400:
            body = response.text[:500]
            raise LinkedInAPIError(
                f"LinkedIn API error: {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise LinkedInAPIError("LinkedIn API returned invalid JSON", status_code=502) from e
        return data if isinstance(data, dict) else {"elements": []}

    # ============================================================
    # Cache helpers
    # ============================================================

    async def _try_get_cached(self, domain: str) -> dict[str, Any] | None:
        try:
            return await get_snapshot_cache(self.fingerprint, domain)
        except RuntimeError:
            return None

    async def _try_set_cached(self, domain: str, payload: dict[str, Any]) -> None:
        try:
            await set_snapshot_cache(self.fingerprint, domain, payload)
        except RuntimeError:
            return
