"""Raw DMA snapshot proxy.

GET /v1/linkedin/snapshot?domain=PROFILE

Passes LinkedIn's status through for upstream failures (404 is an empty
snapshot, not an error).
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from linkedin_growth.routes.deps import get_linkedin_client
from linkedin_growth.services.linkedin_client import LinkedInAPIError, LinkedInDMAClient
from linkedin_growth.services.snapshot import SnapshotDomain

router = APIRouter()


@router.get("/snapshot")
async def get_snapshot(
    domain: str = Query(
        default=SnapshotDomain.PROFILE,
        description="Snapshot domain",
        examples=list(SnapshotDomain.ALL),
    ),
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> dict[str, Any]:
    domain = domain.strip().upper()
    if domain not in SnapshotDomain.ALL:
        raise HTTPException(status_code=400, detail=f"Unsupported snapshot domain: {domain}")
    try:
        return await client.get_snapshot_raw(domain)
    except LinkedInAPIError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
