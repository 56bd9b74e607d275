"""Post Pulse endpoints.

GET  /v1/postpulse           - Recent posts with repurpose status
POST /v1/postpulse/repurpose - Draft for re-posting an older post
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from linkedin_growth.routes.deps import get_linkedin_client
from linkedin_growth.schemas.postpulse import (
    PostPulseFilters,
    PostPulseResponse,
    PostTypeFilter,
    RepurposeDraft,
    RepurposeRequest,
    SortBy,
    TimeFilter,
)
from linkedin_growth.services.linkedin_client import LinkedInAPIError, LinkedInDMAClient
from linkedin_growth.services.post_pulse import PostNotFoundError, get_post_pulse, get_repurpose_draft

router = APIRouter()


@router.get("", response_model=PostPulseResponse)
async def list_posts(
    time_filter: TimeFilter = Query(default="all", alias="timeFilter"),
    post_type: PostTypeFilter = Query(default="all", alias="postType"),
    sort_by: SortBy = Query(default="oldest", alias="sortBy"),
    force_refresh: bool = Query(default=False, alias="forceRefresh"),
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> PostPulseResponse:
    """Posts from the last 90 days, filtered and sorted (oldest first by default)."""
    filters = PostPulseFilters(time_filter=time_filter, post_type=post_type, sort_by=sort_by)
    try:
        return await get_post_pulse(client, filters, force_refresh=force_refresh)
    except LinkedInAPIError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/repurpose", response_model=RepurposeDraft)
async def repurpose_post(
    request: RepurposeRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> RepurposeDraft:
    try:
        return await get_repurpose_draft(client, request.post_id)
    except PostNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LinkedInAPIError as e:
        raise HTTPException(status_code=502, detail=str(e))
