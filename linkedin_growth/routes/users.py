"""User registration and post sync.

POST /v1/users/register - Create or refresh the user behind the DMA token
POST /v1/posts/sync     - Refresh the caller's post_cache from LinkedIn
GET  /v1/posts/sync     - Sync status and cached post count
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import User
from linkedin_growth.routes.deps import get_current_user, get_db_session, get_linkedin_client
from linkedin_growth.schemas.users import RegisterRequest, RegisterResponse, SyncResult, SyncStatusResponse
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.post_sync import get_sync_status, sync_user_posts
from linkedin_growth.services.users import UserResolutionError, register_user

router = APIRouter()


@router.post("/users/register", response_model=RegisterResponse)
async def register(
    request: RegisterRequest | None = None,
    session: AsyncSession = Depends(get_db_session),
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> RegisterResponse:
    try:
        user, is_new = await register_user(session, client, request)
    except UserResolutionError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return RegisterResponse(
        message="User registered successfully" if is_new else "User updated successfully",
        user_id=user.user_id,
        is_new_user=is_new,
        dma_active=user.dma_active,
    )


@router.post("/posts/sync", response_model=SyncResult)
async def sync_posts(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> SyncResult:
    return await sync_user_posts(session, user, client)


@router.get("/posts/sync", response_model=SyncStatusResponse)
async def sync_status(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> SyncStatusResponse:
    return await get_sync_status(session, user)
