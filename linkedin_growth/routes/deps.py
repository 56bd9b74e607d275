"""Shared route dependencies.

Every /v1 endpoint is called with the member's DMA token:

    Authorization: Bearer <DMA token>

The token is forwarded to LinkedIn as-is; it is also how the platform user is
identified (consent check -> member URN -> users row).
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import User
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.users import UserResolutionError, resolve_current_user
from linkedin_growth.stores.postgres import db_available, get_session


async def get_authorization(authorization: str | None = Header(default=None)) -> str:
    """Raises HTTPException 401 when the Authorization header is missing or blank."""
    if not authorization or not authorization.strip():
        raise HTTPException(status_code=401, detail="Authorization header required")
    return authorization.strip()


async def get_linkedin_client(
    authorization: str = Depends(get_authorization),
) -> AsyncGenerator[LinkedInDMAClient, None]:
    client = LinkedInDMAClient(authorization)
    try:
        yield client
    finally:
        await client.close()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; commits when the endpoint returns normally."""
    if not db_available():
        raise HTTPException(status_code=503, detail="Database not available")
    async with get_session() as session:
        yield session


async def get_current_user(
    session: AsyncSession = Depends(get_db_session),
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> User:
    try:
        return await resolve_current_user(session, client)
    except UserResolutionError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
