"""Synergy partner endpoints.

GET    /v1/synergy/partners         - Active partners + pending invitations
POST   /v1/synergy/partners         - Invite a user
DELETE /v1/synergy/partners         - End a partnership (?partnerId=)
GET    /v1/synergy/invitations      - Received (pending) and sent invitations
POST   /v1/synergy/invitations      - accept / decline / cancel
GET    /v1/synergy/users/search     - Find DMA-active users to invite
GET    /v1/synergy/posts            - A partner's cached posts
POST   /v1/synergy/suggest-comment  - Three AI comment suggestions
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import User
from linkedin_growth.routes.deps import get_current_user, get_db_session, get_linkedin_client
from linkedin_growth.schemas.common import ActionResult
from linkedin_growth.schemas.synergy import (
    InvitationActionRequest,
    InvitationsResponse,
    InviteRequest,
    InviteResponse,
    PartnerPostsResponse,
    PartnersResponse,
    SuggestCommentRequest,
    SuggestCommentResponse,
    UserSearchResponse,
)
from linkedin_growth.services.comment_suggestions import generate_comment_suggestions, resolve_comment_parties
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.synergy import (
    SynergyError,
    accept_invitation,
    cancel_invitation,
    decline_invitation,
    get_partner_posts,
    list_invitations,
    list_partners,
    remove_partner,
    search_users,
    send_invitation,
)

router = APIRouter()


@router.get("/partners", response_model=PartnersResponse)
async def get_partners(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> PartnersResponse:
    return await list_partners(session, user)


@router.post("/partners", response_model=InviteResponse)
async def invite_partner(
    request: InviteRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> InviteResponse:
    try:
        invitation = await send_invitation(session, user, request.partner_id, request.message)
    except SynergyError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return InviteResponse(invitation_id=invitation.invitation_id)


@router.delete("/partners", response_model=ActionResult)
async def delete_partner(
    partner_id: str = Query(alias="partnerId", min_length=1),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ActionResult:
    try:
        await remove_partner(session, user, partner_id)
    except SynergyError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ActionResult(message="Partnership ended")


@router.get("/invitations", response_model=InvitationsResponse)
async def get_invitations(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> InvitationsResponse:
    return await list_invitations(session, user)


@router.post("/invitations", response_model=ActionResult)
async def handle_invitation(
    request: InvitationActionRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ActionResult:
    try:
        if request.action == "accept":
            await accept_invitation(session, user, request.invitation_id)
            message = "Invitation accepted. You are now synergy partners"
        elif request.action == "decline":
            await decline_invitation(session, user, request.invitation_id)
            message = "Invitation declined"
        else:
            await cancel_invitation(session, user, request.invitation_id)
            message = "Invitation cancelled"
    except SynergyError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ActionResult(message=message)


@router.get("/users/search", response_model=UserSearchResponse)
async def search(
    search_term: str = Query(default="", alias="search", max_length=200),
    limit: int = Query(default=10, ge=1, le=50),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> UserSearchResponse:
    return await search_users(session, user, search_term, limit)


@router.get("/posts", response_model=PartnerPostsResponse)
async def partner_posts(
    partner_id: str = Query(alias="partnerId", min_length=1),
    limit: int = Query(default=3, ge=1, le=5),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> PartnerPostsResponse:
    try:
        return await get_partner_posts(session, user, partner_id, limit)
    except SynergyError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/suggest-comment", response_model=SuggestCommentResponse)
async def suggest_comment(
    request: SuggestCommentRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> SuggestCommentResponse:
    """Always returns 3 suggestions; they are stored when the caller is registered."""
    from_user, to_user = await resolve_comment_parties(client, request.partner_id)
    return await generate_comment_suggestions(request.post_urn, request.post_content, from_user, to_user)
