"""Synergy partner management.

Flow:
1. A sends an invitation to B (pending, expires after INVITATION_EXPIRY_DAYS)
2. B accepts or declines; A may cancel while pending
3. Accepting creates (or reactivates) the partnership row for the ordered pair
4. Partners can read each other's cached posts and get comment suggestions

Partnerships are keyed by `ordered_pair(a, b)` so each pair has one row.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from urllib.parse import quote

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import (
    AccountStatus,
    InvitationStatus,
    PartnerStatus,
    PostCache,
    SynergyInvitation,
    SynergyPartner,
    User,
    UserProfile,
)
from linkedin_growth.schemas.synergy import (
    InvitationItem,
    InvitationsResponse,
    PartnerItem,
    PartnerPost,
    PartnerPostsResponse,
    PartnersResponse,
    UserSearchMetadata,
    UserSearchResponse,
    UserSearchResult,
    UserSummary,
)
from linkedin_growth.settings import get_settings

logger = logging.getLogger("uvicorn.error")

DEFAULT_INVITATION_MESSAGE = "Would you like to become Synergy partners?"
SENT_INVITATIONS_LIMIT = 10
MAX_PARTNER_POSTS = 5


class SynergyError(ValueError):
    """Base for synergy rule violations; carries the HTTP status to return."""

    status_code = 400


class SelfInvitationError(SynergyError):
    pass


class InvitationExistsError(SynergyError):
    status_code = 409


class AlreadyPartnersError(SynergyError):
    status_code = 409


class InvitationNotFoundError(SynergyError):
    status_code = 404


class PartnerNotFoundError(SynergyError):
    status_code = 404


class NotPartnersError(SynergyError):
    status_code = 403


def ordered_pair(a: int, b: int) -> tuple[int, int]:
    """Canonical (smaller, larger) key for a partnership."""
    return (a, b) if a < b else (b, a)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def default_avatar_url(name: str | None) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name or 'User')}&background=0ea5e9&color=fff"


def user_summary(user: User) -> UserSummary:
    """Public view with display defaults for missing profile fields."""
    return UserSummary(
        id=user.user_id,
        name=user.name or "LinkedIn User",
        email=user.email,
        avatar_url=user.avatar_url or default_avatar_url(user.name),
        headline=user.headline or "LinkedIn Professional",
        industry=user.industry or "Professional Services",
        location=user.location or "Location not specified",
    )


# ============================================================
# Lookups
# ============================================================


async def _get_user(session: AsyncSession, public_id: str) -> User:
    result = await session.execute(select(User).where(User.user_id == public_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise PartnerNotFoundError(f"User {public_id} not found")
    return user


async def _get_partnership(session: AsyncSession, a: int, b: int) -> SynergyPartner | None:
    a, b = ordered_pair(a, b)
    result = await session.execute(
        select(SynergyPartner).where(SynergyPartner.a_user_id == a, SynergyPartner.b_user_id == b)
    )
    return result.scalar_one_or_none()


async def _active_partner_ids(session: AsyncSession, user: User) -> set[int]:
    result = await session.execute(
        select(SynergyPartner).where(
            or_(SynergyPartner.a_user_id == user.id, SynergyPartner.b_user_id == user.id),
            SynergyPartner.status == PartnerStatus.ACTIVE,
        )
    )
    return {p.other(user.id) for p in result.scalars().all()}


async def _pending_counterpart_ids(session: AsyncSession, user: User) -> set[int]:
    result = await session.execute(
        select(SynergyInvitation).where(
            or_(SynergyInvitation.from_user_id == user.id, SynergyInvitation.to_user_id == user.id),
            SynergyInvitation.status == InvitationStatus.PENDING,
        )
    )
    ids: set[int] = set()
    for inv in result.scalars().all():
        ids.add(inv.to_user_id if inv.from_user_id == user.id else inv.from_user_id)
    return ids


async def _pending_invitation_for(
    session: AsyncSession,
    invitation_id: str,
    *,
    to_user_id: int | None = None,
    from_user_id: int | None = None,
) -> SynergyInvitation:
    query = select(SynergyInvitation).where(
        SynergyInvitation.invitation_id == invitation_id,
        SynergyInvitation.status == InvitationStatus.PENDING,
    )
    if to_user_id is not None:
        query = query.where(SynergyInvitation.to_user_id == to_user_id)
    if from_user_id is not None:
        query = query.where(SynergyInvitation.from_user_id == from_user_id)

    result = await session.execute(query)
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise InvitationNotFoundError("Invitation not found or not pending")
    return invitation


# ============================================================
# Invitations
# ============================================================


async def send_invitation(
    session: AsyncSession,
    from_user: User,
    to_public_id: str,
    message: str | None = None,
    now: datetime | None = None,
) -> SynergyInvitation:
    """Invite another user to become a synergy partner.

    Raises:
        PartnerNotFoundError: Target user does not exist.
        SelfInvitationError: Inviting yourself.
        AlreadyPartnersError: An active partnership already exists.
        InvitationExistsError: A pending invitation exists in either direction.
    """
    now = now or _utcnow()
    to_user = await _get_user(session, to_public_id)
    if to_user.id == from_user.id:
        raise SelfInvitationError("You cannot invite yourself")

    partnership = await _get_partnership(session, from_user.id, to_user.id)
    if partnership is not None and partnership.status == PartnerStatus.ACTIVE:
        raise AlreadyPartnersError("You are already synergy partners")

    result = await session.execute(
        select(SynergyInvitation).where(
            or_(
                and_(SynergyInvitation.from_user_id == from_user.id, SynergyInvitation.to_user_id == to_user.id),
                and_(SynergyInvitation.from_user_id == to_user.id, SynergyInvitation.to_user_id == from_user.id),
            )
        )
    )
    existing = result.scalars().all()
    if any(inv.status == InvitationStatus.PENDING for inv in existing):
        raise InvitationExistsError("Invitation already sent")

    expires_at = now + timedelta(days=get_settings().invitation_expiry_days)
    # (from, to) is unique: a closed invitation in this direction is reopened.
    invitation = next((inv for inv in existing if inv.from_user_id == from_user.id), None)
    if invitation is None:
        invitation = SynergyInvitation(from_user_id=from_user.id, to_user_id=to_user.id)
        session.add(invitation)
    invitation.status = InvitationStatus.PENDING
    invitation.message = message or DEFAULT_INVITATION_MESSAGE
    invitation.expires_at = expires_at
    invitation.responded_at = None
    invitation.created_at = now

    await session.flush()
    logger.info(f"[synergy] invitation {invitation.invitation_id} {from_user.user_id} -> {to_user.user_id}")
    return invitation


async def accept_invitation(
    session: AsyncSession,
    user: User,
    invitation_id: str,
    now: datetime | None = None,
) -> SynergyPartner:
    """Accept a pending invitation addressed to `user` and activate the partnership.

    Raises:
        InvitationNotFoundError: No pending invitation with this id for this user,
            or it has expired (the expiry is committed before raising).
    """
    now = now or _utcnow()
    invitation = await _pending_invitation_for(session, invitation_id, to_user_id=user.id)
    if _as_aware(invitation.expires_at) < now:
        invitation.status = InvitationStatus.EXPIRED
        await session.commit()
        logger.info(f"[synergy] invitation {invitation.invitation_id} expired on accept")
        raise InvitationNotFoundError("Invitation has expired")

    invitation.status = InvitationStatus.ACCEPTED
    invitation.responded_at = now

    a, b = ordered_pair(invitation.from_user_id, invitation.to_user_id)
    partnership = await _get_partnership(session, a, b)
    if partnership is None:
        partnership = SynergyPartner(
            a_user_id=a,
            b_user_id=b,
            status=PartnerStatus.ACTIVE,
            partnership_type="mutual",
            engagement_score=0,
            total_interactions=0,
        )
        session.add(partnership)
    else:
        partnership.status = PartnerStatus.ACTIVE

    await session.flush()
    logger.info(f"[synergy] partnership active {a}<->{b}")
    return partnership


async def decline_invitation(
    session: AsyncSession,
    user: User,
    invitation_id: str,
    now: datetime | None = None,
) -> SynergyInvitation:
    invitation = await _pending_invitation_for(session, invitation_id, to_user_id=user.id)
    invitation.status = InvitationStatus.DECLINED
    invitation.responded_at = now or _utcnow()
    await session.flush()
    return invitation


async def cancel_invitation(
    session: AsyncSession,
    user: User,
    invitation_id: str,
    now: datetime | None = None,
) -> SynergyInvitation:
    """Withdraw a pending invitation; only the sender may cancel."""
    invitation = await _pending_invitation_for(session, invitation_id, from_user_id=user.id)
    invitation.status = InvitationStatus.CANCELLED
    invitation.responded_at = now or _utcnow()
    await session.flush()
    return invitation


def _invitation_item(invitation: SynergyInvitation, other: User, kind: str) -> InvitationItem:
    return InvitationItem(
        id=invitation.invitation_id,
        type=kind,
        message=invitation.message,
        status=invitation.status.value,
        created_at=invitation.created_at,
        expires_at=invitation.expires_at,
        user=user_summary(other),
    )


async def _received_pending(session: AsyncSession, user: User) -> list[InvitationItem]:
    result = await session.execute(
        select(SynergyInvitation, User)
        .join(User, User.id == SynergyInvitation.from_user_id)
        .where(
            SynergyInvitation.to_user_id == user.id,
            SynergyInvitation.status == InvitationStatus.PENDING,
        )
        .order_by(SynergyInvitation.created_at.desc())
    )
    return [_invitation_item(inv, sender, "received") for inv, sender in result.all()]


async def list_invitations(session: AsyncSession, user: User) -> InvitationsResponse:
    """Pending invitations received plus the last 10 sent."""
    received = await _received_pending(session, user)

    result = await session.execute(
        select(SynergyInvitation, User)
        .join(User, User.id == SynergyInvitation.to_user_id)
        .where(
            SynergyInvitation.from_user_id == user.id,
            SynergyInvitation.status.in_(
                [InvitationStatus.PENDING, InvitationStatus.ACCEPTED, InvitationStatus.DECLINED]
            ),
        )
        .order_by(SynergyInvitation.created_at.desc())
        .limit(SENT_INVITATIONS_LIMIT)
    )
    sent = [_invitation_item(inv, recipient, "sent") for inv, recipient in result.all()]

    return InvitationsResponse(
        received=received,
        sent=sent,
        received_count=len(received),
        sent_count=len(sent),
        timestamp=_utcnow(),
    )


# ============================================================
# Partners
# ============================================================


async def list_partners(session: AsyncSession, user: User) -> PartnersResponse:
    result = await session.execute(
        select(SynergyPartner)
        .where(
            or_(SynergyPartner.a_user_id == user.id, SynergyPartner.b_user_id == user.id),
            SynergyPartner.status == PartnerStatus.ACTIVE,
        )
        .order_by(SynergyPartner.created_at.desc())
    )
    partnerships = result.scalars().all()

    partner_ids = [p.other(user.id) for p in partnerships]
    users_by_id: dict[int, User] = {}
    if partner_ids:
        users_result = await session.execute(select(User).where(User.id.in_(partner_ids)))
        users_by_id = {u.id: u for u in users_result.scalars().all()}

    partners: list[PartnerItem] = []
    for partnership in partnerships:
        partner = users_by_id.get(partnership.other(user.id))
        if partner is None:
            continue
        partners.append(
            PartnerItem(
                **user_summary(partner).model_dump(),
                linkedin_member_urn=partner.linkedin_member_urn,
                dma_active=partner.dma_active,
                engagement_score=partnership.engagement_score,
                total_interactions=partnership.total_interactions,
                partnership_type=partnership.partnership_type,
                partnership_date=partnership.created_at,
            )
        )

    invitations = await _received_pending(session, user)
    return PartnersResponse(
        partners=partners,
        invitations=invitations,
        total_partners=len(partners),
        pending_invitations=len(invitations),
    )


async def remove_partner(session: AsyncSession, user: User, partner_public_id: str) -> SynergyPartner:
    """End an active partnership.

    Raises:
        PartnerNotFoundError: Unknown user or no active partnership with them.
    """
    partner = await _get_user(session, partner_public_id)
    partnership = await _get_partnership(session, user.id, partner.id)
    if partnership is None or partnership.status != PartnerStatus.ACTIVE:
        raise PartnerNotFoundError("Active partnership not found")

    partnership.status = PartnerStatus.ENDED
    await session.flush()
    logger.info(f"[synergy] partnership ended {user.user_id} <-> {partner.user_id}")
    return partnership


async def search_users(
    session: AsyncSession,
    user: User,
    term: str = "",
    limit: int = 10,
) -> UserSearchResponse:
    """DMA-active users matching `term`, excluding self, partners and pending invitees."""
    partner_ids = await _active_partner_ids(session, user)
    pending_ids = await _pending_counterpart_ids(session, user)
    excluded = partner_ids | pending_ids | {user.id}

    query = (
        select(User, UserProfile)
        .outerjoin(UserProfile, UserProfile.user_id == User.id)
        .where(
            User.dma_active.is_(True),
            User.account_status == AccountStatus.ACTIVE,
            User.id.not_in(excluded),
        )
        .order_by(User.created_at.desc())
        .limit(limit)
    )
    term = term.strip()
    if term:
        pattern = f"%{term}%"
        query = query.where(
            or_(
                User.name.ilike(pattern),
                User.email.ilike(pattern),
                User.headline.ilike(pattern),
                User.industry.ilike(pattern),
                User.location.ilike(pattern),
            )
        )

    result = await session.execute(query)
    users = [
        UserSearchResult(
            **user_summary(candidate).model_dump(),
            linkedin_member_urn=candidate.linkedin_member_urn,
            dma_active=candidate.dma_active,
            total_connections=profile.total_connections if profile else 0,
            profile_completeness=profile.profile_completeness_score if profile else 0,
            joined_date=candidate.created_at,
        )
        for candidate, profile in result.all()
    ]

    return UserSearchResponse(
        users=users,
        total_found=len(users),
        search_term=term,
        metadata=UserSearchMetadata(
            search_performed=bool(term),
            excluded_partners=len(partner_ids),
            excluded_pending=len(pending_ids),
            timestamp=_utcnow(),
        ),
    )


async def get_partner_posts(
    session: AsyncSession,
    user: User,
    partner_public_id: str,
    limit: int = 3,
    now: datetime | None = None,
) -> PartnerPostsResponse:
    """Newest cached posts of an active partner.

    Raises:
        PartnerNotFoundError: Unknown partner user.
        NotPartnersError: No active partnership with this user.
    """
    now = now or _utcnow()
    limit = max(1, min(limit, MAX_PARTNER_POSTS))
    partner = await _get_user(session, partner_public_id)
    partnership = await _get_partnership(session, user.id, partner.id)
    if partnership is None or partnership.status != PartnerStatus.ACTIVE:
        raise NotPartnersError("Not synergy partners with this user")

    result = await session.execute(
        select(PostCache)
        .where(PostCache.user_id == partner.id)
        .order_by(PostCache.created_at_ms.desc())
        .limit(limit)
    )
    stale_after = timedelta(minutes=get_settings().partner_posts_stale_minutes)
    posts = [
        PartnerPost(
            id=row.post_urn,
            content=row.content or "",
            media_type=row.media_type.value,
            media_url=row.media_url,
            linkedin_url=row.linkedin_url,
            created_at=row.created_at_ms,
            likes=row.likes,
            comments=row.comments,
            shares=row.shares,
            engagement_rate=row.engagement_rate,
            fetched_at=row.fetched_at,
            source="cache",
            is_stale=(now - _as_aware(row.fetched_at)) > stale_after,
        )
        for row in result.scalars().all()
    ]

    return PartnerPostsResponse(
        posts=posts,
        count=len(posts),
        source="cache" if posts else "empty",
        partner_sync_status=partner.posts_sync_status.value,
        last_sync=partner.last_posts_sync,
    )
