"""Platform users: identity resolution, registration and profile stats.

Identity comes from the DMA token itself: the memberAuthorizations consent
check returns the member URN, which is the lookup key into `users`.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import AccountStatus, User, UserProfile
from linkedin_growth.schemas.users import RegisterRequest
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.snapshot import SnapshotDomain, first_record

logger = logging.getLogger("uvicorn.error")


class UserResolutionError(RuntimeError):
    """The token does not map to an active, registered user."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


def _clean(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def profile_fields(profile: dict[str, Any]) -> dict[str, str | None]:
    """Extract user columns from a PROFILE snapshot record."""
    first = _clean(profile.get("First Name"))
    last = _clean(profile.get("Last Name"))
    name = " ".join(p for p in (first, last) if p) or None
    return {
        "name": name,
        "headline": _clean(profile.get("Headline")),
        "industry": _clean(profile.get("Industry")),
        "location": _clean(profile.get("Location")) or _clean(profile.get("Geo Location")),
    }


async def get_user_by_member_urn(session: AsyncSession, member_urn: str) -> User | None:
    result = await session.execute(select(User).where(User.linkedin_member_urn == member_urn))
    return result.scalar_one_or_none()


async def get_user_by_public_id(session: AsyncSession, user_id: str) -> User | None:
    result = await session.execute(select(User).where(User.user_id == user_id))
    return result.scalar_one_or_none()


async def resolve_current_user(session: AsyncSession, client: LinkedInDMAClient) -> User:
    """Map the caller's DMA token to a registered user.

    Raises:
        UserResolutionError: Consent inactive, URN missing, user unknown or not active.
    """
    consent = await client.verify_consent()
    if not consent.is_active or not consent.member_urn:
        raise UserResolutionError("Invalid token or user not found")

    user = await get_user_by_member_urn(session, consent.member_urn)
    if user is None:
        raise UserResolutionError("Invalid token or user not found")
    if user.account_status != AccountStatus.ACTIVE:
        raise UserResolutionError("Account is not active", status_code=403)
    return user


async def register_user(
    session: AsyncSession,
    client: LinkedInDMAClient,
    request: RegisterRequest | None = None,
) -> tuple[User, bool]:
    """Create or refresh the user behind the token.

    Request fields win over PROFILE snapshot values; existing values are kept
    when both are missing.

    Returns:
        (user, is_new_user)

    Raises:
        UserResolutionError: DMA consent is not active.
    """
    consent = await client.verify_consent()
    if not consent.is_active or not consent.member_urn:
        raise UserResolutionError(consent.message or "DMA consent not active", status_code=403)

    request = request or RegisterRequest()
    snapshot = profile_fields(first_record(await client.fetch_snapshot(SnapshotDomain.PROFILE)))
    fields = {
        "name": request.name or snapshot["name"],
        "email": request.email,
        "avatar_url": request.avatar_url,
        "headline": request.headline or snapshot["headline"],
        "industry": request.industry or snapshot["industry"],
        "location": request.location or snapshot["location"],
    }

    now = datetime.now(timezone.utc)
    user = await get_user_by_member_urn(session, consent.member_urn)
    is_new = user is None
    if user is None:
        user = User(linkedin_member_urn=consent.member_urn)
        session.add(user)

    for key, value in fields.items():
        if value is not None:
            setattr(user, key, value)
    user.dma_active = True
    user.dma_consent_date = now

    await session.flush()
    logger.info(f"[users] {'registered' if is_new else 'refreshed'} user={user.user_id}")
    return user, is_new


async def update_profile_stats(
    session: AsyncSession,
    user: User,
    profile: dict[str, Any],
    completeness_percent: int,
    total_connections: int,
) -> UserProfile:
    """Upsert user_profiles after a dashboard computation."""
    result = await session.execute(select(UserProfile).where(UserProfile.user_id == user.id))
    row = result.scalar_one_or_none()
    if row is None:
        row = UserProfile(user_id=user.id)
        session.add(row)

    fields = profile_fields(profile)
    row.headline = fields["headline"] or row.headline
    row.summary = _clean(profile.get("Summary")) or row.summary
    row.industry = fields["industry"] or row.industry
    row.location = fields["location"] or row.location
    row.current_position = _clean(profile.get("Current Position")) or _clean(profile.get("Position")) or row.current_position
    row.current_company = _clean(profile.get("Current Company")) or _clean(profile.get("Company")) or row.current_company
    row.profile_completeness_score = max(0, min(100, completeness_percent))
    row.total_connections = max(0, total_connections)
    row.last_synced = datetime.now(timezone.utc)

    await session.flush()
    return row
