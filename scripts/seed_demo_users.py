#!/usr/bin/env python3
"""Seed demo users for local development.

Creates:
- A handful of DMA-active users with profile stats (partner search has results)
- One active synergy partnership and one pending invitation
- A few cached posts for the partner feed

Idempotent: rows are looked up by their natural keys before insert.

Usage:
    python -m scripts.seed_demo_users
"""

import asyncio
from datetime import datetime, timedelta, timezone
import json
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from linkedin_growth.models import (  # noqa: E402
    InvitationStatus,
    PartnerStatus,
    PostCache,
    SynergyInvitation,
    SynergyPartner,
    User,
    UserProfile,
)
from linkedin_growth.services.post_sync import engagement_rate, extract_hashtags, performance_tier  # noqa: E402
from linkedin_growth.services.snapshot import MediaType  # noqa: E402
from linkedin_growth.services.synergy import ordered_pair  # noqa: E402
from linkedin_growth.settings import get_settings  # noqa: E402

load_dotenv()

DEMO_USERS = [
    {
        "urn": "urn:li:person:demo-ava",
        "name": "Ava Thompson",
        "email": "ava.demo@example.com",
        "headline": "B2B SaaS marketer helping founders tell better stories",
        "industry": "Marketing & Advertising",
        "location": "London, United Kingdom",
        "connections": 1840,
        "completeness": 85,
    },
    {
        "urn": "urn:li:person:demo-marcus",
        "name": "Marcus Lee",
        "email": "marcus.demo@example.com",
        "headline": "Engineering manager | Platform teams | Hiring",
        "industry": "Software Development",
        "location": "Berlin, Germany",
        "connections": 920,
        "completeness": 70,
    },
    {
        "urn": "urn:li:person:demo-priya",
        "name": "Priya Nair",
        "email": "priya.demo@example.com",
        "headline": "Fractional CFO for early-stage startups",
        "industry": "Financial Services",
        "location": "Singapore",
        "connections": 2310,
        "completeness": 95,
    },
    {
        "urn": "urn:li:person:demo-diego",
        "name": "Diego Alvarez",
        "email": "diego.demo@example.com",
        "headline": "Product designer",
        "industry": "Design",
        "location": "Madrid, Spain",
        "connections": 410,
        "completeness": 55,
    },
]

DEMO_POSTS = [
    {
        "urn": "urn:li:activity:7000000000000000001",
        "content": "Three things I learned running our first customer advisory board #marketing #saas",
        "media_type": MediaType.TEXT,
        "days_ago": 2,
        "likes": 84,
        "comments": 17,
        "shares": 5,
        "impressions": 2400,
    },
    {
        "urn": "urn:li:activity:7000000000000000002",
        "content": "Our positioning workshop template, free to copy #startups",
        "media_type": MediaType.DOCUMENT,
        "days_ago": 9,
        "likes": 132,
        "comments": 41,
        "shares": 22,
        "impressions": 0,
    },
    {
        "urn": "urn:li:activity:7000000000000000003",
        "content": "What a week at the conference. Photos from the panel on brand and demand.",
        "media_type": MediaType.IMAGE,
        "days_ago": 50,
        "likes": 45,
        "comments": 6,
        "shares": 1,
        "impressions": 1800,
    },
]


async def seed_database() -> None:
    """Seed database with demo users."""
    engine = create_async_engine(get_settings().async_database_url, echo=False)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        print("Seeding demo users...")
        users = await seed_users(session)

        print("\nCreating synergy relationships...")
        await seed_synergy(session, users)

        print("\nCaching partner posts...")
        await seed_posts(session, users[0])

        await session.commit()
        print("\nDemo data seeded.")

    await engine.dispose()


async def seed_users(session: AsyncSession) -> list[User]:
    now = datetime.now(timezone.utc)
    users: list[User] = []
    for user_def in DEMO_USERS:
        result = await session.execute(select(User).where(User.linkedin_member_urn == user_def["urn"]))
        user = result.scalar_one_or_none()
        if user is not None:
            print(f"  skip {user_def['name']} (exists)")
            users.append(user)
            continue

        user = User(
            linkedin_member_urn=user_def["urn"],
            name=user_def["name"],
            email=user_def["email"],
            headline=user_def["headline"],
            industry=user_def["industry"],
            location=user_def["location"],
            dma_active=True,
            dma_consent_date=now,
        )
        session.add(user)
        await session.flush()
        session.add(
            UserProfile(
                user_id=user.id,
                headline=user_def["headline"],
                industry=user_def["industry"],
                location=user_def["location"],
                profile_completeness_score=user_def["completeness"],
                total_connections=user_def["connections"],
                last_synced=now,
            )
        )
        users.append(user)
        print(f"  added {user_def['name']}")
    await session.flush()
    return users


async def seed_synergy(session: AsyncSession, users: list[User]) -> None:
    """users[0] and users[1] are partners; users[2] has invited users[1]."""
    a, b = ordered_pair(users[0].id, users[1].id)
    result = await session.execute(
        select(SynergyPartner).where(SynergyPartner.a_user_id == a, SynergyPartner.b_user_id == b)
    )
    if result.scalar_one_or_none() is None:
        session.add(SynergyPartner(a_user_id=a, b_user_id=b, status=PartnerStatus.ACTIVE, engagement_score=40))
        print(f"  partners {users[0].name} <-> {users[1].name}")

    result = await session.execute(
        select(SynergyInvitation).where(
            SynergyInvitation.from_user_id == users[2].id,
            SynergyInvitation.to_user_id == users[1].id,
        )
    )
    if result.scalar_one_or_none() is None:
        session.add(
            SynergyInvitation(
                from_user_id=users[2].id,
                to_user_id=users[1].id,
                status=InvitationStatus.PENDING,
                message="Would love to support each other's posts!",
                expires_at=datetime.now(timezone.utc) + timedelta(days=get_settings().invitation_expiry_days),
            )
        )
        print(f"  invitation {users[2].name} -> {users[1].name}")


async def seed_posts(session: AsyncSession, owner: User) -> None:
    now = datetime.now(timezone.utc)
    for post_def in DEMO_POSTS:
        result = await session.execute(
            select(PostCache).where(PostCache.user_id == owner.id, PostCache.post_urn == post_def["urn"])
        )
        if result.scalar_one_or_none() is not None:
            continue
        rate = engagement_rate(post_def["likes"], post_def["comments"], post_def["shares"], post_def["impressions"])
        session.add(
            PostCache(
                user_id=owner.id,
                post_urn=post_def["urn"],
                content=post_def["content"],
                media_type=post_def["media_type"],
                linkedin_url=f"https://www.linkedin.com/feed/update/{post_def['urn']}",
                hashtags_json=json.dumps(extract_hashtags(post_def["content"])),
                created_at_ms=int((now - timedelta(days=post_def["days_ago"])).timestamp() * 1000),
                likes=post_def["likes"],
                comments=post_def["comments"],
                shares=post_def["shares"],
                impressions=post_def["impressions"],
                engagement_rate=rate,
                performance_tier=performance_tier(rate),
                repurpose_eligible=post_def["days_ago"] > 45,
                fetched_at=now,
            )
        )
        print(f"  cached {post_def['urn']}")


if __name__ == "__main__":
    asyncio.run(seed_database())
