"""Report orchestration for the dashboard, analytics and algo endpoints.

Each builder:
1. Verifies DMA consent (inactive -> reconnect payload, served with HTTP 200)
2. Serves a fresh analytics_cache row when the member is registered
3. Fetches the needed snapshot domains concurrently
4. Runs the pure analyses (each failure degrades to its zeroed default)
5. Attaches AI text, then stores the report in analytics_cache

Persistence is best-effort: without a database, or for members who have not
registered yet, reports are computed on every request.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
import logging
import time
from typing import TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import User
from linkedin_growth.schemas.algo import AlgoMetadata, AlgoResponse
from linkedin_growth.schemas.analytics import AnalyticsReconnectResponse, AnalyticsReport
from linkedin_growth.schemas.common import ReconnectResponse
from linkedin_growth.schemas.dashboard import (
    DashboardAnalysis,
    DashboardMetadata,
    DashboardResponse,
    DashboardScores,
    DashboardSummary,
)
from linkedin_growth.services.ai_insights import (
    attach_dashboard_insights,
    generate_algorithm_analysis,
    generate_analytics_narrative,
)
from linkedin_growth.services.algo_analysis import compute_insights, compute_metrics, optimization_recommendations
from linkedin_growth.services.analytics_cache import get_cached_report, store_report
from linkedin_growth.services.analytics_insights import compute_analytics, empty_analytics
from linkedin_growth.services.dashboard_analytics import (
    analyze_content_diversity,
    analyze_content_impact,
    analyze_engagement_quality,
    analyze_posting_activity,
    analyze_posting_consistency,
    analyze_profile_completeness,
    overall_score,
    profile_completeness_percent,
    safe_analysis,
)
from linkedin_growth.services.linkedin_client import ConsentStatus, LinkedInDMAClient
from linkedin_growth.services.snapshot import SnapshotDomain, first_record, snapshot_records
from linkedin_growth.services.users import get_user_by_member_urn, update_profile_stats
from linkedin_growth.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

M = TypeVar("M", bound=BaseModel)

RECONNECT_MESSAGE = "Please reconnect your LinkedIn account with DMA permissions"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


# ============================================================
# Best-effort report cache
# ============================================================


async def _try_cached(consent: ConsentStatus, cache_key: str, time_range: str, model: type[M]) -> M | None:
    if not consent.member_urn:
        return None
    try:
        async with get_session() as session:
            user = await get_user_by_member_urn(session, consent.member_urn)
            if user is None:
                return None
            payload = await get_cached_report(session, user, cache_key, time_range)
    except (RuntimeError, SQLAlchemyError):
        logger.warning(f"[reports] report cache unavailable key={cache_key}")
        return None
    if payload is None:
        return None
    try:
        return model.model_validate(payload)
    except ValidationError:
        logger.warning(f"[reports] discarding incompatible cached report key={cache_key}")
        return None


async def _try_store(
    consent: ConsentStatus,
    cache_key: str,
    time_range: str,
    report: BaseModel,
    extra: Callable[[AsyncSession, User], Awaitable[None]] | None = None,
) -> None:
    if not consent.member_urn:
        return
    try:
        async with get_session() as session:
            user = await get_user_by_member_urn(session, consent.member_urn)
            if user is None:
                return
            await store_report(session, user, cache_key, report.model_dump(by_alias=True, mode="json"), time_range)
            if extra is not None:
                await extra(session, user)
    except (RuntimeError, SQLAlchemyError):
        logger.warning(f"[reports] could not store report key={cache_key}")


# ============================================================
# Dashboard
# ============================================================


async def build_dashboard_report(
    client: LinkedInDMAClient,
    now: datetime | None = None,
) -> DashboardResponse | ReconnectResponse:
    start = time.monotonic()
    now = now or datetime.now(timezone.utc)

    consent = await client.verify_consent()
    if not consent.is_active:
        return ReconnectResponse(message=RECONNECT_MESSAGE)

    cached = await _try_cached(consent, "dashboard", "all", DashboardResponse)
    if cached is not None:
        cached.metadata.cached = True
        cached.metadata.fetch_time_ms = _elapsed_ms(start)
        return cached

    snapshots = await client.fetch_snapshots(
        SnapshotDomain.PROFILE,
        SnapshotDomain.MEMBER_SHARE_INFO,
        SnapshotDomain.CONNECTIONS,
    )
    profile = snapshots[SnapshotDomain.PROFILE]
    shares = snapshots[SnapshotDomain.MEMBER_SHARE_INFO]
    connections = snapshots[SnapshotDomain.CONNECTIONS]

    analysis = DashboardAnalysis(
        profile_completeness=safe_analysis(
            analyze_profile_completeness, profile, lambda: analyze_profile_completeness(None)
        ),
        posting_activity=safe_analysis(analyze_posting_activity, shares, lambda: analyze_posting_activity(None)),
        engagement_quality=safe_analysis(
            analyze_engagement_quality, shares, lambda: analyze_engagement_quality(None)
        ),
        content_impact=safe_analysis(analyze_content_impact, shares, lambda: analyze_content_impact(None)),
        content_diversity=safe_analysis(analyze_content_diversity, shares, lambda: analyze_content_diversity(None)),
        posting_consistency=safe_analysis(
            analyze_posting_consistency, shares, lambda: analyze_posting_consistency(None)
        ),
    )
    analysis = await attach_dashboard_insights(analysis)

    section_scores = [
        analysis.profile_completeness.score,
        analysis.posting_activity.score,
        analysis.engagement_quality.score,
        analysis.content_impact.score,
        analysis.content_diversity.score,
        analysis.posting_consistency.score,
    ]
    total_connections = len(snapshot_records(connections))
    profile_record = first_record(profile)

    report = DashboardResponse(
        scores=DashboardScores(
            overall=overall_score(section_scores),
            profile_completeness=analysis.profile_completeness.score,
            posting_activity=analysis.posting_activity.score,
            engagement_quality=analysis.engagement_quality.score,
            content_impact=analysis.content_impact.score,
            content_diversity=analysis.content_diversity.score,
            posting_consistency=analysis.posting_consistency.score,
        ),
        analysis=analysis,
        summary=DashboardSummary(
            total_connections=total_connections,
            total_posts=analysis.posting_activity.total_posts,
            avg_engagement_per_post=analysis.engagement_quality.avg_engagement_per_post,
            posts_per_week=analysis.posting_activity.posts_per_week,
        ),
        metadata=DashboardMetadata(
            fetch_time_ms=_elapsed_ms(start),
            data_source="snapshot",
            has_recent_activity=analysis.posting_activity.total_posts > 0,
            profile_data_available=bool(profile_record),
            posts_data_available=bool(snapshot_records(shares)),
        ),
        last_updated=now,
    )

    completeness = profile_completeness_percent(analysis.profile_completeness)

    async def _profile_stats(session: AsyncSession, user: User) -> None:
        await update_profile_stats(session, user, profile_record, completeness, total_connections)

    await _try_store(consent, "dashboard", "all", report, extra=_profile_stats)
    logger.info(f"[reports] dashboard overall={report.scores.overall} in {report.metadata.fetch_time_ms}ms")
    return report


# ============================================================
# Analytics
# ============================================================


async def build_analytics_report(
    client: LinkedInDMAClient,
    time_range: str = "30d",
    now: datetime | None = None,
) -> AnalyticsReport | AnalyticsReconnectResponse:
    start = time.monotonic()
    now = now or datetime.now(timezone.utc)

    consent = await client.verify_consent()
    if not consent.is_active:
        return AnalyticsReconnectResponse(message=RECONNECT_MESSAGE, analytics=empty_analytics(time_range, now))

    cached = await _try_cached(consent, "analytics", time_range, AnalyticsReport)
    if cached is not None:
        cached.metadata.cached = True
        cached.metadata.fetch_time_ms = _elapsed_ms(start)
        return cached

    snapshots = await client.fetch_snapshots(SnapshotDomain.MEMBER_SHARE_INFO, SnapshotDomain.CONNECTIONS)
    posts = snapshot_records(snapshots[SnapshotDomain.MEMBER_SHARE_INFO])
    connections = snapshot_records(snapshots[SnapshotDomain.CONNECTIONS])

    try:
        report = compute_analytics(posts, connections, time_range, now)
    except Exception:
        logger.exception("[reports] analytics computation failed")
        report = empty_analytics(time_range, now)

    report.ai_narrative = await generate_analytics_narrative(report)
    report.metadata.fetch_time_ms = _elapsed_ms(start)

    await _try_store(consent, "analytics", time_range, report)
    logger.info(
        f"[reports] analytics range={time_range} posts={report.metadata.posts_count} "
        f"in {report.metadata.fetch_time_ms}ms"
    )
    return report


# ============================================================
# The Algo
# ============================================================


async def build_algo_report(
    client: LinkedInDMAClient,
    now: datetime | None = None,
) -> AlgoResponse | ReconnectResponse:
    start = time.monotonic()
    now = now or datetime.now(timezone.utc)

    consent = await client.verify_consent()
    if not consent.is_active:
        return ReconnectResponse(message=RECONNECT_MESSAGE)

    cached = await _try_cached(consent, "algo", "all", AlgoResponse)
    if cached is not None:
        cached.metadata.cached = True
        cached.metadata.fetch_time_ms = _elapsed_ms(start)
        return cached

    snapshots = await client.fetch_snapshots(SnapshotDomain.MEMBER_SHARE_INFO, SnapshotDomain.PROFILE)
    posts = snapshot_records(snapshots[SnapshotDomain.MEMBER_SHARE_INFO])
    industry = first_record(snapshots[SnapshotDomain.PROFILE]).get("Industry")

    metrics = compute_metrics(posts)
    ai_analysis = await generate_algorithm_analysis(metrics, len(posts), industry if isinstance(industry, str) else None)

    report = AlgoResponse(
        metrics=metrics,
        ai_analysis=ai_analysis,
        recommendations=optimization_recommendations(metrics),
        insights=compute_insights(posts),
        metadata=AlgoMetadata(
            fetch_time_ms=_elapsed_ms(start),
            data_source="snapshot_algo",
            posts_analyzed=len(posts),
            has_recent_activity=bool(posts),
        ),
        last_updated=now,
    )

    await _try_store(consent, "algo", "all", report)
    logger.info(f"[reports] algo grade={metrics.algorithm_grade} posts={len(posts)}")
    return report
