"""Report builders against a mocked LinkedIn API (no database, no Redis)."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from linkedin_growth.schemas.analytics import AnalyticsReconnectResponse
from linkedin_growth.schemas.common import ReconnectResponse
from linkedin_growth.services import reports
from linkedin_growth.services.linkedin_client import LinkedInDMAClient

NOW = datetime(2026, 4, 10, 12, 0, tzinfo=timezone.utc)

CONSENT = {"elements": [{"memberComplianceAuthorizationKey": {"member": "urn:li:person:abc"}}]}


def _date(days_ago: int) -> str:
    return (NOW - timedelta(days=days_ago)).strftime("%Y-%m-%d %H:%M:%S")


SNAPSHOTS = {
    "PROFILE": [
        {
            "First Name": "Ava",
            "Last Name": "Thompson",
            "Industry": "Marketing",
            "Headline": "B2B SaaS marketer",
        }
    ],
    "MEMBER_SHARE_INFO": [
        {"Date": _date(2), "LikesCount": "12", "CommentsCount": "3", "MediaType": "IMAGE", "ShareCommentary": "#saas"},
        {"Date": _date(5), "LikesCount": "4", "CommentsCount": "0", "ShareCommentary": "Hello"},
        {"Date": _date(9), "LikesCount": "20", "CommentsCount": "6", "MediaType": "VIDEO"},
    ],
    "CONNECTIONS": [{"Industry": "Software"}, {"Industry": "Design"}],
}


def _linkedin(consent_active: bool = True) -> LinkedInDMAClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/memberAuthorizations"):
            return httpx.Response(200, json=CONSENT if consent_active else {"elements": []})
        domain = request.url.params["domain"]
        return httpx.Response(
            200,
            json={"elements": [{"snapshotDomain": domain, "snapshotData": SNAPSHOTS.get(domain, [])}]},
        )

    return LinkedInDMAClient("token", transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def no_ai(monkeypatch: pytest.MonkeyPatch):
    async def passthrough(analysis):
        return analysis

    async def narrative(report):
        return "narrative"

    async def algo_text(metrics, posts_count, industry):
        return f"analysis for {industry}"

    monkeypatch.setattr(reports, "attach_dashboard_insights", passthrough)
    monkeypatch.setattr(reports, "generate_analytics_narrative", narrative)
    monkeypatch.setattr(reports, "generate_algorithm_analysis", algo_text)


@pytest.mark.asyncio
async def test_inactive_consent_returns_reconnect_payloads():
    async with _linkedin(consent_active=False) as client:
        dashboard = await reports.build_dashboard_report(client, NOW)
        analytics = await reports.build_analytics_report(client, "7d", NOW)
        algo = await reports.build_algo_report(client, NOW)

    assert isinstance(dashboard, ReconnectResponse)
    assert dashboard.needs_reconnect is True
    assert isinstance(analytics, AnalyticsReconnectResponse)
    assert analytics.analytics.time_range == "7d"
    assert isinstance(algo, ReconnectResponse)


@pytest.mark.asyncio
async def test_dashboard_report():
    async with _linkedin() as client:
        report = await reports.build_dashboard_report(client, NOW)

    assert report.summary.total_connections == 2
    assert report.summary.total_posts == 3
    assert report.metadata.data_source == "snapshot"
    assert report.metadata.profile_data_available is True
    assert report.metadata.cached is False
    assert report.scores.engagement_quality == 6
    scores = [
        report.scores.profile_completeness,
        report.scores.posting_activity,
        report.scores.engagement_quality,
        report.scores.content_impact,
        report.scores.content_diversity,
        report.scores.posting_consistency,
    ]
    assert report.scores.overall == int(sum(scores) / 6 * 10 + 0.5) / 10
    assert report.last_updated == NOW


@pytest.mark.asyncio
async def test_analytics_report():
    async with _linkedin() as client:
        report = await reports.build_analytics_report(client, "7d", NOW)

    assert report.time_range == "7d"
    assert report.metadata.posts_count == 2
    assert report.metadata.total_posts_count == 3
    assert report.audience_insights.total_connections == 2
    assert report.ai_narrative == "narrative"


@pytest.mark.asyncio
async def test_algo_report():
    async with _linkedin() as client:
        report = await reports.build_algo_report(client, NOW)

    assert report.metadata.data_source == "snapshot_algo"
    assert report.metadata.posts_analyzed == 3
    assert report.ai_analysis == "analysis for Marketing"
    assert report.recommendations[-1].category == "Best Practices"
