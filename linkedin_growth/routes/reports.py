"""Scoring and analytics endpoints.

GET /v1/dashboard - Six profile/content scores with AI insights
GET /v1/analytics - Deep-dive analytics for a time range
GET /v1/algo      - Algorithm metrics, grade and recommendations

Members without active DMA consent get a `needsReconnect` payload (HTTP 200).
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from linkedin_growth.routes.deps import get_linkedin_client
from linkedin_growth.schemas.algo import AlgoResponse
from linkedin_growth.schemas.analytics import AnalyticsReconnectResponse, AnalyticsReport
from linkedin_growth.schemas.common import ReconnectResponse
from linkedin_growth.schemas.dashboard import DashboardResponse
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.reports import build_algo_report, build_analytics_report, build_dashboard_report

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse | ReconnectResponse)
async def get_dashboard(
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> DashboardResponse | ReconnectResponse:
    return await build_dashboard_report(client)


@router.get("/analytics", response_model=AnalyticsReport | AnalyticsReconnectResponse)
async def get_analytics(
    time_range: Literal["7d", "30d", "90d"] = Query(
        default="30d",
        alias="timeRange",
        description="Analysis window",
    ),
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> AnalyticsReport | AnalyticsReconnectResponse:
    return await build_analytics_report(client, time_range)


@router.get("/algo", response_model=AlgoResponse | ReconnectResponse)
async def get_algo(
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> AlgoResponse | ReconnectResponse:
    return await build_algo_report(client)
