"""API routes."""

from fastapi import APIRouter

from linkedin_growth.routes import content, linkedin, postpulse, reports, synergy, users

api_router = APIRouter()

# Scores and analytics (dashboard, analytics, algo)
api_router.include_router(reports.router, prefix="/v1", tags=["reports"])

# Post Pulse (repurpose readiness)
api_router.include_router(postpulse.router, prefix="/v1/postpulse", tags=["postpulse"])

# Raw DMA snapshot proxy
api_router.include_router(linkedin.router, prefix="/v1/linkedin", tags=["linkedin"])

# Creation Engine + PostGen
api_router.include_router(content.router, prefix="/v1", tags=["content"])

# Registration and post cache sync
api_router.include_router(users.router, prefix="/v1", tags=["users"])

# Synergy partners
api_router.include_router(synergy.router, prefix="/v1/synergy", tags=["synergy"])
