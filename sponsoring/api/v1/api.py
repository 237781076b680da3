# sponsoring/api/v1/api.py

from fastapi import APIRouter
from sponsoring.api.v1.endpoints import (
    health,
    packages,
    sponsors,
    sponsorships,
    deliverables,
    sponsor_portal,
    sponsoring_stats,
)

# This is the main router for the v1 API.
# It will include all the specific endpoint routers.
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(packages.router)
api_router.include_router(sponsors.router)
api_router.include_router(sponsorships.router)
api_router.include_router(deliverables.router)
api_router.include_router(sponsor_portal.router)
api_router.include_router(sponsoring_stats.router)
