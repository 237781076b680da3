# sponsoring/api/v1/endpoints/sponsoring_stats.py
"""
API endpoints for an edition's sponsoring statistics.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sponsoring.api import deps
from sponsoring.db.session import get_db
from sponsoring.schemas.sponsoring_stats import (
    PendingDeliverableSummary,
    PipelineStats,
    RevenueStats,
    SponsoringStats,
    SponsorStatsDetailed,
)
from sponsoring.schemas.token import TokenPayload
from sponsoring.services.sponsoring_stats_service import sponsoring_stats_service

router = APIRouter(
    prefix="/organizations/{org_id}/editions/{edition_id}/sponsoring-stats",
    tags=["Sponsoring Stats"],
)


@router.get("", response_model=SponsoringStats)
def get_sponsoring_stats(
    org_id: str,
    edition_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """All sponsoring reports for the edition in one response."""
    deps.require_org_member(org_id, current_user)
    return sponsoring_stats_service.get_stats(db, edition_id, organization_id=org_id)


@router.get("/sponsors", response_model=SponsorStatsDetailed)
def get_sponsor_stats(
    org_id: str,
    edition_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return sponsoring_stats_service.sponsor_stats(db, edition_id, organization_id=org_id)


@router.get("/revenue", response_model=RevenueStats)
def get_revenue_stats(
    org_id: str,
    edition_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return sponsoring_stats_service.revenue_stats(db, edition_id, organization_id=org_id)


@router.get("/pipeline", response_model=PipelineStats)
def get_pipeline_stats(
    org_id: str,
    edition_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return sponsoring_stats_service.pipeline_stats(db, edition_id, organization_id=org_id)


@router.get("/pending-deliverables", response_model=List[PendingDeliverableSummary])
def get_pending_deliverables(
    org_id: str,
    edition_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return sponsoring_stats_service.pending_deliverables(db, edition_id, organization_id=org_id)
