# sponsoring/api/v1/endpoints/deliverables.py
"""
API endpoints for sponsor deliverables.

These endpoints allow organizers to:
- Generate deliverables from package benefits (one sponsorship or a whole edition)
- Track delivery progress and mark benefits delivered
- See what is still open or overdue across an edition

The internal endpoint lets other platform services trigger edition-wide
generation with the internal API key.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from sponsoring.api import deps
from sponsoring.core.email import EmailService
from sponsoring.crud.crud_sponsor_deliverable import sponsor_deliverable
from sponsoring.db.session import get_db
from sponsoring.schemas.sponsoring import (
    DeliverableGenerateRequest,
    DeliverableGenerationResult,
    DeliverableMarkDelivered,
    DeliverablesSummary,
    DeliverableStatusUpdate,
    EditionGenerationResult,
    SponsorDeliverableResponse,
    SponsorDeliverableUpdate,
)
from sponsoring.schemas.token import TokenPayload
from sponsoring.services.deliverable_service import SponsorDeliverableService
from sponsoring.services.exceptions import InvalidTransitionError

router = APIRouter(tags=["Sponsor Deliverables"])


def _get_deliverable_for_org(db: Session, org_id: str, deliverable_id: str):
    deliverable = sponsor_deliverable.get_with_details(db, deliverable_id=deliverable_id)
    sponsorship = deliverable.sponsorship if deliverable else None
    if not sponsorship or not sponsorship.sponsor or sponsorship.sponsor.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deliverable not found")
    return deliverable


# ==================== Generation ====================

@router.post(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/deliverables/generate",
    response_model=DeliverableGenerationResult
)
def generate_sponsorship_deliverables(
    org_id: str,
    sponsorship_id: str,
    generate_in: DeliverableGenerateRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Create a deliverable for every included benefit that has none yet."""
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)

    return SponsorDeliverableService().generate_for_sponsorship(
        db, sponsorship_id, generate_in.default_due_date
    )


@router.post(
    "/organizations/{org_id}/editions/{edition_id}/deliverables/generate",
    response_model=EditionGenerationResult
)
def generate_edition_deliverables(
    org_id: str,
    edition_id: str,
    generate_in: DeliverableGenerateRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Generate for every confirmed sponsorship; per-sponsorship failures are reported, not raised."""
    deps.require_org_member(org_id, current_user)
    return SponsorDeliverableService().generate_for_edition(
        db, edition_id, generate_in.default_due_date, organization_id=org_id
    )


@router.post(
    "/internal/editions/{edition_id}/deliverables/generate",
    response_model=EditionGenerationResult
)
def internal_generate_edition_deliverables(
    edition_id: str,
    generate_in: DeliverableGenerateRequest,
    db: Session = Depends(get_db),
    api_key: str = Depends(deps.get_internal_api_key),
):
    return SponsorDeliverableService().generate_for_edition(
        db, edition_id, generate_in.default_due_date
    )


# ==================== Reads ====================

@router.get(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/deliverables",
    response_model=List[SponsorDeliverableResponse]
)
def list_sponsorship_deliverables(
    org_id: str,
    sponsorship_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)
    return SponsorDeliverableService().list_for_sponsorship(db, sponsorship_id)


@router.get(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/deliverables/summary",
    response_model=DeliverablesSummary
)
def summarize_sponsorship_deliverables(
    org_id: str,
    sponsorship_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)
    return SponsorDeliverableService().summarize(db, sponsorship_id)


@router.get(
    "/organizations/{org_id}/editions/{edition_id}/deliverables/pending",
    response_model=List[SponsorDeliverableResponse]
)
def list_pending_deliverables(
    org_id: str,
    edition_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return SponsorDeliverableService().list_pending_for_edition(
        db, edition_id, organization_id=org_id
    )


@router.get(
    "/organizations/{org_id}/editions/{edition_id}/deliverables/overdue",
    response_model=List[SponsorDeliverableResponse]
)
def list_overdue_deliverables(
    org_id: str,
    edition_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return SponsorDeliverableService().list_overdue_for_edition(
        db, edition_id, organization_id=org_id
    )


# ==================== Updates ====================

@router.patch(
    "/organizations/{org_id}/deliverables/{deliverable_id}",
    response_model=SponsorDeliverableResponse
)
def update_deliverable(
    org_id: str,
    deliverable_id: str,
    deliverable_update: SponsorDeliverableUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Edit description, due date or notes."""
    deps.require_org_member(org_id, current_user)
    deliverable = _get_deliverable_for_org(db, org_id, deliverable_id)
    return sponsor_deliverable.update(db, db_obj=deliverable, obj_in=deliverable_update)


@router.post(
    "/organizations/{org_id}/deliverables/{deliverable_id}/status",
    response_model=SponsorDeliverableResponse
)
def update_deliverable_status(
    org_id: str,
    deliverable_id: str,
    status_in: DeliverableStatusUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    email_service: Optional[EmailService] = Depends(deps.get_email),
):
    deps.require_org_member(org_id, current_user)
    _get_deliverable_for_org(db, org_id, deliverable_id)

    service = SponsorDeliverableService(email_service=email_service)
    try:
        return service.update_status(db, deliverable_id, status_in.status, status_in.event_name)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.post(
    "/organizations/{org_id}/deliverables/{deliverable_id}/mark-delivered",
    response_model=SponsorDeliverableResponse
)
def mark_deliverable_delivered(
    org_id: str,
    deliverable_id: str,
    delivered_in: DeliverableMarkDelivered,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    email_service: Optional[EmailService] = Depends(deps.get_email),
):
    deps.require_org_member(org_id, current_user)
    _get_deliverable_for_org(db, org_id, deliverable_id)

    service = SponsorDeliverableService(email_service=email_service)
    try:
        return service.mark_as_delivered(
            db, deliverable_id, delivered_in.event_name, notes=delivered_in.notes
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
