# sponsoring/api/v1/endpoints/sponsorships.py
"""
API endpoints for the sponsorship pipeline.

These endpoints allow organizers to:
- Start a sponsorship (a sponsor prospected for an edition)
- Move it through the pipeline (contacted, negotiating, confirmed, ...)
- Record payment
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from sponsoring.api import deps
from sponsoring.constants.sponsoring import SponsorshipStatus
from sponsoring.core.email import EmailService
from sponsoring.crud.crud_sponsor import sponsor, sponsor_package, sponsorship
from sponsoring.db.session import get_db
from sponsoring.schemas.sponsoring import (
    SponsorshipCreate,
    SponsorshipMarkPaidRequest,
    SponsorshipTransitionRequest,
    SponsorshipUpdate,
    SponsorshipWithDetailsResponse,
)
from sponsoring.schemas.token import TokenPayload
from sponsoring.services.exceptions import InvalidTransitionError
from sponsoring.services.sponsorship_service import SponsorshipService
from sponsoring.utils.sponsorship_status import sort_by_package_tier

router = APIRouter(tags=["Sponsorships"])
logger = logging.getLogger(__name__)


@router.post(
    "/organizations/{org_id}/editions/{edition_id}/sponsorships",
    response_model=SponsorshipWithDetailsResponse,
    status_code=status.HTTP_201_CREATED
)
def create_sponsorship(
    org_id: str,
    edition_id: str,
    sponsorship_in: SponsorshipCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Add a sponsor to an edition's pipeline as a prospect."""
    deps.require_org_member(org_id, current_user)
    if sponsorship_in.edition_id != edition_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="edition_id does not match the URL"
        )

    db_sponsor = sponsor.get(db, id=sponsorship_in.sponsor_id)
    if not db_sponsor or db_sponsor.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sponsor not found")

    if sponsorship_in.package_id:
        package = sponsor_package.get(db, id=sponsorship_in.package_id)
        if (
            not package
            or package.edition_id != edition_id
            or package.organization_id != org_id
        ):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")

    if sponsorship.get_by_edition_and_sponsor(
        db, edition_id=edition_id, sponsor_id=sponsorship_in.sponsor_id
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Sponsor is already in this edition's pipeline"
        )

    created = sponsorship.create(db, obj_in=sponsorship_in)
    logger.info(f"Sponsorship {created.id} created for sponsor {created.sponsor_id}")
    return SponsorshipWithDetailsResponse.from_sponsorship(
        sponsorship.get_with_details(db, sponsorship_id=created.id)
    )


@router.get(
    "/organizations/{org_id}/editions/{edition_id}/sponsorships",
    response_model=List[SponsorshipWithDetailsResponse]
)
def list_sponsorships(
    org_id: str,
    edition_id: str,
    status_filter: Optional[SponsorshipStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """List an edition's sponsorships, most senior package first."""
    deps.require_org_member(org_id, current_user)
    items = sponsorship.get_by_edition(
        db,
        edition_id=edition_id,
        status=status_filter,
        include_details=True,
        organization_id=org_id,
    )
    return [
        SponsorshipWithDetailsResponse.from_sponsorship(item)
        for item in sort_by_package_tier(items)
    ]


@router.get(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}",
    response_model=SponsorshipWithDetailsResponse
)
def get_sponsorship(
    org_id: str,
    sponsorship_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    item = deps.get_sponsorship_for_org(db, org_id, sponsorship_id)
    return SponsorshipWithDetailsResponse.from_sponsorship(item)


@router.patch(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}",
    response_model=SponsorshipWithDetailsResponse
)
def update_sponsorship(
    org_id: str,
    sponsorship_id: str,
    sponsorship_update: SponsorshipUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Edit deal details. Status and payment have their own endpoints."""
    deps.require_org_member(org_id, current_user)
    item = deps.get_sponsorship_for_org(db, org_id, sponsorship_id)
    if sponsorship_update.package_id:
        package = sponsor_package.get(db, id=sponsorship_update.package_id)
        if (
            not package
            or package.edition_id != item.edition_id
            or package.organization_id != org_id
        ):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    sponsorship.update(db, db_obj=item, obj_in=sponsorship_update)
    return SponsorshipWithDetailsResponse.from_sponsorship(
        sponsorship.get_with_details(db, sponsorship_id=sponsorship_id)
    )


@router.post(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/transition",
    response_model=SponsorshipWithDetailsResponse
)
def transition_sponsorship(
    org_id: str,
    sponsorship_id: str,
    transition_in: SponsorshipTransitionRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    email_service: Optional[EmailService] = Depends(deps.get_email),
):
    """
    Move a sponsorship to another status.

    Confirming generates the package's deliverables and, when `event_name` is
    given and email is configured, sends the sponsor a confirmation.
    """
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)

    service = SponsorshipService(email_service=email_service)
    try:
        service.apply_transition(
            db, sponsorship_id, transition_in.status, event_name=transition_in.event_name
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return SponsorshipWithDetailsResponse.from_sponsorship(
        sponsorship.get_with_details(db, sponsorship_id=sponsorship_id)
    )


@router.post(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/mark-paid",
    response_model=SponsorshipWithDetailsResponse
)
def mark_sponsorship_paid(
    org_id: str,
    sponsorship_id: str,
    payment_in: SponsorshipMarkPaidRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    email_service: Optional[EmailService] = Depends(deps.get_email),
):
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)

    service = SponsorshipService(email_service=email_service)
    try:
        service.mark_paid(
            db,
            sponsorship_id,
            payment_reference=payment_in.payment_reference,
            event_name=payment_in.event_name,
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return SponsorshipWithDetailsResponse.from_sponsorship(
        sponsorship.get_with_details(db, sponsorship_id=sponsorship_id)
    )
