# sponsoring/api/v1/endpoints/sponsors.py
"""
API endpoints for sponsor companies of an organization.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from sponsoring.api import deps
from sponsoring.crud.crud_sponsor import sponsor
from sponsoring.db.session import get_db
from sponsoring.schemas.sponsoring import SponsorCreate, SponsorResponse, SponsorUpdate
from sponsoring.schemas.token import TokenPayload

router = APIRouter(tags=["Sponsors"])


@router.post(
    "/organizations/{org_id}/sponsors",
    response_model=SponsorResponse,
    status_code=status.HTTP_201_CREATED
)
def create_sponsor(
    org_id: str,
    sponsor_in: SponsorCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return sponsor.create_with_organization(db, obj_in=sponsor_in, organization_id=org_id)


@router.get("/organizations/{org_id}/sponsors", response_model=List[SponsorResponse])
def list_sponsors(
    org_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    return sponsor.get_by_organization(db, organization_id=org_id)


@router.patch("/organizations/{org_id}/sponsors/{sponsor_id}", response_model=SponsorResponse)
def update_sponsor(
    org_id: str,
    sponsor_id: str,
    sponsor_update: SponsorUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)

    db_sponsor = sponsor.get(db, id=sponsor_id)
    if not db_sponsor or db_sponsor.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sponsor not found")

    return sponsor.update(db, db_obj=db_sponsor, obj_in=sponsor_update)
