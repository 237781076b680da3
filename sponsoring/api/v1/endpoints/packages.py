# sponsoring/api/v1/endpoints/packages.py
"""
API endpoints for sponsor packages (the purchasable levels of an edition).
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from sponsoring.api import deps
from sponsoring.crud.crud_sponsor import sponsor_package
from sponsoring.db.session import get_db
from sponsoring.schemas.sponsoring import (
    SponsorPackageCreate,
    SponsorPackageResponse,
    SponsorPackageUpdate,
)
from sponsoring.schemas.token import TokenPayload

router = APIRouter(tags=["Sponsor Packages"])


@router.post(
    "/organizations/{org_id}/editions/{edition_id}/sponsor-packages",
    response_model=SponsorPackageResponse,
    status_code=status.HTTP_201_CREATED
)
def create_sponsor_package(
    org_id: str,
    edition_id: str,
    package_in: SponsorPackageCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Create a sponsor package for an edition."""
    deps.require_org_member(org_id, current_user)
    if package_in.edition_id != edition_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="edition_id does not match the URL"
        )
    return sponsor_package.create_with_organization(
        db, obj_in=package_in, organization_id=org_id
    )


@router.get(
    "/organizations/{org_id}/editions/{edition_id}/sponsor-packages",
    response_model=List[SponsorPackageResponse]
)
def list_sponsor_packages(
    org_id: str,
    edition_id: str,
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """List the packages of an edition, most senior tier first."""
    deps.require_org_member(org_id, current_user)
    return sponsor_package.get_by_edition(
        db, edition_id=edition_id, active_only=active_only, organization_id=org_id
    )


@router.patch(
    "/organizations/{org_id}/sponsor-packages/{package_id}",
    response_model=SponsorPackageResponse
)
def update_sponsor_package(
    org_id: str,
    package_id: str,
    package_update: SponsorPackageUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Update a package. Editing the benefit list does not touch deliverables
    that already exist; regenerate to add the missing ones.
    """
    deps.require_org_member(org_id, current_user)

    package = sponsor_package.get(db, id=package_id)
    if not package or package.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")

    return sponsor_package.update(db, db_obj=package, obj_in=package_update)
