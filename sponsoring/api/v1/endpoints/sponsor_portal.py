# sponsoring/api/v1/endpoints/sponsor_portal.py
"""
API endpoints for the sponsor self-service portal.

Organizers issue, refresh and revoke portal links. The public endpoint is
authenticated by the portal token alone and is rate limited.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from sponsoring.api import deps
from sponsoring.core.email import EmailService
from sponsoring.core.limiter import limiter
from sponsoring.db.session import get_db
from sponsoring.schemas.sponsoring import (
    PortalLinkRequest,
    PortalLinkResponse,
    PortalTokenRefreshRequest,
    PortalView,
    SponsorDeliverableResponse,
    SponsorPortalTokenResponse,
    SponsorshipWithDetailsResponse,
)
from sponsoring.schemas.token import TokenPayload
from sponsoring.services.deliverable_service import SponsorDeliverableService
from sponsoring.services.portal_token_service import SponsorPortalTokenService
from sponsoring.utils.portal_tokens import is_token_expiring_soon

router = APIRouter(tags=["Sponsor Portal"])


# ==================== Organizer Endpoints ====================

@router.post(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/portal-link",
    response_model=PortalLinkResponse
)
def create_portal_link(
    org_id: str,
    sponsorship_id: str,
    link_in: PortalLinkRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    email_service: Optional[EmailService] = Depends(deps.get_email),
):
    """
    Get the sponsor's portal link, reusing a valid token when there is one.

    With `event_name` set, the link is also emailed to the sponsor contact.
    """
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)

    service = SponsorPortalTokenService(email_service=email_service)
    url = service.generate_portal_link(db, sponsorship_id, link_in.edition_slug, link_in.base_url)
    response = PortalLinkResponse(url=url)

    if link_in.event_name:
        result = service.send_portal_invitation(
            db, sponsorship_id, link_in.edition_slug, link_in.event_name, link_in.base_url
        )
        response.email_sent = bool(result.get("success"))
        response.email_error = result.get("error")
    return response


@router.post(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/portal-token/refresh",
    response_model=SponsorPortalTokenResponse
)
def refresh_portal_token(
    org_id: str,
    sponsorship_id: str,
    refresh_in: PortalTokenRefreshRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Invalidate every issued link and issue a fresh token."""
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)
    return SponsorPortalTokenService().refresh(db, sponsorship_id, refresh_in.expiry_days)


@router.delete(
    "/organizations/{org_id}/sponsorships/{sponsorship_id}/portal-token",
    status_code=status.HTTP_204_NO_CONTENT
)
def revoke_portal_token(
    org_id: str,
    sponsorship_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deps.require_org_member(org_id, current_user)
    deps.get_sponsorship_for_org(db, org_id, sponsorship_id)
    SponsorPortalTokenService().revoke(db, sponsorship_id)


# ==================== Public Endpoint ====================

@router.get("/public/sponsor-portal", response_model=PortalView)
@limiter.limit("30/minute")
def view_sponsor_portal(
    request: Request,
    token: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    """Resolve a portal token to the sponsorship and its deliverable progress."""
    validation = SponsorPortalTokenService().validate(db, token)
    if not validation.valid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=validation.error)

    sponsorship = validation.sponsorship
    deliverable_service = SponsorDeliverableService()
    return PortalView(
        sponsorship=SponsorshipWithDetailsResponse.from_sponsorship(sponsorship),
        deliverables=[
            SponsorDeliverableResponse.model_validate(d)
            for d in deliverable_service.list_for_sponsorship(db, sponsorship.id)
        ],
        summary=deliverable_service.summarize(db, sponsorship.id),
        token_expires_at=validation.token.expires_at,
        token_expiring_soon=is_token_expiring_soon(validation.token),
    )
