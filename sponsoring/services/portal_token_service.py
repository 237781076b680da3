# sponsoring/services/portal_token_service.py
"""
Sponsor Portal Token Service

Issues, validates and revokes the opaque tokens that give an external sponsor
contact access to the portal of one sponsorship.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from sponsoring.core.config import settings
from sponsoring.core.email import EmailService
from sponsoring.crud.crud_sponsor import sponsorship as sponsorship_crud
from sponsoring.crud.crud_sponsor_portal_token import sponsor_portal_token as token_crud
from sponsoring.models.sponsor_portal_token import SponsorPortalToken
from sponsoring.models.sponsorship import Sponsorship
from sponsoring.utils.portal_tokens import build_portal_url, is_token_expired
from sponsoring.utils.sponsor_notifications import build_portal_invitation_email

logger = logging.getLogger(__name__)


@dataclass
class PortalTokenValidation:
    """Outcome of a token check; `error` is a reason fit for a portal error page."""
    valid: bool
    sponsorship: Optional[Sponsorship] = None
    token: Optional[SponsorPortalToken] = None
    error: Optional[str] = None


class SponsorPortalTokenService:
    """Service for sponsor portal access tokens."""

    def __init__(
        self,
        expiry_days: Optional[int] = None,
        email_service: Optional[EmailService] = None
    ):
        self.expiry_days = expiry_days or settings.PORTAL_TOKEN_EXPIRY_DAYS
        self.email_service = email_service

    def get_or_create(self, db: Session, sponsorship_id: str) -> SponsorPortalToken:
        """Reuse a still-valid token of the sponsorship, or issue a new one."""
        existing = token_crud.get_valid_by_sponsorship(db, sponsorship_id=sponsorship_id)
        if existing:
            return existing
        return token_crud.create_for_sponsorship(
            db, sponsorship_id=sponsorship_id, expiry_days=self.expiry_days
        )

    def generate_portal_link(
        self,
        db: Session,
        sponsorship_id: str,
        edition_slug: str,
        base_url: Optional[str] = None
    ) -> str:
        token = self.get_or_create(db, sponsorship_id)
        return build_portal_url(base_url or settings.PORTAL_BASE_URL, edition_slug, token.token)

    def send_portal_invitation(
        self,
        db: Session,
        sponsorship_id: str,
        edition_slug: str,
        event_name: str,
        base_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Email the sponsor contact a portal link. Returns the send result dict."""
        if not self.email_service:
            return {"success": False, "error": "Email service not configured"}

        item = sponsorship_crud.get_with_details(db, sponsorship_id=sponsorship_id)
        if not item or not item.sponsor:
            return {"success": False, "error": "Sponsor not found"}
        if not item.sponsor.contact_email:
            return {"success": False, "error": "No contact email for sponsor"}

        url = self.generate_portal_link(db, sponsorship_id, edition_slug, base_url)
        message = build_portal_invitation_email(
            to=item.sponsor.contact_email,
            sponsor=item.sponsor,
            event_name=event_name,
            portal_url=url,
            package_name=item.package.name if item.package else None,
        )
        return self.email_service.send(message)

    def validate(self, db: Session, token: str) -> PortalTokenValidation:
        """
        Resolve a raw token string to its sponsorship.

        On success last_used_at is stamped on the token. Failure reasons:
        "Token not found", "Token has expired", "Sponsor not found".
        """
        record = token_crud.get_by_token(db, token=token)
        if not record:
            return PortalTokenValidation(valid=False, error="Token not found")

        if is_token_expired(record):
            return PortalTokenValidation(valid=False, error="Token has expired")

        sponsorship = sponsorship_crud.get_with_details(db, sponsorship_id=record.sponsorship_id)
        if not sponsorship or not sponsorship.sponsor:
            return PortalTokenValidation(valid=False, error="Sponsor not found")

        token_crud.update_last_used(db, db_obj=record)
        return PortalTokenValidation(valid=True, sponsorship=sponsorship, token=record)

    def refresh(
        self, db: Session, sponsorship_id: str, expiry_days: Optional[int] = None
    ) -> SponsorPortalToken:
        """Invalidate every existing link of the sponsorship and issue a fresh token."""
        token_crud.delete_by_sponsorship(db, sponsorship_id=sponsorship_id)
        return token_crud.create_for_sponsorship(
            db, sponsorship_id=sponsorship_id, expiry_days=expiry_days or self.expiry_days
        )

    def revoke(self, db: Session, sponsorship_id: str) -> int:
        """Delete every token of the sponsorship without a replacement."""
        return token_crud.delete_by_sponsorship(db, sponsorship_id=sponsorship_id)
