# sponsoring/crud/crud_sponsor_portal_token.py
"""
CRUD operations for sponsor portal tokens.
"""

import logging
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .base import CRUDBase
from sponsoring.models.sponsor_portal_token import SponsorPortalToken
from sponsoring.utils.dates import utcnow
from sponsoring.utils.portal_tokens import (
    TOKEN_EXPIRY_DAYS,
    get_token_expiry_date,
    is_token_valid,
)

logger = logging.getLogger(__name__)


class CRUDSponsorPortalToken(CRUDBase[SponsorPortalToken, BaseModel, BaseModel]):
    def get_by_token(self, db: Session, *, token: str) -> Optional[SponsorPortalToken]:
        return db.query(self.model).filter(self.model.token == token).first()

    def get_valid_by_sponsorship(
        self, db: Session, *, sponsorship_id: str
    ) -> Optional[SponsorPortalToken]:
        """Newest unexpired token of a sponsorship, if any."""
        tokens = (
            db.query(self.model)
            .filter(self.model.sponsorship_id == sponsorship_id)
            .order_by(self.model.created_at.desc())
            .all()
        )
        now = utcnow()
        return next((t for t in tokens if is_token_valid(t, now)), None)

    def create_for_sponsorship(
        self, db: Session, *, sponsorship_id: str, expiry_days: int = TOKEN_EXPIRY_DAYS
    ) -> SponsorPortalToken:
        db_obj = self.model(
            sponsorship_id=sponsorship_id,
            expires_at=get_token_expiry_date(expiry_days),
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(f"Portal token {db_obj.id} issued for sponsorship {sponsorship_id}")
        return db_obj

    def update_last_used(self, db: Session, *, db_obj: SponsorPortalToken) -> SponsorPortalToken:
        db_obj.last_used_at = utcnow()
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete_by_sponsorship(self, db: Session, *, sponsorship_id: str) -> int:
        """Delete every token of a sponsorship. Returns how many were removed."""
        deleted = (
            db.query(self.model)
            .filter(self.model.sponsorship_id == sponsorship_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        logger.info(f"Deleted {deleted} portal token(s) for sponsorship {sponsorship_id}")
        return deleted


sponsor_portal_token = CRUDSponsorPortalToken(SponsorPortalToken)
