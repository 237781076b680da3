# sponsoring/crud/crud_sponsor.py
"""
CRUD operations for sponsors, sponsor packages and sponsorships.
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from .base import CRUDBase
from sponsoring.models.sponsor import Sponsor
from sponsoring.models.sponsor_package import SponsorPackage
from sponsoring.models.sponsorship import Sponsorship
from sponsoring.schemas.sponsoring import (
    SponsorCreate, SponsorUpdate,
    SponsorPackageCreate, SponsorPackageUpdate,
    SponsorshipCreate, SponsorshipUpdate,
)
from sponsoring.utils.dates import utcnow
from sponsoring.constants.sponsoring import status_value
from sponsoring.utils.sponsorship_status import can_transition

logger = logging.getLogger(__name__)


# ============================================
# Sponsor CRUD
# ============================================

class CRUDSponsor(CRUDBase[Sponsor, SponsorCreate, SponsorUpdate]):
    def get_by_organization(self, db: Session, *, organization_id: str) -> List[Sponsor]:
        """Get all sponsors of an organization, alphabetically."""
        return (
            db.query(self.model)
            .filter(self.model.organization_id == organization_id)
            .order_by(self.model.name)
            .all()
        )

    def create_with_organization(
        self, db: Session, *, obj_in: SponsorCreate, organization_id: str
    ) -> Sponsor:
        db_obj = self.model(**obj_in.model_dump(), organization_id=organization_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


# ============================================
# Sponsor Package CRUD
# ============================================

class CRUDSponsorPackage(CRUDBase[SponsorPackage, SponsorPackageCreate, SponsorPackageUpdate]):
    def create_with_organization(
        self, db: Session, *, obj_in: SponsorPackageCreate, organization_id: str
    ) -> SponsorPackage:
        db_obj = self.model(**obj_in.model_dump(), organization_id=organization_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_by_edition(
        self,
        db: Session,
        *,
        edition_id: str,
        active_only: bool = False,
        organization_id: Optional[str] = None
    ) -> List[SponsorPackage]:
        """Get all packages for an edition, most senior tier first."""
        query = db.query(self.model).filter(self.model.edition_id == edition_id)
        if organization_id:
            query = query.filter(self.model.organization_id == organization_id)
        if active_only:
            query = query.filter(self.model.is_active == True)
        return query.order_by(self.model.tier, self.model.name).all()

    def count_by_edition(
        self, db: Session, *, edition_id: str, organization_id: Optional[str] = None
    ) -> int:
        query = db.query(func.count(self.model.id)).filter(self.model.edition_id == edition_id)
        if organization_id:
            query = query.filter(self.model.organization_id == organization_id)
        return query.scalar()


# ============================================
# Sponsorship CRUD
# ============================================

class CRUDSponsorship(CRUDBase[Sponsorship, SponsorshipCreate, SponsorshipUpdate]):
    def get_with_details(self, db: Session, *, sponsorship_id: str) -> Optional[Sponsorship]:
        """Get a sponsorship with its sponsor and package loaded."""
        return db.query(self.model).options(
            joinedload(self.model.sponsor),
            joinedload(self.model.package),
        ).filter(self.model.id == sponsorship_id).first()

    def get_by_edition(
        self,
        db: Session,
        *,
        edition_id: str,
        status: Optional[str] = None,
        include_details: bool = False,
        organization_id: Optional[str] = None
    ) -> List[Sponsorship]:
        """
        Get all sponsorships of an edition, newest first. With
        `organization_id`, only those whose sponsor belongs to that organization.
        """
        query = db.query(self.model).filter(self.model.edition_id == edition_id)
        if organization_id:
            query = query.join(Sponsor, self.model.sponsor_id == Sponsor.id).filter(
                Sponsor.organization_id == organization_id
            )
        if status:
            query = query.filter(self.model.status == status_value(status))
        if include_details:
            query = query.options(
                joinedload(self.model.sponsor),
                joinedload(self.model.package),
            )
        return query.order_by(self.model.created_at.desc()).all()

    def get_confirmed(
        self, db: Session, *, edition_id: str, organization_id: Optional[str] = None
    ) -> List[Sponsorship]:
        return self.get_by_edition(
            db,
            edition_id=edition_id,
            status="confirmed",
            include_details=True,
            organization_id=organization_id,
        )

    def get_by_edition_and_sponsor(
        self, db: Session, *, edition_id: str, sponsor_id: str
    ) -> Optional[Sponsorship]:
        return db.query(self.model).filter(
            self.model.edition_id == edition_id,
            self.model.sponsor_id == sponsor_id,
        ).first()

    def transition_status(
        self, db: Session, *, sponsorship: Sponsorship, new_status: str
    ) -> bool:
        """
        Validate and apply a status transition. Returns True if valid.

        This is the only place sponsorship status is written. Moving to
        'confirmed' stamps confirmed_at; no other transition touches timestamps.
        """
        old_status = sponsorship.status
        new_status = status_value(new_status)

        if not can_transition(old_status, new_status):
            logger.warning(
                f"Invalid sponsorship transition for {sponsorship.id}: {old_status} → {new_status}"
            )
            return False

        sponsorship.status = new_status
        if new_status == "confirmed":
            sponsorship.confirmed_at = utcnow()

        db.commit()
        db.refresh(sponsorship)
        logger.info(f"Sponsorship {sponsorship.id} moved {old_status} → {new_status}")
        return True

    def mark_paid(
        self,
        db: Session,
        *,
        sponsorship: Sponsorship,
        payment_reference: Optional[str] = None
    ) -> bool:
        """
        Stamp paid_at. Returns False when the sponsorship is not confirmed,
        was never stamped confirmed, or has already been marked paid.
        """
        if sponsorship.status != "confirmed" or not sponsorship.confirmed_at:
            logger.warning(f"Sponsorship {sponsorship.id} cannot be paid before confirmation")
            return False
        if sponsorship.paid_at:
            logger.warning(f"Sponsorship {sponsorship.id} is already marked paid")
            return False

        sponsorship.paid_at = utcnow()
        if payment_reference:
            sponsorship.payment_reference = payment_reference

        db.commit()
        db.refresh(sponsorship)
        logger.info(f"Sponsorship {sponsorship.id} marked paid")
        return True


# Create singleton instances
sponsor = CRUDSponsor(Sponsor)
sponsor_package = CRUDSponsorPackage(SponsorPackage)
sponsorship = CRUDSponsorship(Sponsorship)
