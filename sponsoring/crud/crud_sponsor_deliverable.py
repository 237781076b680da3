# sponsoring/crud/crud_sponsor_deliverable.py
"""
CRUD operations for sponsor deliverables.
"""

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from .base import CRUDBase
from sponsoring.constants.sponsoring import status_value
from sponsoring.models.sponsor import Sponsor
from sponsoring.models.sponsor_deliverable import SponsorDeliverable
from sponsoring.models.sponsorship import Sponsorship
from sponsoring.schemas.sponsoring import SponsorDeliverableCreate, SponsorDeliverableUpdate
from sponsoring.utils.dates import utcnow
from sponsoring.utils.deliverables import (
    DELIVERABLE_STATUS_ORDER,
    can_transition_deliverable,
    is_overdue,
)

logger = logging.getLogger(__name__)


class CRUDSponsorDeliverable(
    CRUDBase[SponsorDeliverable, SponsorDeliverableCreate, SponsorDeliverableUpdate]
):
    def get_by_sponsorship(self, db: Session, *, sponsorship_id: str) -> List[SponsorDeliverable]:
        """Get all deliverables of a sponsorship, earliest due first."""
        return (
            db.query(self.model)
            .filter(self.model.sponsorship_id == sponsorship_id)
            .order_by(self.model.due_date, self.model.created_at)
            .all()
        )

    def get_with_details(self, db: Session, *, deliverable_id: str) -> Optional[SponsorDeliverable]:
        """Get a deliverable with its sponsorship, sponsor and package loaded."""
        return db.query(self.model).options(
            joinedload(self.model.sponsorship).joinedload(Sponsorship.sponsor),
            joinedload(self.model.sponsorship).joinedload(Sponsorship.package),
        ).filter(self.model.id == deliverable_id).first()

    def get_pending_by_edition(
        self,
        db: Session,
        *,
        edition_id: str,
        confirmed_only: bool = True,
        organization_id: Optional[str] = None
    ) -> List[SponsorDeliverable]:
        """Non-delivered deliverables of an edition, with sponsorship details."""
        query = (
            db.query(self.model)
            .join(Sponsorship, self.model.sponsorship_id == Sponsorship.id)
            .options(
                joinedload(self.model.sponsorship).joinedload(Sponsorship.sponsor),
                joinedload(self.model.sponsorship).joinedload(Sponsorship.package),
            )
            .filter(
                Sponsorship.edition_id == edition_id,
                self.model.status != "delivered",
            )
        )
        if confirmed_only:
            query = query.filter(Sponsorship.status == "confirmed")
        if organization_id:
            query = query.join(Sponsor, Sponsorship.sponsor_id == Sponsor.id).filter(
                Sponsor.organization_id == organization_id
            )
        return query.order_by(self.model.due_date, self.model.created_at).all()

    def get_overdue_by_edition(
        self, db: Session, *, edition_id: str, now=None, organization_id: Optional[str] = None
    ) -> List[SponsorDeliverable]:
        """Open deliverables of an edition whose due date has passed."""
        pending = self.get_pending_by_edition(
            db, edition_id=edition_id, confirmed_only=False, organization_id=organization_id
        )
        return [d for d in pending if is_overdue(d, now)]

    def count_by_sponsorship(self, db: Session, *, sponsorship_id: str) -> Dict[str, int]:
        counts = {status: 0 for status in DELIVERABLE_STATUS_ORDER}
        rows = db.query(self.model.status).filter(
            self.model.sponsorship_id == sponsorship_id
        ).all()
        for (status,) in rows:
            counts[status] = counts.get(status, 0) + 1
        return counts

    def create_many(
        self, db: Session, *, objs_in: Sequence[SponsorDeliverableCreate]
    ) -> List[SponsorDeliverable]:
        """
        Insert deliverables one by one, each inside its own savepoint.

        A row rejected by the (sponsorship_id, benefit_name) unique constraint
        already exists, typically written by a concurrent generation run; it is
        skipped and left out of the returned list.
        """
        created = []
        for obj_in in objs_in:
            db_obj = self.model(**obj_in.model_dump())
            try:
                with db.begin_nested():
                    db.add(db_obj)
            except IntegrityError:
                logger.info(
                    f"Deliverable '{obj_in.benefit_name}' already exists for "
                    f"sponsorship {obj_in.sponsorship_id}, skipped"
                )
                continue
            created.append(db_obj)

        db.commit()
        for db_obj in created:
            db.refresh(db_obj)
        return created

    def transition_status(
        self,
        db: Session,
        *,
        deliverable: SponsorDeliverable,
        new_status: str,
        notes: Optional[str] = None
    ) -> bool:
        """
        Validate and apply a status change. Returns True if valid.

        Entering 'delivered' stamps delivered_at, leaving it clears the stamp.
        """
        old_status = deliverable.status
        new_status = status_value(new_status)

        if not can_transition_deliverable(old_status, new_status):
            logger.warning(
                f"Invalid deliverable transition for {deliverable.id}: {old_status} → {new_status}"
            )
            return False

        deliverable.status = new_status
        if new_status == "delivered":
            deliverable.delivered_at = utcnow()
        else:
            deliverable.delivered_at = None
        if notes is not None:
            deliverable.notes = notes

        db.commit()
        db.refresh(deliverable)
        logger.info(f"Deliverable {deliverable.id} moved {old_status} → {new_status}")
        return True


sponsor_deliverable = CRUDSponsorDeliverable(SponsorDeliverable)
