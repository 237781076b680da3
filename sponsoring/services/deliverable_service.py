# sponsoring/services/deliverable_service.py
"""
Sponsor Deliverable Service

Handles business logic for:
- Generating deliverables from a sponsorship's package benefits
- Edition-wide generation for every confirmed sponsorship
- Deliverable status changes and "benefit delivered" notifications
- Per-sponsorship progress summaries
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from sponsoring.constants.sponsoring import status_value
from sponsoring.core.config import settings
from sponsoring.core.email import EmailService
from sponsoring.crud.crud_sponsor import sponsorship as sponsorship_crud
from sponsoring.crud.crud_sponsor_deliverable import sponsor_deliverable as deliverable_crud
from sponsoring.models.sponsor_deliverable import SponsorDeliverable
from sponsoring.schemas.sponsoring import (
    DeliverableGenerationResult,
    DeliverablesSummary,
    EditionGenerationResult,
    SponsorDeliverableResponse,
    SponsorshipGenerationOutcome,
)
from sponsoring.services.exceptions import InvalidTransitionError
from sponsoring.utils.deliverables import (
    calculate_deliverable_stats,
    find_stale_deliverables,
    is_due_soon,
    plan_deliverables,
    sort_deliverables_by_due_date,
)
from sponsoring.utils.sponsor_notifications import build_benefit_delivered_email
from sponsoring.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


def _percent(part: int, total: int) -> int:
    return round_half_up(part * 100 / total) if total > 0 else 0


class SponsorDeliverableService:
    """Service for generating and tracking sponsor deliverables."""

    def __init__(self, email_service: Optional[EmailService] = None):
        self.email_service = email_service

    # ========================================
    # Generation
    # ========================================

    def generate_for_sponsorship(
        self,
        db: Session,
        sponsorship_id: str,
        default_due_date: Optional[datetime] = None
    ) -> DeliverableGenerationResult:
        """
        Create the deliverables a sponsorship is missing.

        A sponsorship without a package, or whose package lists no benefits,
        has nothing to generate; that is a zero result, not an error.
        """
        sponsorship = sponsorship_crud.get_with_details(db, sponsorship_id=sponsorship_id)
        if not sponsorship or not sponsorship.package or not sponsorship.package.benefits:
            return DeliverableGenerationResult()

        benefits = sponsorship.package.benefits
        existing = deliverable_crud.get_by_sponsorship(db, sponsorship_id=sponsorship_id)

        to_create, skipped = plan_deliverables(
            sponsorship_id, benefits, existing, default_due_date
        )
        stale = find_stale_deliverables(benefits, existing)
        if stale:
            logger.warning(
                f"Sponsorship {sponsorship_id} has {len(stale)} open deliverable(s) "
                f"for benefits no longer in its package"
            )

        created = deliverable_crud.create_many(db, objs_in=to_create) if to_create else []
        # Rows lost to a concurrent run count as skipped
        skipped += len(to_create) - len(created)

        logger.info(
            f"Generated {len(created)} deliverable(s) for sponsorship {sponsorship_id} "
            f"({skipped} skipped)"
        )
        return DeliverableGenerationResult(
            created=len(created),
            skipped=skipped,
            deliverables=[SponsorDeliverableResponse.model_validate(d) for d in created],
            stale_benefits=[d.benefit_name for d in stale],
        )

    def generate_for_edition(
        self,
        db: Session,
        edition_id: str,
        default_due_date: Optional[datetime] = None,
        organization_id: Optional[str] = None
    ) -> EditionGenerationResult:
        """
        Run generation for every confirmed sponsorship of an edition, limited
        to sponsors of `organization_id` when given.

        Sponsorships are processed one at a time. A failure is rolled back for
        that sponsorship only and reported in its outcome; work already done
        for other sponsorships is kept.
        """
        confirmed = sponsorship_crud.get_confirmed(
            db, edition_id=edition_id, organization_id=organization_id
        )
        result = EditionGenerationResult()

        for item in confirmed:
            sponsorship_id = item.id
            try:
                generated = self.generate_for_sponsorship(db, sponsorship_id, default_due_date)
            except Exception as e:
                db.rollback()
                logger.exception(f"Deliverable generation failed for sponsorship {sponsorship_id}")
                result.outcomes.append(
                    SponsorshipGenerationOutcome(
                        sponsorship_id=sponsorship_id, success=False, error=str(e)
                    )
                )
                continue

            result.sponsors_processed += 1
            result.deliverables_created += generated.created
            result.outcomes.append(
                SponsorshipGenerationOutcome(
                    sponsorship_id=sponsorship_id, success=True, created=generated.created
                )
            )

        logger.info(
            f"Edition {edition_id}: {result.deliverables_created} deliverable(s) created for "
            f"{result.sponsors_processed} sponsorship(s), {len(result.failures)} failure(s)"
        )
        return result

    # ========================================
    # Status Changes
    # ========================================

    def update_status(
        self,
        db: Session,
        deliverable_id: str,
        new_status: str,
        event_name: str
    ) -> Optional[SponsorDeliverable]:
        """
        Change a deliverable's status. Returns None if the deliverable does not exist.

        Moving to 'delivered' notifies the sponsor when an email service is
        configured; no other status sends anything.

        Raises:
            InvalidTransitionError: if the deliverable is already in `new_status`
        """
        deliverable = deliverable_crud.get(db, deliverable_id)
        if not deliverable:
            return None

        old_status = deliverable.status
        if not deliverable_crud.transition_status(db, deliverable=deliverable, new_status=new_status):
            raise InvalidTransitionError("deliverable", old_status, status_value(new_status))

        if deliverable.status == "delivered" and self.email_service:
            self._notify(db, deliverable_id, event_name)
        return deliverable

    def mark_as_delivered(
        self,
        db: Session,
        deliverable_id: str,
        event_name: str,
        notes: Optional[str] = None
    ) -> Optional[SponsorDeliverable]:
        """
        Set status 'delivered', stamp delivered_at and attach notes in one
        update, then notify like `update_status`.
        """
        deliverable = deliverable_crud.get(db, deliverable_id)
        if not deliverable:
            return None

        old_status = deliverable.status
        if not deliverable_crud.transition_status(
            db, deliverable=deliverable, new_status="delivered", notes=notes
        ):
            raise InvalidTransitionError("deliverable", old_status, "delivered")

        if self.email_service:
            self._notify(db, deliverable_id, event_name)
        return deliverable

    def _notify(self, db: Session, deliverable_id: str, event_name: str) -> None:
        expanded = deliverable_crud.get_with_details(db, deliverable_id=deliverable_id)
        outcome = self.notify_delivery(expanded, event_name)
        if not outcome["success"]:
            logger.warning(
                f"Delivery notification for {deliverable_id} not sent: {outcome.get('error')}"
            )

    # ========================================
    # Notifications
    # ========================================

    def notify_delivery(self, deliverable: SponsorDeliverable, event_name: str) -> Dict[str, Any]:
        """
        Send the "benefit delivered" email for an expanded deliverable.

        Returns:
            {"success": bool, "error": "..."}; the error is one of
            "Email service not configured", "No contact email for sponsor",
            or whatever the email service reported.
        """
        if not self.email_service:
            return {"success": False, "error": "Email service not configured"}

        sponsorship = deliverable.sponsorship if deliverable else None
        sponsor = sponsorship.sponsor if sponsorship else None
        if not sponsor or not sponsor.contact_email:
            return {"success": False, "error": "No contact email for sponsor"}

        message = build_benefit_delivered_email(
            to=sponsor.contact_email,
            sponsor=sponsor,
            deliverable=deliverable,
            event_name=event_name,
        )
        result = self.email_service.send(message)
        if result.get("success"):
            return {"success": True}
        return {"success": False, "error": result.get("error", "Failed to send email")}

    # ========================================
    # Reads
    # ========================================

    def summarize(self, db: Session, sponsorship_id: str) -> DeliverablesSummary:
        """
        Counts by status, overdue and due-soon counts as of now, and a
        whole-number completion percent.
        """
        deliverables = deliverable_crud.get_by_sponsorship(db, sponsorship_id=sponsorship_id)
        stats = calculate_deliverable_stats(deliverables)
        total = stats["total"]

        return DeliverablesSummary(
            total=total,
            pending=stats["pending"],
            in_progress=stats["in_progress"],
            delivered=stats["delivered"],
            overdue=stats["overdue"],
            due_soon=sum(
                1 for d in deliverables if is_due_soon(d, settings.DELIVERABLE_DUE_SOON_DAYS)
            ),
            completion_percent=_percent(stats["delivered"], total),
        )

    def list_for_sponsorship(self, db: Session, sponsorship_id: str) -> List[SponsorDeliverable]:
        return sort_deliverables_by_due_date(
            deliverable_crud.get_by_sponsorship(db, sponsorship_id=sponsorship_id)
        )

    def list_pending_for_edition(
        self, db: Session, edition_id: str, organization_id: Optional[str] = None
    ) -> List[SponsorDeliverable]:
        return sort_deliverables_by_due_date(
            deliverable_crud.get_pending_by_edition(
                db, edition_id=edition_id, organization_id=organization_id
            )
        )

    def list_overdue_for_edition(
        self, db: Session, edition_id: str, organization_id: Optional[str] = None
    ) -> List[SponsorDeliverable]:
        return deliverable_crud.get_overdue_by_edition(
            db, edition_id=edition_id, organization_id=organization_id
        )
