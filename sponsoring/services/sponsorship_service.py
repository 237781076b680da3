# sponsoring/services/sponsorship_service.py
"""
Sponsorship Pipeline Service

Moves sponsorships through their lifecycle. Confirmation materializes the
package's deliverables and thanks the sponsor; payment sends a receipt and a
refund sends a refund notice.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from sponsoring.constants.sponsoring import status_value
from sponsoring.core.email import EmailService
from sponsoring.crud.crud_sponsor import sponsorship as sponsorship_crud
from sponsoring.models.sponsorship import Sponsorship
from sponsoring.services.deliverable_service import SponsorDeliverableService
from sponsoring.services.exceptions import InvalidTransitionError
from sponsoring.utils.sponsor_notifications import (
    build_payment_received_email,
    build_sponsorship_confirmed_email,
    build_sponsorship_refunded_email,
    format_amount,
)

logger = logging.getLogger(__name__)


class SponsorshipService:
    """Service for sponsorship status changes and their side effects."""

    def __init__(
        self,
        email_service: Optional[EmailService] = None,
        deliverable_service: Optional[SponsorDeliverableService] = None
    ):
        self.email_service = email_service
        self.deliverable_service = deliverable_service or SponsorDeliverableService(email_service)

    def apply_transition(
        self,
        db: Session,
        sponsorship_id: str,
        new_status: str,
        event_name: Optional[str] = None
    ) -> Optional[Sponsorship]:
        """
        Move a sponsorship to `new_status`. Returns None if it does not exist.

        Raises:
            InvalidTransitionError: if the move is not in the transition table
        """
        item = sponsorship_crud.get_with_details(db, sponsorship_id=sponsorship_id)
        if not item:
            return None

        old_status = item.status
        new_status = status_value(new_status)
        if not sponsorship_crud.transition_status(db, sponsorship=item, new_status=new_status):
            raise InvalidTransitionError("sponsorship", old_status, new_status)

        if new_status == "confirmed":
            self.deliverable_service.generate_for_sponsorship(db, sponsorship_id)
            if event_name:
                self._send(item, lambda to: build_sponsorship_confirmed_email(
                    to=to,
                    sponsor=item.sponsor,
                    event_name=event_name,
                    package_name=item.package.name if item.package else None,
                    amount=self._amount(item),
                ))
        elif new_status == "refunded" and event_name:
            self._send(item, lambda to: build_sponsorship_refunded_email(
                to=to,
                sponsor=item.sponsor,
                event_name=event_name,
                package_name=item.package.name if item.package else None,
                amount=self._amount(item),
            ))
        return item

    def mark_paid(
        self,
        db: Session,
        sponsorship_id: str,
        payment_reference: Optional[str] = None,
        event_name: Optional[str] = None
    ) -> Optional[Sponsorship]:
        """
        Record payment of a confirmed sponsorship. Returns None if it does not exist.

        Raises:
            InvalidTransitionError: if the sponsorship is not confirmed or is already paid
        """
        item = sponsorship_crud.get_with_details(db, sponsorship_id=sponsorship_id)
        if not item:
            return None

        if not sponsorship_crud.mark_paid(db, sponsorship=item, payment_reference=payment_reference):
            reason = (
                "Sponsorship is already marked paid"
                if item.paid_at
                else "Only confirmed sponsorships can be marked paid"
            )
            raise InvalidTransitionError("sponsorship", item.status, "paid", reason)

        if event_name:
            self._send(item, lambda to: build_payment_received_email(
                to=to,
                sponsor=item.sponsor,
                event_name=event_name,
                amount=self._amount(item),
            ))
        return item

    @staticmethod
    def _amount(item: Sponsorship) -> Optional[str]:
        return format_amount(item.amount, item.package.currency if item.package else None)

    def _send(self, item: Sponsorship, build) -> Dict[str, Any]:
        if not self.email_service:
            return {"success": False, "error": "Email service not configured"}
        if not item.sponsor or not item.sponsor.contact_email:
            logger.info(f"No contact email for sponsorship {item.id}, email skipped")
            return {"success": False, "error": "No contact email for sponsor"}
        return self.email_service.send(build(item.sponsor.contact_email))
