# sponsoring/models/sponsor_deliverable.py
"""
SponsorDeliverable model - one contracted benefit to fulfil for a sponsorship.

benefit_name is copied from the package when the deliverable is generated; it
is not a live reference, so later package edits leave it untouched.
"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sponsoring.db.base_class import Base


class SponsorDeliverable(Base):
    __tablename__ = "sponsor_deliverables"
    __table_args__ = (
        # At most one deliverable per benefit per sponsorship, even under
        # concurrent generation.
        UniqueConstraint("sponsorship_id", "benefit_name", name="uq_deliverable_benefit"),
    )

    id = Column(
        String, primary_key=True, default=lambda: f"sdlv_{uuid.uuid4().hex[:12]}"
    )
    sponsorship_id = Column(
        String, ForeignKey("sponsorships.id", ondelete="CASCADE"), nullable=False, index=True
    )

    benefit_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)
    # Options: 'pending', 'in_progress', 'delivered'

    due_date = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)  # set iff delivered
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    sponsorship = relationship("Sponsorship", back_populates="deliverables")
