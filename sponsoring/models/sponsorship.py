# sponsoring/models/sponsorship.py
"""
Sponsorship model - one sponsor's relationship to one event edition.

Lifecycle:
1. Created as a prospect when the organizer starts prospecting
2. Moved through contacted -> negotiating -> confirmed (or declined/cancelled)
3. Confirmation stamps confirmed_at and materializes the package's deliverables
4. Payment stamps paid_at (only once, only after confirmation)
5. A paid sponsorship can still be cancelled or refunded
"""

import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sponsoring.db.base_class import Base


class Sponsorship(Base):
    __tablename__ = "sponsorships"

    id = Column(
        String, primary_key=True, default=lambda: f"sps_{uuid.uuid4().hex[:12]}"
    )
    edition_id = Column(String, nullable=False, index=True)
    sponsor_id = Column(String, ForeignKey("sponsors.id"), nullable=False, index=True)
    package_id = Column(
        String, ForeignKey("sponsor_packages.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Status
    status = Column(String(20), nullable=False, default="prospect", index=True)
    # Options: 'prospect', 'contacted', 'negotiating', 'confirmed',
    #          'declined', 'cancelled', 'refunded'

    # Controlled timestamps, never set from request payloads
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    # Deal value in minor currency units
    amount = Column(Integer, nullable=True)

    # Billing references
    invoice_number = Column(String(100), nullable=True)
    payment_reference = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    sponsor = relationship("Sponsor", back_populates="sponsorships")
    package = relationship("SponsorPackage", back_populates="sponsorships")
    deliverables = relationship(
        "SponsorDeliverable", back_populates="sponsorship", cascade="all, delete-orphan"
    )
    portal_tokens = relationship(
        "SponsorPortalToken", back_populates="sponsorship", cascade="all, delete-orphan"
    )
