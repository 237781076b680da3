# sponsoring/models/sponsor.py
"""
Sponsor model - a company that sponsors events of an organization.

The same sponsor can sponsor several editions; each of those relationships
is a Sponsorship.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sponsoring.db.base_class import Base


class Sponsor(Base):
    __tablename__ = "sponsors"

    id = Column(
        String, primary_key=True, default=lambda: f"spon_{uuid.uuid4().hex[:12]}"
    )
    organization_id = Column(String, nullable=False, index=True)

    # Company Details
    name = Column(String(200), nullable=False)
    website = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)

    # Contact Information (primary contact, receives portal links and notifications)
    contact_name = Column(String(200), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    sponsorships = relationship("Sponsorship", back_populates="sponsor")
