# sponsoring/models/sponsor_package.py
"""
SponsorPackage model - a purchasable sponsorship level for one edition.

The package's benefit list is the authoritative source for the deliverables
tracked on every confirmed sponsorship that holds the package.
"""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sponsoring.db.base_class import Base


class SponsorPackage(Base):
    __tablename__ = "sponsor_packages"

    id = Column(
        String, primary_key=True, default=lambda: f"spkg_{uuid.uuid4().hex[:12]}"
    )
    organization_id = Column(String, nullable=False, index=True)
    edition_id = Column(String, nullable=False, index=True)

    # Package Details
    name = Column(String(100), nullable=False)  # e.g., "Gold", "Silver"
    tier = Column(Integer, nullable=False, default=1)  # 1 = most senior
    description = Column(Text, nullable=True)

    # Pricing (minor currency units)
    price = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="EUR")

    # Capacity; NULL means open-ended
    max_sponsors = Column(Integer, nullable=True)

    # Benefits (ordered JSON array of {"name": ..., "included": bool})
    benefits = Column(JSON, nullable=False, server_default=text("'[]'"))

    # Status
    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    sponsorships = relationship("Sponsorship", back_populates="package")
