# sponsoring/models/sponsor_portal_token.py
"""
SponsorPortalToken model - grants an external sponsor contact access to the
self-service portal of exactly one sponsorship.

Token flow:
1. Organizer requests a portal link -> a token is issued (or a valid one reused)
2. Sponsor opens the link -> token is validated, last_used_at stamped
3. Organizer refreshes (leaked link) -> all tokens deleted, a new one issued
4. Organizer revokes -> all tokens deleted
"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sponsoring.db.base_class import Base
from sponsoring.utils.portal_tokens import generate_token


class SponsorPortalToken(Base):
    __tablename__ = "sponsor_portal_tokens"

    id = Column(
        String, primary_key=True, default=lambda: f"sptk_{uuid.uuid4().hex[:12]}"
    )
    sponsorship_id = Column(
        String, ForeignKey("sponsorships.id", ondelete="CASCADE"), nullable=False, index=True
    )

    token = Column(String(64), nullable=False, unique=True, default=generate_token)

    # NULL means the token never expires
    expires_at = Column(DateTime(timezone=True), nullable=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    sponsorship = relationship("Sponsorship", back_populates="portal_tokens")
