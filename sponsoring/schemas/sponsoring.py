# sponsoring/schemas/sponsoring.py
"""
Pydantic schemas for sponsoring: packages, sponsors, sponsorships,
deliverables and portal tokens.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from sponsoring.constants.sponsoring import (
    DEFAULT_CURRENCY,
    DeliverableStatus,
    SponsorshipStatus,
)
from sponsoring.utils.sponsorship_status import get_status_label
from sponsoring.utils.sponsorship_status import valid_transitions as allowed_transitions


# ============================================
# Package Schemas
# ============================================

class Benefit(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    included: bool = Field(default=True)


class SponsorPackageBase(BaseModel):
    name: str = Field(..., max_length=100)
    tier: int = Field(default=1, ge=1)
    price: int = Field(default=0, ge=0)  # minor currency units
    currency: str = Field(default=DEFAULT_CURRENCY, max_length=3)
    max_sponsors: Optional[int] = Field(None, ge=1)
    benefits: List[Benefit] = Field(default_factory=list)
    description: Optional[str] = Field(None, max_length=2000)


class SponsorPackageCreate(SponsorPackageBase):
    edition_id: str


class SponsorPackageUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    tier: Optional[int] = Field(None, ge=1)
    price: Optional[int] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=3)
    max_sponsors: Optional[int] = Field(None, ge=1)
    benefits: Optional[List[Benefit]] = None
    description: Optional[str] = Field(None, max_length=2000)
    is_active: Optional[bool] = None


class SponsorPackageResponse(SponsorPackageBase):
    id: str
    organization_id: str
    edition_id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================
# Sponsor Schemas
# ============================================

class SponsorBase(BaseModel):
    name: str = Field(..., max_length=200)
    website: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    contact_name: Optional[str] = Field(None, max_length=200)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)


class SponsorCreate(SponsorBase):
    pass


class SponsorUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    website: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    contact_name: Optional[str] = Field(None, max_length=200)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)


class SponsorResponse(SponsorBase):
    id: str
    organization_id: str
    # Stored contact addresses are not re-validated on the way out
    contact_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================
# Sponsorship Schemas
# ============================================

class SponsorshipCreate(BaseModel):
    edition_id: str
    sponsor_id: str
    package_id: Optional[str] = None
    amount: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=5000)


class SponsorshipUpdate(BaseModel):
    """
    Free-form fields only. Status and the confirmation/payment timestamps
    change exclusively through the transition and mark-paid operations.
    """
    package_id: Optional[str] = None
    amount: Optional[int] = Field(None, ge=0)
    invoice_number: Optional[str] = Field(None, max_length=100)
    payment_reference: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=5000)


class SponsorshipTransitionRequest(BaseModel):
    status: SponsorshipStatus
    event_name: Optional[str] = None


class SponsorshipMarkPaidRequest(BaseModel):
    payment_reference: Optional[str] = Field(None, max_length=255)
    event_name: Optional[str] = None


class SponsorshipResponse(BaseModel):
    id: str
    edition_id: str
    sponsor_id: str
    package_id: Optional[str] = None
    status: SponsorshipStatus
    confirmed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    amount: Optional[int] = None
    invoice_number: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SponsorshipWithDetailsResponse(SponsorshipResponse):
    sponsor: Optional[SponsorResponse] = None
    package: Optional[SponsorPackageResponse] = None
    status_label: Optional[str] = None
    valid_transitions: List[SponsorshipStatus] = Field(default_factory=list)

    @classmethod
    def from_sponsorship(cls, sponsorship) -> "SponsorshipWithDetailsResponse":
        response = cls.model_validate(sponsorship)
        response.status_label = get_status_label(sponsorship.status)
        response.valid_transitions = [
            SponsorshipStatus(s) for s in allowed_transitions(sponsorship.status)
        ]
        return response


# ============================================
# Deliverable Schemas
# ============================================

class SponsorDeliverableCreate(BaseModel):
    # Store plain strings, not enum members
    model_config = ConfigDict(use_enum_values=True)

    sponsorship_id: str
    benefit_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: DeliverableStatus = "pending"
    due_date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=5000)


class SponsorDeliverableUpdate(BaseModel):
    """Editable details; status changes go through the transition gate."""
    benefit_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    due_date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=5000)


class DeliverableStatusUpdate(BaseModel):
    status: DeliverableStatus
    event_name: str


class DeliverableMarkDelivered(BaseModel):
    event_name: str
    notes: Optional[str] = Field(None, max_length=5000)


class DeliverableGenerateRequest(BaseModel):
    default_due_date: Optional[datetime] = None


class SponsorDeliverableResponse(BaseModel):
    id: str
    sponsorship_id: str
    benefit_name: str
    description: Optional[str] = None
    status: DeliverableStatus
    due_date: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DeliverableGenerationResult(BaseModel):
    created: int = 0
    skipped: int = 0
    deliverables: List[SponsorDeliverableResponse] = Field(default_factory=list)
    # Open deliverables whose benefit is no longer included in the package
    stale_benefits: List[str] = Field(default_factory=list)


class SponsorshipGenerationOutcome(BaseModel):
    sponsorship_id: str
    success: bool
    created: int = 0
    error: Optional[str] = None


class EditionGenerationResult(BaseModel):
    sponsors_processed: int = 0
    deliverables_created: int = 0
    outcomes: List[SponsorshipGenerationOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> List[SponsorshipGenerationOutcome]:
        return [o for o in self.outcomes if not o.success]


class DeliverablesSummary(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    delivered: int = 0
    overdue: int = 0
    due_soon: int = 0
    completion_percent: int = 0


# ============================================
# Portal Token Schemas
# ============================================

class SponsorPortalTokenResponse(BaseModel):
    id: str
    sponsorship_id: str
    token: str
    expires_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PortalLinkRequest(BaseModel):
    edition_slug: str = Field(..., min_length=1, max_length=200)
    base_url: Optional[str] = None
    # Set to also email the link to the sponsor contact
    event_name: Optional[str] = None


class PortalTokenRefreshRequest(BaseModel):
    expiry_days: Optional[int] = Field(None, ge=1, le=365)


class PortalLinkResponse(BaseModel):
    url: str
    email_sent: bool = False
    email_error: Optional[str] = None


class PortalView(BaseModel):
    """What an external sponsor contact sees in the self-service portal."""
    sponsorship: SponsorshipWithDetailsResponse
    deliverables: List[SponsorDeliverableResponse] = Field(default_factory=list)
    summary: DeliverablesSummary
    token_expires_at: Optional[datetime] = None
    # Lets the portal prompt the sponsor to ask for a fresh link
    token_expiring_soon: bool = False
