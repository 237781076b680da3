# sponsoring/schemas/sponsoring_stats.py
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ==================== Sponsor Stats ====================

class SponsorsByPackage(BaseModel):
    """Sponsor count and remaining capacity for one package"""
    package_id: str
    package_name: str
    tier: int
    count: int
    max_sponsors: Optional[int] = None
    available_slots: Optional[int] = None  # None when the package is uncapped


class SponsorStatsDetailed(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_package: List[SponsorsByPackage] = Field(default_factory=list)
    confirmed: int
    active: int  # prospect + contacted + negotiating + confirmed


# ==================== Revenue Stats ====================

class RevenueStats(BaseModel):
    """Amounts are in minor currency units"""
    total_revenue: int
    paid_revenue: int
    pending_revenue: int
    target_revenue: Optional[int] = None
    progress_percent: float
    currency: str


# ==================== Pipeline Stats ====================

class PipelineStats(BaseModel):
    prospects: int
    contacted: int
    negotiating: int
    confirmed: int
    declined: int
    cancelled: int
    refunded: int
    conversion_rate: float  # confirmed / (total - cancelled) * 100
    average_deal_size: int


# ==================== Deliverables ====================

class PendingDeliverableSummary(BaseModel):
    sponsorship_id: str
    sponsor_id: str
    sponsor_name: str
    package_name: str
    pending_benefits: List[str]
    total_benefits: int
    completed_benefits: int


# ==================== Combined ====================

class SponsoringStats(BaseModel):
    sponsors: SponsorStatsDetailed
    revenue: RevenueStats
    pipeline: PipelineStats
    total_packages: int
    pending_deliverables: List[PendingDeliverableSummary] = Field(default_factory=list)
