# sponsoring/services/sponsoring_stats_service.py
"""
Sponsoring Statistics Service

Read-side reports for one edition, limited to one organization's sponsors
and packages when `organization_id` is given:
- Sponsor counts by status and by package
- Revenue against the edition's revenue target
- Pipeline conversion and average deal size
- Open deliverables per confirmed sponsorship

The reports share the caller's session, so `get_stats` builds them one after
the other.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from sponsoring.constants.sponsoring import DEFAULT_CURRENCY
from sponsoring.crud.crud_sponsor import sponsor_package as package_crud
from sponsoring.crud.crud_sponsor import sponsorship as sponsorship_crud
from sponsoring.crud.crud_sponsor_deliverable import sponsor_deliverable as deliverable_crud
from sponsoring.schemas.sponsoring_stats import (
    PendingDeliverableSummary,
    PipelineStats,
    RevenueStats,
    SponsoringStats,
    SponsorsByPackage,
    SponsorStatsDetailed,
)
from sponsoring.utils.rounding import round_half_up
from sponsoring.utils.sponsorship_status import (
    calculate_sponsorship_stats,
    is_pipeline_status,
)

logger = logging.getLogger(__name__)

UNKNOWN_SPONSOR = "Unknown Sponsor"
UNKNOWN_PACKAGE = "Unknown Package"


class SponsoringStatsService:
    """Service for sponsoring statistics of an edition."""

    def sponsor_stats(
        self, db: Session, edition_id: str, organization_id: Optional[str] = None
    ) -> SponsorStatsDetailed:
        sponsorships = sponsorship_crud.get_by_edition(
            db, edition_id=edition_id, organization_id=organization_id
        )
        packages = package_crud.get_by_edition(
            db, edition_id=edition_id, organization_id=organization_id
        )

        tally = calculate_sponsorship_stats(sponsorships)
        by_status = tally["by_status"]

        package_counts: Dict[str, int] = {}
        for item in sponsorships:
            if item.package_id:
                package_counts[item.package_id] = package_counts.get(item.package_id, 0) + 1

        by_package = []
        for pkg in packages:
            count = package_counts.get(pkg.id, 0)
            max_sponsors = pkg.max_sponsors or None
            by_package.append(
                SponsorsByPackage(
                    package_id=pkg.id,
                    package_name=pkg.name,
                    tier=pkg.tier or 1,
                    count=count,
                    max_sponsors=max_sponsors,
                    available_slots=max(0, max_sponsors - count) if max_sponsors else None,
                )
            )

        return SponsorStatsDetailed(
            total=tally["total"],
            by_status=by_status,
            by_package=by_package,
            confirmed=tally["confirmed"],
            active=sum(1 for item in sponsorships if is_pipeline_status(item.status)),
        )

    def revenue_stats(
        self, db: Session, edition_id: str, organization_id: Optional[str] = None
    ) -> RevenueStats:
        """
        Confirmed revenue against the edition's target.

        The target sums price x max_sponsors over packages that have both a
        positive price and a cap; uncapped packages add nothing to it. Without
        a target, progress is 0.
        """
        confirmed = sponsorship_crud.get_by_edition(
            db, edition_id=edition_id, status="confirmed", organization_id=organization_id
        )
        packages = package_crud.get_by_edition(
            db, edition_id=edition_id, organization_id=organization_id
        )

        currency = (packages[0].currency or DEFAULT_CURRENCY) if packages else DEFAULT_CURRENCY

        total_revenue = 0
        paid_revenue = 0
        for item in confirmed:
            amount = item.amount or 0
            total_revenue += amount
            if item.paid_at:
                paid_revenue += amount

        target_revenue = None
        for pkg in packages:
            if pkg.max_sponsors and (pkg.price or 0) > 0:
                target_revenue = (target_revenue or 0) + pkg.price * pkg.max_sponsors

        if target_revenue:
            progress_percent = round_half_up(total_revenue / target_revenue * 100, 2)
        else:
            progress_percent = 0

        return RevenueStats(
            total_revenue=total_revenue,
            paid_revenue=paid_revenue,
            pending_revenue=total_revenue - paid_revenue,
            target_revenue=target_revenue,
            progress_percent=progress_percent,
            currency=currency,
        )

    def pipeline_stats(
        self, db: Session, edition_id: str, organization_id: Optional[str] = None
    ) -> PipelineStats:
        """
        Funnel counts, conversion rate and average deal size.

        Cancelled deals are left out of the conversion denominator.
        """
        sponsorships = sponsorship_crud.get_by_edition(
            db, edition_id=edition_id, organization_id=organization_id
        )
        tally = calculate_sponsorship_stats(sponsorships)
        counts = tally["by_status"]

        eligible_total = tally["total"] - counts["cancelled"]
        conversion_rate = 0
        if eligible_total > 0:
            conversion_rate = round_half_up(counts["confirmed"] / eligible_total * 100, 2)
        average_deal_size = 0
        if counts["confirmed"] > 0:
            average_deal_size = round_half_up(tally["total_amount"] / counts["confirmed"])

        return PipelineStats(
            prospects=counts["prospect"],
            contacted=counts["contacted"],
            negotiating=counts["negotiating"],
            confirmed=counts["confirmed"],
            declined=counts["declined"],
            cancelled=counts["cancelled"],
            refunded=counts["refunded"],
            conversion_rate=conversion_rate,
            average_deal_size=average_deal_size,
        )

    def pending_deliverables(
        self, db: Session, edition_id: str, organization_id: Optional[str] = None
    ) -> List[PendingDeliverableSummary]:
        """Open deliverables of confirmed sponsorships, grouped per sponsorship."""
        pending = deliverable_crud.get_pending_by_edition(
            db, edition_id=edition_id, organization_id=organization_id
        )

        grouped: Dict[str, list] = {}
        for deliverable in pending:
            grouped.setdefault(deliverable.sponsorship_id, []).append(deliverable)

        summaries = []
        for sponsorship_id, items in grouped.items():
            sponsorship = items[0].sponsorship
            counts = deliverable_crud.count_by_sponsorship(db, sponsorship_id=sponsorship_id)
            summaries.append(
                PendingDeliverableSummary(
                    sponsorship_id=sponsorship_id,
                    sponsor_id=sponsorship.sponsor_id,
                    sponsor_name=sponsorship.sponsor.name if sponsorship.sponsor else UNKNOWN_SPONSOR,
                    package_name=sponsorship.package.name if sponsorship.package else UNKNOWN_PACKAGE,
                    pending_benefits=[d.benefit_name for d in items],
                    total_benefits=sum(counts.values()),
                    completed_benefits=counts.get("delivered", 0),
                )
            )
        return summaries

    def get_stats(
        self, db: Session, edition_id: str, organization_id: Optional[str] = None
    ) -> SponsoringStats:
        stats = SponsoringStats(
            sponsors=self.sponsor_stats(db, edition_id, organization_id),
            revenue=self.revenue_stats(db, edition_id, organization_id),
            pipeline=self.pipeline_stats(db, edition_id, organization_id),
            total_packages=package_crud.count_by_edition(
                db, edition_id=edition_id, organization_id=organization_id
            ),
            pending_deliverables=self.pending_deliverables(db, edition_id, organization_id),
        )
        logger.info(f"Built sponsoring stats for edition {edition_id}")
        return stats


sponsoring_stats_service = SponsoringStatsService()
