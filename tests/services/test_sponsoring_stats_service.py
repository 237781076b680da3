"""
Tests for the sponsoring statistics service.

Verifies that SponsoringStatsService correctly:
- Counts sponsors by status and by package with remaining capacity
- Measures confirmed revenue against the edition's revenue target
- Leaves cancelled deals out of the conversion rate
- Lists open deliverables per confirmed sponsorship
"""

from datetime import datetime, timezone

from sponsoring.models.sponsor_deliverable import SponsorDeliverable
from sponsoring.services.sponsoring_stats_service import SponsoringStatsService

EDITION_ID = "ed_2025"
PAID = datetime(2025, 3, 1, tzinfo=timezone.utc)


class TestSponsoringStatsService:
    def setup_method(self):
        self.service = SponsoringStatsService()

    def test_empty_edition(self, db_session):
        stats = self.service.get_stats(db_session, EDITION_ID)

        assert stats.sponsors.total == 0
        assert stats.revenue.total_revenue == 0
        assert stats.revenue.target_revenue is None
        assert stats.revenue.progress_percent == 0
        assert stats.pipeline.conversion_rate == 0
        assert stats.pipeline.average_deal_size == 0
        assert stats.total_packages == 0
        assert stats.pending_deliverables == []

    def test_revenue_against_target(self, db_session, make_package, make_sponsorship):
        package = make_package(price=15000, max_sponsors=3)
        make_sponsorship(package=package, status="confirmed", amount=15000)

        revenue = self.service.revenue_stats(db_session, EDITION_ID)

        assert revenue.target_revenue == 45000
        assert revenue.total_revenue == 15000
        assert revenue.progress_percent == 33.33
        assert revenue.currency == "EUR"

    def test_uncapped_packages_give_no_target(self, db_session, make_package, make_sponsorship):
        package = make_package(price=15000, max_sponsors=None)
        make_sponsorship(package=package, status="confirmed", amount=15000)

        revenue = self.service.revenue_stats(db_session, EDITION_ID)

        assert revenue.target_revenue is None
        assert revenue.progress_percent == 0

    def test_paid_and_pending_revenue(self, db_session, make_sponsor, make_sponsorship):
        make_sponsorship(status="confirmed", amount=10000, paid_at=PAID)
        make_sponsorship(sponsor=make_sponsor(name="Globex"), status="confirmed", amount=5000)
        make_sponsorship(sponsor=make_sponsor(name="Initech"), status="negotiating", amount=7000)

        revenue = self.service.revenue_stats(db_session, EDITION_ID)

        assert revenue.total_revenue == 15000
        assert revenue.paid_revenue == 10000
        assert revenue.pending_revenue == 5000

    def test_sponsor_counts_by_package(self, db_session, make_sponsor, make_package, make_sponsorship):
        gold = make_package(name="Gold", tier=1, max_sponsors=2)
        make_package(name="Silver", tier=2, max_sponsors=None)
        make_sponsorship(package=gold, status="confirmed")
        make_sponsorship(sponsor=make_sponsor(name="Globex"), package=gold, status="prospect")
        make_sponsorship(sponsor=make_sponsor(name="Initech"), status="declined")

        stats = self.service.sponsor_stats(db_session, EDITION_ID)

        assert stats.total == 3
        assert stats.confirmed == 1
        assert stats.active == 2
        assert stats.by_status["declined"] == 1
        assert [p.package_name for p in stats.by_package] == ["Gold", "Silver"]
        assert stats.by_package[0].count == 2
        assert stats.by_package[0].available_slots == 0
        assert stats.by_package[1].count == 0
        assert stats.by_package[1].available_slots is None

    def test_pipeline_excludes_cancelled_from_conversion(
        self, db_session, make_sponsor, make_sponsorship
    ):
        make_sponsorship(status="confirmed", amount=10000)
        make_sponsorship(sponsor=make_sponsor(name="Globex"), status="confirmed", amount=5000)
        make_sponsorship(sponsor=make_sponsor(name="Initech"), status="declined")
        make_sponsorship(sponsor=make_sponsor(name="Hooli"), status="cancelled")

        pipeline = self.service.pipeline_stats(db_session, EDITION_ID)

        assert pipeline.confirmed == 2
        assert pipeline.cancelled == 1
        assert pipeline.conversion_rate == 66.67
        assert pipeline.average_deal_size == 7500

    def test_all_cancelled_has_zero_conversion(self, db_session, make_sponsor, make_sponsorship):
        make_sponsorship(status="cancelled")
        make_sponsorship(sponsor=make_sponsor(name="Globex"), status="cancelled")

        pipeline = self.service.pipeline_stats(db_session, EDITION_ID)

        assert pipeline.cancelled == 2
        assert pipeline.conversion_rate == 0

    def test_average_deal_size_rounds_halves_up(self, db_session, make_sponsor, make_sponsorship):
        make_sponsorship(status="confirmed", amount=1)
        make_sponsorship(sponsor=make_sponsor(name="Globex"), status="confirmed", amount=4)

        pipeline = self.service.pipeline_stats(db_session, EDITION_ID)

        assert pipeline.average_deal_size == 3

    def test_progress_rounds_halves_up(self, db_session, make_package, make_sponsorship):
        package = make_package(price=2000, max_sponsors=2)
        make_sponsorship(package=package, status="confirmed", amount=125)

        revenue = self.service.revenue_stats(db_session, EDITION_ID)

        assert revenue.target_revenue == 4000
        assert revenue.progress_percent == 3.13

    def test_organization_scopes_a_shared_edition(
        self, db_session, make_sponsor, make_package, make_sponsorship
    ):
        make_package(price=1000, max_sponsors=1)
        make_package(organization_id="org_other", name="Their Gold", price=9000, max_sponsors=5)
        make_sponsorship(status="confirmed", amount=1000)
        make_sponsorship(
            sponsor=make_sponsor(organization_id="org_other", name="Secret Sponsor"),
            status="confirmed",
            amount=9000,
        )

        stats = self.service.get_stats(db_session, EDITION_ID, organization_id="org_abc")

        assert stats.sponsors.total == 1
        assert [p.package_name for p in stats.sponsors.by_package] == ["Gold"]
        assert stats.revenue.total_revenue == 1000
        assert stats.revenue.target_revenue == 1000
        assert stats.total_packages == 1

        unscoped = self.service.pipeline_stats(db_session, EDITION_ID)
        assert unscoped.confirmed == 2

    def test_pending_deliverables(self, db_session, make_sponsor, make_package, make_sponsorship):
        package = make_package()
        confirmed = make_sponsorship(package=package, status="confirmed")
        prospect = make_sponsorship(sponsor=make_sponsor(name="Globex"), status="prospect")
        db_session.add_all([
            SponsorDeliverable(sponsorship_id=confirmed.id, benefit_name="Logo"),
            SponsorDeliverable(sponsorship_id=confirmed.id, benefit_name="Booth", status="delivered"),
            SponsorDeliverable(sponsorship_id=prospect.id, benefit_name="Logo"),
        ])
        db_session.commit()

        pending = self.service.pending_deliverables(db_session, EDITION_ID)

        assert len(pending) == 1
        summary = pending[0]
        assert summary.sponsorship_id == confirmed.id
        assert summary.sponsor_name == "Acme Corp"
        assert summary.package_name == "Gold"
        assert summary.pending_benefits == ["Logo"]
        assert summary.total_benefits == 2
        assert summary.completed_benefits == 1

    def test_pending_deliverables_without_package(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        db_session.add(SponsorDeliverable(sponsorship_id=item.id, benefit_name="Logo"))
        db_session.commit()

        pending = self.service.pending_deliverables(db_session, EDITION_ID)

        assert pending[0].package_name == "Unknown Package"
