"""
Tests for the sponsor deliverable service.

Verifies that SponsorDeliverableService correctly:
- Generates one deliverable per included benefit, idempotently
- Reports per-sponsorship outcomes for edition-wide generation
- Notifies the sponsor only when a benefit is delivered
- Summarizes progress with a whole-number completion percent
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from sponsoring.models.sponsor_deliverable import SponsorDeliverable
from sponsoring.services.deliverable_service import SponsorDeliverableService, _percent
from sponsoring.services.exceptions import InvalidTransitionError


def _add_deliverable(db_session, sponsorship_id, benefit_name, **fields):
    record = SponsorDeliverable(sponsorship_id=sponsorship_id, benefit_name=benefit_name, **fields)
    db_session.add(record)
    db_session.commit()
    return record


class TestGeneration:
    def setup_method(self):
        self.service = SponsorDeliverableService()

    def test_creates_included_benefits(self, db_session, make_package, make_sponsorship):
        item = make_sponsorship(package=make_package(), status="confirmed")
        due = datetime(2025, 9, 1, tzinfo=timezone.utc)

        result = self.service.generate_for_sponsorship(db_session, item.id, due)

        assert result.created == 2
        assert result.skipped == 0
        assert sorted(d.benefit_name for d in result.deliverables) == ["Booth", "Logo"]
        assert all(d.status == "pending" for d in result.deliverables)
        assert result.stale_benefits == []

    def test_skips_existing_benefit(self, db_session, make_package, make_sponsorship):
        item = make_sponsorship(package=make_package(), status="confirmed")
        _add_deliverable(db_session, item.id, "Logo")

        result = self.service.generate_for_sponsorship(db_session, item.id)

        assert result.created == 1
        assert result.skipped == 1
        assert [d.benefit_name for d in result.deliverables] == ["Booth"]

    def test_second_run_creates_nothing(self, db_session, make_package, make_sponsorship):
        item = make_sponsorship(package=make_package(), status="confirmed")

        self.service.generate_for_sponsorship(db_session, item.id)
        again = self.service.generate_for_sponsorship(db_session, item.id)

        assert again.created == 0
        assert again.skipped == 2
        assert len(self.service.list_for_sponsorship(db_session, item.id)) == 2

    def test_without_package_is_a_zero_result(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")

        result = self.service.generate_for_sponsorship(db_session, item.id)

        assert result.created == 0
        assert result.skipped == 0

    def test_unknown_sponsorship_is_a_zero_result(self, db_session):
        result = self.service.generate_for_sponsorship(db_session, "sps_missing")
        assert result.created == 0

    def test_all_benefits_excluded(self, db_session, make_package, make_sponsorship):
        package = make_package(benefits=[{"name": "Logo", "included": False}])
        item = make_sponsorship(package=package, status="confirmed")

        result = self.service.generate_for_sponsorship(db_session, item.id)

        assert result.created == 0
        assert result.skipped == 0

    def test_reports_stale_benefits(self, db_session, make_package, make_sponsorship):
        item = make_sponsorship(package=make_package(), status="confirmed")
        _add_deliverable(db_session, item.id, "Banner")

        result = self.service.generate_for_sponsorship(db_session, item.id)

        assert result.created == 2
        assert result.stale_benefits == ["Banner"]
        assert len(self.service.list_for_sponsorship(db_session, item.id)) == 3


class TestEditionGeneration:
    def setup_method(self):
        self.service = SponsorDeliverableService()

    def test_only_confirmed_sponsorships(self, db_session, make_sponsor, make_package, make_sponsorship):
        package = make_package()
        confirmed = make_sponsorship(package=package, status="confirmed")
        make_sponsorship(sponsor=make_sponsor(name="Globex"), package=package, status="negotiating")

        result = self.service.generate_for_edition(db_session, "ed_2025")

        assert result.sponsors_processed == 1
        assert result.deliverables_created == 2
        assert [o.sponsorship_id for o in result.outcomes] == [confirmed.id]
        assert result.failures == []

    def test_failure_is_reported_and_others_continue(
        self, db_session, make_sponsor, make_package, make_sponsorship
    ):
        package = make_package()
        first = make_sponsorship(package=package, status="confirmed")
        second = make_sponsorship(sponsor=make_sponsor(name="Globex"), package=package, status="confirmed")
        failing_id = second.id

        original = SponsorDeliverableService.generate_for_sponsorship

        def flaky(service, db, sponsorship_id, default_due_date=None):
            if sponsorship_id == failing_id:
                raise RuntimeError("database unavailable")
            return original(service, db, sponsorship_id, default_due_date)

        with patch.object(SponsorDeliverableService, "generate_for_sponsorship", autospec=True,
                          side_effect=flaky):
            result = self.service.generate_for_edition(db_session, "ed_2025")

        assert result.sponsors_processed == 1
        assert result.deliverables_created == 2
        assert len(result.failures) == 1
        assert result.failures[0].sponsorship_id == failing_id
        assert result.failures[0].error == "database unavailable"
        assert len(self.service.list_for_sponsorship(db_session, first.id)) == 2


class TestStatusChanges:
    @pytest.fixture(autouse=True)
    def _service(self, email_service):
        self.email = email_service
        self.service = SponsorDeliverableService(email_service=email_service)

    def test_delivering_notifies_sponsor(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        updated = self.service.update_status(db_session, deliverable.id, "delivered", "DevSummit")

        assert updated.status == "delivered"
        assert updated.delivered_at is not None
        assert len(self.email.sent) == 1
        assert self.email.sent[0].to == "jane@acme.test"
        assert self.email.sent[0].subject == "DevSummit - Benefit Delivered: Logo"

    def test_other_statuses_send_nothing(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        self.service.update_status(db_session, deliverable.id, "in_progress", "DevSummit")

        assert self.email.sent == []

    def test_same_status_raises(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        with pytest.raises(InvalidTransitionError):
            self.service.update_status(db_session, deliverable.id, "pending", "DevSummit")

    def test_unknown_deliverable(self, db_session):
        assert self.service.update_status(db_session, "sdlv_missing", "delivered", "DevSummit") is None
        assert self.service.mark_as_delivered(db_session, "sdlv_missing", "DevSummit") is None

    def test_mark_as_delivered_sets_notes(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        updated = self.service.mark_as_delivered(
            db_session, deliverable.id, "DevSummit", notes="Printed on the banner"
        )

        assert updated.status == "delivered"
        assert updated.notes == "Printed on the banner"
        assert "Notes: Printed on the banner" in self.email.sent[0].text

    def test_mark_as_delivered_twice_raises(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")
        self.service.mark_as_delivered(db_session, deliverable.id, "DevSummit")

        with pytest.raises(InvalidTransitionError):
            self.service.mark_as_delivered(db_session, deliverable.id, "DevSummit")

    def test_works_without_email_service(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        updated = SponsorDeliverableService().mark_as_delivered(db_session, deliverable.id, "DevSummit")

        assert updated.status == "delivered"


class TestNotifyDelivery:
    def test_no_email_service(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        outcome = SponsorDeliverableService().notify_delivery(deliverable, "DevSummit")

        assert outcome == {"success": False, "error": "Email service not configured"}

    def test_sponsor_without_contact_email(
        self, db_session, email_service, make_sponsor, make_sponsorship
    ):
        item = make_sponsorship(sponsor=make_sponsor(contact_email=None), status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        outcome = SponsorDeliverableService(email_service).notify_delivery(
            deliverable, "DevSummit"
        )

        assert outcome == {"success": False, "error": "No contact email for sponsor"}

    def test_email_failure_is_passed_through(self, db_session, email_service, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")
        email_service.result = {"success": False, "error": "Rate limited"}

        outcome = SponsorDeliverableService(email_service).notify_delivery(deliverable, "DevSummit")

        assert outcome == {"success": False, "error": "Rate limited"}

    def test_success(self, db_session, email_service, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        deliverable = _add_deliverable(db_session, item.id, "Logo")

        outcome = SponsorDeliverableService(email_service).notify_delivery(
            deliverable, "DevSummit"
        )

        assert outcome == {"success": True}


class TestSummary:
    def test_summary_counts(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        past = datetime.now(timezone.utc) - timedelta(days=3)
        _add_deliverable(db_session, item.id, "Logo", status="delivered",
                         delivered_at=past, due_date=past)
        _add_deliverable(db_session, item.id, "Booth", due_date=past)
        _add_deliverable(db_session, item.id, "Talk", status="in_progress")

        summary = SponsorDeliverableService().summarize(db_session, item.id)

        assert summary.total == 3
        assert summary.delivered == 1
        assert summary.pending == 1
        assert summary.in_progress == 1
        assert summary.overdue == 1
        assert summary.due_soon == 0
        assert summary.completion_percent == 33

    def test_due_soon_count(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        now = datetime.now(timezone.utc)
        _add_deliverable(db_session, item.id, "Logo", due_date=now + timedelta(days=3))
        _add_deliverable(db_session, item.id, "Booth", due_date=now + timedelta(days=30))
        _add_deliverable(db_session, item.id, "Talk", status="delivered",
                         due_date=now + timedelta(days=1), delivered_at=now)

        summary = SponsorDeliverableService().summarize(db_session, item.id)

        assert summary.due_soon == 1

    def test_undated_deliverables_listed_last(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")
        _add_deliverable(db_session, item.id, "Talk")
        _add_deliverable(db_session, item.id, "Logo",
                         due_date=datetime(2025, 9, 1, tzinfo=timezone.utc))

        listed = SponsorDeliverableService().list_for_sponsorship(db_session, item.id)

        assert [d.benefit_name for d in listed] == ["Logo", "Talk"]

    def test_empty_summary(self, db_session, make_sponsorship):
        item = make_sponsorship(status="confirmed")

        summary = SponsorDeliverableService().summarize(db_session, item.id)

        assert summary.total == 0
        assert summary.completion_percent == 0

    @pytest.mark.parametrize("part,total,expected", [
        (1, 8, 13),
        (1, 3, 33),
        (2, 3, 67),
        (1, 2, 50),
        (0, 5, 0),
        (4, 4, 100),
        (0, 0, 0),
    ])
    def test_percent_rounds_halves_up(self, part, total, expected):
        assert _percent(part, total) == expected
