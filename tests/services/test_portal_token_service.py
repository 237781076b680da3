from datetime import datetime, timedelta, timezone

import pytest

from sponsoring.crud.crud_sponsor_portal_token import sponsor_portal_token as token_crud
from sponsoring.models.sponsor_portal_token import SponsorPortalToken
from sponsoring.services.portal_token_service import SponsorPortalTokenService


class TestSponsorPortalTokenService:
    @pytest.fixture(autouse=True)
    def _service(self, email_service):
        self.email = email_service
        self.service = SponsorPortalTokenService(expiry_days=30, email_service=email_service)

    def test_get_or_create_reuses_valid_token(self, db_session, make_sponsorship):
        item = make_sponsorship()

        first = self.service.get_or_create(db_session, item.id)
        second = self.service.get_or_create(db_session, item.id)

        assert first.id == second.id
        assert len(first.token) == 64
        assert first.expires_at is not None

    def test_get_or_create_replaces_expired_token(self, db_session, make_sponsorship):
        item = make_sponsorship()
        expired = SponsorPortalToken(
            sponsorship_id=item.id,
            expires_at=datetime.now(timezone.utc) - timedelta(days=1),
        )
        db_session.add(expired)
        db_session.commit()

        token = self.service.get_or_create(db_session, item.id)

        assert token.id != expired.id

    def test_portal_link(self, db_session, make_sponsorship):
        item = make_sponsorship()

        url = self.service.generate_portal_link(
            db_session, item.id, "devsummit-2025", base_url="https://events.example.com"
        )

        token = token_crud.get_valid_by_sponsorship(db_session, sponsorship_id=item.id)
        assert url == f"https://events.example.com/sponsor/devsummit-2025/portal?token={token.token}"

    def test_validate_unknown_token(self, db_session):
        result = self.service.validate(db_session, "nope")

        assert result.valid is False
        assert result.error == "Token not found"

    def test_validate_expired_token(self, db_session, make_sponsorship):
        item = make_sponsorship()
        record = SponsorPortalToken(
            sponsorship_id=item.id,
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        db_session.add(record)
        db_session.commit()

        result = self.service.validate(db_session, record.token)

        assert result.valid is False
        assert result.error == "Token has expired"

    def test_validate_token_of_missing_sponsorship(self, db_session):
        record = SponsorPortalToken(sponsorship_id="sps_gone", expires_at=None)
        db_session.add(record)
        db_session.commit()

        result = self.service.validate(db_session, record.token)

        assert result.valid is False
        assert result.error == "Sponsor not found"

    def test_validate_success_stamps_last_used(self, db_session, make_sponsorship):
        item = make_sponsorship()
        token = self.service.get_or_create(db_session, item.id)
        assert token.last_used_at is None

        result = self.service.validate(db_session, token.token)

        assert result.valid is True
        assert result.sponsorship.id == item.id
        assert result.sponsorship.sponsor.name == "Acme Corp"
        assert result.token.last_used_at is not None

    def test_refresh_invalidates_old_links(self, db_session, make_sponsorship):
        item = make_sponsorship()
        old = self.service.get_or_create(db_session, item.id)
        old_value = old.token

        new = self.service.refresh(db_session, item.id, expiry_days=7)

        assert new.token != old_value
        assert self.service.validate(db_session, old_value).error == "Token not found"
        assert self.service.validate(db_session, new.token).valid is True

    def test_revoke(self, db_session, make_sponsorship):
        item = make_sponsorship()
        self.service.get_or_create(db_session, item.id)

        assert self.service.revoke(db_session, item.id) == 1
        assert token_crud.get_valid_by_sponsorship(db_session, sponsorship_id=item.id) is None

    def test_send_invitation(self, db_session, make_package, make_sponsorship):
        item = make_sponsorship(package=make_package())

        result = self.service.send_portal_invitation(
            db_session, item.id, "devsummit-2025", "DevSummit 2025", base_url="https://x.test"
        )

        assert result["success"] is True
        assert len(self.email.sent) == 1
        message = self.email.sent[0]
        assert message.to == "jane@acme.test"
        assert message.subject == "DevSummit 2025 - Sponsor Portal Access"
        assert "https://x.test/sponsor/devsummit-2025/portal?token=" in message.text
        assert "Your sponsorship package: Gold" in message.text

    def test_send_invitation_without_contact_email(self, db_session, make_sponsor, make_sponsorship):
        item = make_sponsorship(sponsor=make_sponsor(contact_email=None))

        result = self.service.send_portal_invitation(db_session, item.id, "ds", "DevSummit")

        assert result == {"success": False, "error": "No contact email for sponsor"}
        assert self.email.sent == []

    def test_send_invitation_without_email_service(self, db_session, make_sponsorship):
        item = make_sponsorship()

        result = SponsorPortalTokenService().send_portal_invitation(db_session, item.id, "ds", "DevSummit")

        assert result["success"] is False
        assert result["error"] == "Email service not configured"
