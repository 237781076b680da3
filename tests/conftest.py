# tests/conftest.py
import os

# Settings are read at import time; provide the required secrets first.
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")
os.environ.setdefault("DATABASE_URL_LOCAL", "sqlite://")

from typing import Any, Dict, List

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.testclient import TestClient

from sponsoring.api import deps
from sponsoring.core.email import EmailMessage, EmailService
from sponsoring.db.session import get_db
from sponsoring.main import app
from sponsoring.models import Base, Sponsor, SponsorPackage, Sponsorship

ORG_ID = "org_abc"
EDITION_ID = "ed_2025"


# --- Test Database Setup ---
# One in-memory SQLite database shared by every connection of the pool.
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN.
@event.listens_for(engine, "connect")
def _do_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _do_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


# --- Email ---
class RecordingEmailService(EmailService):
    """Email service that keeps sent messages in memory."""

    def __init__(self, result: Dict[str, Any] = None):
        self.sent: List[EmailMessage] = []
        self.result = result or {"success": True, "id": "email_123"}

    def send(self, message: EmailMessage) -> Dict[str, Any]:
        self.sent.append(message)
        return self.result


@pytest.fixture
def email_service():
    return RecordingEmailService()


# --- Record factories ---
@pytest.fixture
def make_sponsor(db_session):
    def _make(**overrides) -> Sponsor:
        fields = {
            "organization_id": ORG_ID,
            "name": "Acme Corp",
            "contact_name": "Jane Doe",
            "contact_email": "jane@acme.test",
        }
        fields.update(overrides)
        record = Sponsor(**fields)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record
    return _make


@pytest.fixture
def make_package(db_session):
    def _make(**overrides) -> SponsorPackage:
        fields = {
            "organization_id": ORG_ID,
            "edition_id": EDITION_ID,
            "name": "Gold",
            "tier": 1,
            "price": 10000,
            "currency": "EUR",
            "benefits": [
                {"name": "Logo", "included": True},
                {"name": "Booth", "included": True},
                {"name": "Talk", "included": False},
            ],
        }
        fields.update(overrides)
        record = SponsorPackage(**fields)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record
    return _make


@pytest.fixture
def make_sponsorship(db_session, make_sponsor):
    def _make(sponsor=None, package=None, **overrides) -> Sponsorship:
        sponsor = sponsor or make_sponsor()
        fields = {
            "edition_id": EDITION_ID,
            "sponsor_id": sponsor.id,
            "package_id": package.id if package else None,
            "status": "prospect",
        }
        fields.update(overrides)
        record = Sponsorship(**fields)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record
    return _make


# --- Mock Dependencies Setup ---
class MockTokenPayload:
    def __init__(self, sub="user_123", org_id=ORG_ID):
        self.sub = sub
        self.org_id = org_id


def override_get_current_user():
    return MockTokenPayload()


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def test_client(db_session, email_service):
    """
    TestClient backed by the in-memory database, with authentication and
    email replaced.
    """
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[deps.get_current_user] = override_get_current_user
    app.dependency_overrides[deps.get_email] = lambda: email_service

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
