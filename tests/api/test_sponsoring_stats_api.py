from fastapi.testclient import TestClient

from sponsoring.services.deliverable_service import SponsorDeliverableService

ORG_ID = "org_abc"
EDITION_ID = "ed_2025"
STATS = f"/api/v1/organizations/{ORG_ID}/editions/{EDITION_ID}/sponsoring-stats"


def test_sponsoring_stats_api(test_client: TestClient, make_package, make_sponsorship):
    package = make_package(price=15000, max_sponsors=3)
    make_sponsorship(package=package, status="confirmed", amount=15000)

    response = test_client.get(STATS)

    assert response.status_code == 200
    data = response.json()
    assert data["sponsors"]["total"] == 1
    assert data["revenue"]["target_revenue"] == 45000
    assert data["revenue"]["progress_percent"] == 33.33
    assert data["pipeline"]["conversion_rate"] == 100.0
    assert data["total_packages"] == 1


def test_revenue_stats_without_target(test_client: TestClient):
    response = test_client.get(f"{STATS}/revenue")

    assert response.status_code == 200
    assert response.json()["target_revenue"] is None
    assert response.json()["progress_percent"] == 0


def test_pipeline_stats_api(test_client: TestClient, make_sponsor, make_sponsorship):
    make_sponsorship(status="cancelled")
    make_sponsorship(sponsor=make_sponsor(name="Globex"), status="cancelled")

    response = test_client.get(f"{STATS}/pipeline")

    assert response.status_code == 200
    assert response.json()["cancelled"] == 2
    assert response.json()["conversion_rate"] == 0


def test_stats_of_other_organization_are_forbidden(test_client: TestClient):
    response = test_client.get(
        f"/api/v1/organizations/org_other/editions/{EDITION_ID}/sponsoring-stats"
    )

    assert response.status_code == 403


def test_health(test_client: TestClient):
    assert test_client.get("/api/v1/health").json()["status"] == "healthy"
    assert test_client.get("/api/v1/health/db").status_code == 200


def test_stats_ignore_other_organizations(
    test_client: TestClient, db_session, make_sponsor, make_package, make_sponsorship
):
    package = make_package(organization_id="org_other", edition_id="ed_other", max_sponsors=2)
    item = make_sponsorship(
        sponsor=make_sponsor(organization_id="org_other", name="Secret Sponsor"),
        package=package,
        edition_id="ed_other",
        status="confirmed",
        amount=10000,
    )
    SponsorDeliverableService().generate_for_sponsorship(db_session, item.id)
    stats_url = f"/api/v1/organizations/{ORG_ID}/editions/ed_other/sponsoring-stats"

    combined = test_client.get(stats_url).json()
    sponsors = test_client.get(f"{stats_url}/sponsors").json()
    revenue = test_client.get(f"{stats_url}/revenue").json()
    pipeline = test_client.get(f"{stats_url}/pipeline").json()
    pending = test_client.get(f"{stats_url}/pending-deliverables").json()

    assert combined["total_packages"] == 0
    assert combined["pending_deliverables"] == []
    assert sponsors["total"] == 0
    assert sponsors["by_package"] == []
    assert revenue["total_revenue"] == 0
    assert revenue["target_revenue"] is None
    assert pipeline["confirmed"] == 0
    assert pending == []
