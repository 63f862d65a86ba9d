from datetime import datetime, timezone

import pytest

from api import build_services, create_app
from models import Project, User


@pytest.fixture()
def services(session_factory, fake_auth, fake_fetcher):
    return build_services(session_factory, auth=fake_auth, fetcher=fake_fetcher)


@pytest.fixture()
def client(services):
    app = create_app(services)
    app.config["TESTING"] = True
    return app.test_client()


def test_sync_settings_and_status(client, services):
    assert client.get("/api/sync/status").get_json() == {
        "spreadsheet_id": None,
        "last_sync": None,
        "configured": False,
    }

    response = client.post("/api/sync/settings", json={"spreadsheetId": "sheet-1"})
    assert response.status_code == 200
    assert response.get_json() == {"success": True}

    services.store.set_credentials("access", "refresh")
    services.store.stamp_last_sync(datetime(2026, 3, 1, tzinfo=timezone.utc))
    status = client.get("/api/sync/status").get_json()
    assert status["spreadsheet_id"] == "sheet-1"
    assert status["configured"] is True
    assert status["last_sync"].startswith("2026-03-01T00:00:00")


def test_sync_settings_requires_spreadsheet_id(client):
    response = client.post("/api/sync/settings", json={})
    assert response.status_code == 400


def test_google_auth_flow(client, services):
    assert client.get("/api/auth/google/url").get_json() == {"url": "https://accounts.example.com/auth"}

    response = client.get("/auth/google/callback?code=abc")
    assert response.status_code == 200
    assert b"GOOGLE_AUTH_SUCCESS" in response.data
    state = services.store.load()
    assert (state.access_token, state.refresh_token) == ("access-abc", "refresh-abc")

    assert client.get("/auth/google/callback").status_code == 400


def test_google_auth_url_unavailable(client, fake_auth):
    fake_auth.is_available = False
    assert client.get("/api/auth/google/url").status_code == 503


def test_activity_feed_reflects_poller(client, services, fake_fetcher):
    services.store.set_spreadsheet_id("sheet-1")
    services.store.set_credentials("access", "refresh")
    fake_fetcher.push([["alice", "P1", "build", "5", "Completed", "id-1"]])
    services.sync.run_cycle()

    entries = client.get("/api/activity").get_json()
    assert len(entries) == 1
    assert entries[0]["user_name"] == "alice"
    assert entries[0]["manhours"] == 5.0

    assert client.get("/api/health").get_json()["poller"]["lastOutcome"] == "completed"


def test_reports_and_directory_endpoints(client, session_factory, services):
    with session_factory() as session:
        session.add(User(name="alice", email="alice@example.com"))
        session.add(Project(name="P1", daily_target=4))
        session.commit()
    services.ledger.append("alice", "P1", "build", 10)

    performance = client.get("/api/reports/user-performance").get_json()
    assert performance["data"][0]["name"] == "alice"
    assert performance["data"][0]["total"] == 10.0

    utilization = client.get("/api/reports/utilization").get_json()
    assert utilization["workingDays"] == 25
    assert utilization["data"][0]["utilization"] == 10.0

    stats = client.get("/api/stats").get_json()
    assert stats["totalUsers"] == 1
    assert client.get("/api/projects").get_json()[0]["team_size"] == 0
    assert client.get("/api/users").get_json()[0]["project_name"] is None


def test_report_failure_returns_500(client, services, monkeypatch):
    def boom():
        raise RuntimeError("database is locked")

    monkeypatch.setattr(services.reports, "dashboard_stats", boom)
    response = client.get("/api/stats")
    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal Server Error"}
