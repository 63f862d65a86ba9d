from dataclasses import replace
from datetime import datetime, timezone

from sqlmodel import select

from core.settings import SEED
from models import ActivityLog, Assignment, Project, User
from services.activity_ledger import ActivityLedger
from services.directory import DirectoryService
from services.reports import ReportService
from storage.seed import project_name, seed_if_empty


def _seed_small(session_factory):
    with session_factory() as session:
        session.add(User(name="alice", email="alice@example.com", role="Lead"))
        session.add(User(name="bob", email="bob@example.com"))
        session.add(Project(name="P1", daily_target=10))
        session.add(Project(name="P2", status="On Hold", daily_target=0))
        session.flush()
        session.add(Assignment(user_id=1, project_id=1))
        session.commit()


def _reports(session_factory):
    ledger = ActivityLedger(session_factory)
    return ledger, ReportService(ledger, DirectoryService(session_factory))


def test_user_performance_lists_every_user(session_factory):
    _seed_small(session_factory)
    ledger, reports = _reports(session_factory)
    ledger.append("alice", "P1", "build", 5)
    ledger.append("alice", "P1", "test", 2.5)

    report = {row["name"]: row for row in reports.user_performance()}

    assert report["alice"]["total"] == 7.5
    assert sum(report["alice"]["daily"].values()) == 7.5
    assert report["bob"] == {"name": "bob", "total": 0.0, "daily": {}}


def test_user_performance_respects_window(session_factory):
    _seed_small(session_factory)
    ledger, reports = _reports(session_factory)
    ledger.append("alice", "P1", "build", 5)

    future = datetime(2999, 1, 1, tzinfo=timezone.utc)
    report = {row["name"]: row for row in reports.user_performance(since=future)}

    assert report["alice"]["total"] == 0.0


def test_project_utilization(session_factory):
    _seed_small(session_factory)
    ledger, reports = _reports(session_factory)
    ledger.append("alice", "P1", "build", 25)

    result = reports.project_utilization(working_days=5)
    data = {row["name"]: row for row in result["data"]}

    assert result["workingDays"] == 5
    assert data["P1"]["utilization"] == 50.0
    assert data["P2"]["utilization"] == 0.0
    assert result["overallUtilization"] == 25.0


def test_dashboard_stats_and_directory(session_factory):
    _seed_small(session_factory)
    directory = DirectoryService(session_factory)

    stats = directory.counts()
    assert stats["totalUsers"] == 2
    assert stats["totalProjects"] == 2
    assert stats["activeAssignments"] == 1
    assert {"status": "On Hold", "count": 1} in stats["projectStatuses"]

    projects = {p["name"]: p for p in directory.list_projects()}
    assert projects["P1"]["team_size"] == 1
    assert projects["P2"]["team_size"] == 0

    users = {u["name"]: u for u in directory.list_users()}
    assert users["alice"]["project_name"] == "P1"
    assert users["bob"]["project_name"] is None


def test_seed_runs_once(session_factory):
    settings = replace(SEED, users=6, projects=3, log_days=2, random_seed=7)

    assert seed_if_empty(session_factory, settings) is True
    assert seed_if_empty(session_factory, settings) is False

    with session_factory() as session:
        assert len(session.exec(select(User)).all()) == 6
        projects = session.exec(select(Project)).all()
        assert [p.name for p in projects] == [project_name(i) for i in range(1, 4)]
        assert len(session.exec(select(Assignment)).all()) == 6
        logs = session.exec(select(ActivityLog)).all()
        assert len(logs) == 6
        assert all(100 <= log.manhours < 600 for log in logs)
