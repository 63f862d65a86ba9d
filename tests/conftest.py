import os
import tempfile
from types import SimpleNamespace

import pytest

# keep module-level data directories out of the real home directory
os.environ.setdefault("TRACKER_DATA_DIR", tempfile.mkdtemp(prefix="tracker-tests-"))

from sqlmodel import Session, SQLModel

from services.errors import CredentialError
from services.google_auth import TokenPair
from services.google_sheets import TrackedRow
from storage import migrations
from storage.db import make_engine


class FakeAuth:
    """Stands in for :class:`GoogleAuth` without touching the network."""

    is_available = True

    def __init__(self, token="access-1", error=None):
        self.token = token
        self.error = error
        self.calls = 0

    def current_credential(self, state):
        self.calls += 1
        if self.error:
            raise self.error
        if not state.refresh_token:
            raise CredentialError("No refresh token stored")
        return SimpleNamespace(token=self.token)

    def authorization_url(self):
        return "https://accounts.example.com/auth"

    def authorize(self, code):
        return TokenPair(access_token=f"access-{code}", refresh_token=f"refresh-{code}")


class FakeFetcher:
    """Serves queued snapshots; an exception in the queue is raised instead."""

    def __init__(self, *snapshots):
        self.snapshots = list(snapshots)
        self.calls = []

    def push(self, snapshot):
        self.snapshots.append(snapshot)

    def fetch(self, spreadsheet_id, range_name, credentials):
        self.calls.append((spreadsheet_id, range_name, credentials.token))
        item = self.snapshots.pop(0) if self.snapshots else []
        if isinstance(item, BaseException):
            raise item
        return [row if isinstance(row, TrackedRow) else TrackedRow.from_cells(row) for row in item]


@pytest.fixture()
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{(tmp_path / 'tracker.db').as_posix()}")
    SQLModel.metadata.create_all(engine)
    migrations.run_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    def factory():
        return Session(engine)

    return factory


@pytest.fixture()
def fake_auth():
    return FakeAuth()


@pytest.fixture()
def fake_fetcher():
    return FakeFetcher()
