"""Flask application factory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask

from services.activity_ledger import ActivityLedger
from services.directory import DirectoryService
from services.google_auth import GoogleAuth
from services.google_sheets import SheetsRowFetcher
from services.reports import ReportService
from services.sheets_sync import SheetsSyncService
from services.status_cache import StatusCache
from services.sync_state_store import SyncStateStore
from storage.db import get_session


logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    store: SyncStateStore
    ledger: ActivityLedger
    directory: DirectoryService
    reports: ReportService
    auth: GoogleAuth
    sync: SheetsSyncService


def build_services(
    session_factory=get_session,
    *,
    auth: Optional[GoogleAuth] = None,
    fetcher: Optional[SheetsRowFetcher] = None,
) -> AppServices:
    store = SyncStateStore(session_factory)
    ledger = ActivityLedger(session_factory)
    directory = DirectoryService(session_factory)
    auth = auth or GoogleAuth()
    sync = SheetsSyncService(
        store=store,
        cache=StatusCache(session_factory),
        ledger=ledger,
        auth=auth,
        fetcher=fetcher,
    )
    return AppServices(
        store=store,
        ledger=ledger,
        directory=directory,
        reports=ReportService(ledger, directory),
        auth=auth,
        sync=sync,
    )


def create_app(services: Optional[AppServices] = None) -> Flask:
    from api.routes import api_bp, auth_bp

    app = Flask(__name__)
    app.extensions["tracker"] = services or build_services()
    app.register_blueprint(api_bp)
    app.register_blueprint(auth_bp)
    logger.debug("Flask app created")
    return app
