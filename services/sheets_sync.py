from __future__ import annotations
import logging
import threading
from logging.handlers import RotatingFileHandler
from dataclasses import dataclass
from typing import Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError
from sqlalchemy.exc import SQLAlchemyError

from core.settings import SHEETS_SYNC, SYNC_LOG_PATH, SheetsSyncSettings
from datetime_utils import utc_now
from services.activity_ledger import ActivityLedger
from services.errors import CredentialError, SheetFormatError
from services.google_auth import GoogleAuth
from services.google_sheets import SheetsRowFetcher, TrackedRow, parse_hours
from services.status_cache import StatusCache
from services.sync_state_store import SyncState, SyncStateStore


SKIPPED_BUSY = "skipped_busy"
SKIPPED_UNCONFIGURED = "skipped_unconfigured"
FETCH_FAILED = "fetch_failed"
ABORTED = "aborted"
COMPLETED = "completed"

FETCH_ERRORS = (
    HttpError,
    CredentialError,
    SheetFormatError,
    GoogleAuthError,
    httplib2.HttpLib2Error,
    OSError,
)


def _ensure_logger() -> logging.Logger:
    logger = logging.getLogger("tracker.sync")
    if not logger.handlers:
        SYNC_LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(SYNC_LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


def _http_status(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "resp", None) and getattr(exc.resp, "status", None)
    try:
        return int(status) if status else None
    except (TypeError, ValueError):
        return None


@dataclass
class CycleResult:
    outcome: str
    rows_seen: int = 0
    rows_skipped: int = 0
    rows_failed: int = 0
    entries_logged: int = 0
    error: Optional[str] = None


class SheetsSyncService:
    """One reconciliation cycle per :meth:`run_cycle` call.

    Each cycle reads the sync configuration, fetches the sheet snapshot and,
    row by row, appends a ledger entry on every transition into the
    completed status before recording the observed status in the cache.
    Cycles never overlap: a call that finds another one in flight returns
    immediately with ``skipped_busy``.
    """

    def __init__(
        self,
        store: SyncStateStore,
        cache: StatusCache,
        ledger: ActivityLedger,
        auth: GoogleAuth,
        fetcher: Optional[SheetsRowFetcher] = None,
        settings: SheetsSyncSettings = SHEETS_SYNC,
    ) -> None:
        self.store = store
        self.cache = cache
        self.ledger = ledger
        self.auth = auth
        self.fetcher = fetcher or SheetsRowFetcher()
        self.settings = settings
        self.logger = _ensure_logger()
        self._cycle_lock = threading.Lock()
        self._consecutive_failures = 0
        self.last_result: Optional[CycleResult] = None

    # ------------------------------------------------------------------
    # Public API
    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def busy(self) -> bool:
        return self._cycle_lock.locked()

    def run_cycle(self) -> CycleResult:
        if not self._cycle_lock.acquire(blocking=False):
            self.logger.debug("Sync cycle already in flight, skipping")
            return CycleResult(outcome=SKIPPED_BUSY)
        try:
            result = self._run_cycle()
        except SQLAlchemyError as exc:
            self.logger.error("Background sync aborted by storage failure: %s", exc)
            result = CycleResult(outcome=ABORTED, error=str(exc))
        finally:
            self._cycle_lock.release()
        self.last_result = result
        return result

    def next_delay(self) -> float:
        interval = max(float(self.settings.poll_interval_sec), 0.0)
        if self._consecutive_failures <= 0:
            return interval
        backoff = interval * (2 ** self._consecutive_failures)
        return min(max(self.settings.max_backoff_sec, interval), backoff)

    def status(self) -> dict:
        result = self.last_result
        return {
            "busy": self.busy,
            "consecutiveFailures": self._consecutive_failures,
            "lastOutcome": result.outcome if result else None,
            "lastError": result.error if result else None,
        }

    # ------------------------------------------------------------------
    # Cycle stages
    def _run_cycle(self) -> CycleResult:
        state = self.store.load()
        if not state.is_configured:
            return CycleResult(outcome=SKIPPED_UNCONFIGURED)

        try:
            rows = self._fetch(state)
        except SQLAlchemyError:
            raise
        except FETCH_ERRORS as exc:
            return self._fetch_failed(exc)
        except Exception as exc:
            # e.g. http.client.IncompleteRead re-raised by httplib2
            return self._fetch_failed(exc, unexpected=True)
        self._consecutive_failures = 0

        result = CycleResult(outcome=COMPLETED, rows_seen=len(rows))
        try:
            for row in rows:
                self._reconcile_row(row, result)
            self.store.stamp_last_sync(utc_now())
        except SQLAlchemyError as exc:
            self.logger.error("Background sync aborted by storage failure: %s", exc)
            result.outcome = ABORTED
            result.error = str(exc)
        return result

    def _fetch_failed(self, exc: Exception, unexpected: bool = False) -> CycleResult:
        self._consecutive_failures += 1
        if isinstance(exc, HttpError) and _http_status(exc) == self.settings.rate_limit_status:
            self.logger.debug("Sheets API rate limited: %s", exc)
        else:
            self.logger.error("Background sync fetch failed: %s", exc, exc_info=unexpected)
        return CycleResult(outcome=FETCH_FAILED, error=str(exc) or type(exc).__name__)

    def _fetch(self, state: SyncState) -> list[TrackedRow]:
        creds = self.auth.current_credential(state)
        rows = self.fetcher.fetch(state.spreadsheet_id, self.settings.sheet_range, creds)
        token = getattr(creds, "token", None)
        if token and token != state.access_token:
            self.store.set_access_token(token)
        return rows

    def _reconcile_row(self, row: TrackedRow, result: CycleResult) -> None:
        unique_id = row.unique_id
        if not unique_id:
            result.rows_skipped += 1
            return
        try:
            cached = self.cache.get(unique_id)
            if self._should_log(row.status, cached):
                hours = parse_hours(row.hours)
                self.logger.info(
                    "Status changed to %s for task %s. Logging %s hours.",
                    row.status,
                    unique_id,
                    hours,
                )
                self.ledger.append(row.user_name, row.project_name, row.task, hours)
                result.entries_logged += 1
            # the cache write follows the committed append
            self.cache.set(unique_id, row.status)
        except SQLAlchemyError:
            raise
        except Exception as exc:
            result.rows_failed += 1
            self.logger.error("Failed to reconcile row %s: %s", unique_id, exc)

    def _should_log(self, status: Optional[str], cached: Optional[str]) -> bool:
        completed = self.settings.completed_status
        if status != completed:
            return False
        if cached is None:
            return self.settings.log_first_sighting_completed
        return cached != completed


class SheetsSyncDaemon:
    """Background thread driving :class:`SheetsSyncService` on an interval."""

    def __init__(self, service: SheetsSyncService) -> None:
        self.service = service
        self.logger = _ensure_logger()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def start(self) -> None:
        if self.running:
            self.logger.warning("Sheets sync daemon already running")
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run_loop, name="sheets-sync", daemon=True)
        self._thread.start()
        self.logger.info(
            "Sheets sync daemon started (interval=%ss)", self.service.settings.poll_interval_sec
        )

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        self._thread = None
        self.logger.info("Sheets sync daemon stopped")

    def _run_loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.service.run_cycle()
            except Exception as exc:  # pragma: no cover
                self.logger.error("Background sync error: %s", exc)
            self._stop.wait(self.service.next_delay())


__all__ = [
    "ABORTED",
    "COMPLETED",
    "FETCH_FAILED",
    "SKIPPED_BUSY",
    "SKIPPED_UNCONFIGURED",
    "CycleResult",
    "SheetsSyncDaemon",
    "SheetsSyncService",
]
