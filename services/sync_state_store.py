"""Persistence helpers for the spreadsheet sync configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from datetime_utils import ensure_utc, utc_now
from models.sync_state import SyncSettings
from storage.db import get_session


@dataclass(frozen=True)
class SyncState:
    """Snapshot of the singleton ``sync_settings`` row handed to one cycle."""

    spreadsheet_id: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    last_sync: Optional[datetime] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.spreadsheet_id and self.refresh_token)


class SyncStateStore:
    """Wrapper around the SQLModel session for the ``sync_settings`` row."""

    def __init__(self, session_factory=get_session) -> None:
        self._session_factory = session_factory

    def load(self) -> SyncState:
        with self._session_factory() as session:
            row = session.get(SyncSettings, 1)
            if row is None:
                return SyncState()
            return SyncState(
                spreadsheet_id=row.spreadsheet_id,
                access_token=row.access_token,
                refresh_token=row.refresh_token,
                last_sync=ensure_utc(row.last_sync),
            )

    def set_spreadsheet_id(self, spreadsheet_id: Optional[str]) -> SyncState:
        value = (spreadsheet_id or "").strip() or None
        return self._update(spreadsheet_id=value)

    def set_credentials(self, access_token: Optional[str], refresh_token: Optional[str]) -> SyncState:
        fields = {"access_token": access_token}
        # Google only returns a refresh token on the first consent
        if refresh_token:
            fields["refresh_token"] = refresh_token
        return self._update(**fields)

    def set_access_token(self, access_token: Optional[str]) -> SyncState:
        return self._update(access_token=access_token)

    def stamp_last_sync(self, moment: Optional[datetime] = None) -> SyncState:
        return self._update(last_sync=ensure_utc(moment) or utc_now())

    def status(self) -> dict:
        state = self.load()
        return {
            "spreadsheet_id": state.spreadsheet_id,
            "last_sync": state.last_sync.isoformat() if state.last_sync else None,
            "configured": state.is_configured,
        }

    # ----- helpers -----
    def _update(self, **fields) -> SyncState:
        with self._session_factory() as session:
            row = session.get(SyncSettings, 1)
            if row is None:
                row = SyncSettings(id=1)
            for key, value in fields.items():
                setattr(row, key, value)
            session.add(row)
            session.commit()
        return self.load()


__all__ = ["SyncState", "SyncStateStore"]
