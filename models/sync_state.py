"""SQLModel tables holding spreadsheet synchronization state."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class TaskStatusCache(SQLModel, table=True):
    """Last status observed for an external sheet row."""

    __tablename__ = "task_status_cache"
    id: str = Field(primary_key=True, description="External row identifier")
    last_status: Optional[str] = None


class SyncSettings(SQLModel, table=True):
    """Singleton row: sheet to poll, OAuth token pair and last sync anchor."""

    __tablename__ = "sync_settings"
    id: int = Field(default=1, primary_key=True)
    spreadsheet_id: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    last_sync: Optional[datetime] = None


__all__ = ["TaskStatusCache", "SyncSettings"]
