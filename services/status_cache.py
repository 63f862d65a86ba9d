"""Persistence for the last status seen per external sheet row."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import select

from models.sync_state import TaskStatusCache
from storage.db import get_session


class StatusCache:
    """Identifier -> last observed status; used only for edge detection.

    Entries are created on first sighting, overwritten on every later one and
    never deleted, so a row removed from the sheet keeps its fence.
    """

    def __init__(self, session_factory=get_session) -> None:
        self._session_factory = session_factory

    def get(self, unique_id: str) -> Optional[str]:
        if not unique_id:
            return None
        with self._session_factory() as session:
            entry = session.get(TaskStatusCache, unique_id)
            return entry.last_status if entry else None

    def set(self, unique_id: str, status: Optional[str]) -> None:
        if not unique_id:
            raise ValueError("unique_id is required")
        # an empty cell is stored as "" so a sighting is never confused with absence
        status = status or ""
        stmt = sqlite_insert(TaskStatusCache).values(id=unique_id, last_status=status)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={"last_status": stmt.excluded.last_status},
        )
        with self._session_factory() as session:
            session.execute(stmt)
            session.commit()

    def count(self) -> int:
        with self._session_factory() as session:
            return int(session.exec(select(func.count()).select_from(TaskStatusCache)).one())

    def snapshot(self) -> dict[str, Optional[str]]:
        with self._session_factory() as session:
            return {row.id: row.last_status for row in session.exec(select(TaskStatusCache))}


__all__ = ["StatusCache"]
