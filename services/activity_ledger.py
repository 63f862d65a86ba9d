"""Append-only store of logged work."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlmodel import select

from datetime_utils import day_key, ensure_utc, utc_now
from models.activity_log import ActivityLog
from storage.db import get_session


GROUP_COLUMNS = {
    "user": ActivityLog.user_name,
    "project": ActivityLog.project_name,
}


@dataclass
class LedgerTotals:
    total: float = 0.0
    daily: Dict[str, float] = field(default_factory=dict)

    def add(self, day: str, hours: float) -> None:
        self.total += hours
        self.daily[day] = self.daily.get(day, 0.0) + hours


class ActivityLedger:
    """Write-once, read-many log; no update or delete is exposed."""

    def __init__(self, session_factory=get_session) -> None:
        self._session_factory = session_factory

    def append(
        self,
        user_name: Optional[str],
        project_name: Optional[str],
        task: Optional[str],
        manhours: float,
    ) -> int:
        hours = float(manhours)
        if not math.isfinite(hours) or hours < 0:
            raise ValueError(f"manhours must be a non-negative number, got {manhours!r}")
        with self._session_factory() as session:
            now = utc_now()
            latest = ensure_utc(session.exec(select(func.max(ActivityLog.timestamp))).one())
            # keep insertion order and timestamp order aligned if the clock steps back
            if latest is not None and latest > now:
                now = latest
            entry = ActivityLog(
                user_name=user_name,
                project_name=project_name,
                task=task,
                manhours=hours,
                timestamp=now,
            )
            session.add(entry)
            session.commit()
            session.refresh(entry)
            return int(entry.id)

    def list(self, limit: int = 100, *, newest_first: bool = True) -> List[ActivityLog]:
        order = (
            (ActivityLog.timestamp.desc(), ActivityLog.id.desc())
            if newest_first
            else (ActivityLog.timestamp.asc(), ActivityLog.id.asc())
        )
        with self._session_factory() as session:
            stmt = select(ActivityLog).order_by(*order).limit(max(int(limit), 0))
            return list(session.exec(stmt))

    def entries_between(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[ActivityLog]:
        stmt = select(ActivityLog)
        if since is not None:
            stmt = stmt.where(ActivityLog.timestamp >= ensure_utc(since))
        if until is not None:
            stmt = stmt.where(ActivityLog.timestamp < ensure_utc(until))
        stmt = stmt.order_by(ActivityLog.timestamp.asc(), ActivityLog.id.asc())
        with self._session_factory() as session:
            return list(session.exec(stmt))

    def aggregate(
        self,
        group_by: str = "user",
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> Dict[Optional[str], LedgerTotals]:
        """Hours per user or per project, with a per-day breakdown."""

        column = GROUP_COLUMNS.get(group_by)
        if column is None:
            raise ValueError(f"Unsupported group_by: {group_by}")
        stmt = select(column, ActivityLog.manhours, ActivityLog.timestamp)
        if since is not None:
            stmt = stmt.where(ActivityLog.timestamp >= ensure_utc(since))
        if until is not None:
            stmt = stmt.where(ActivityLog.timestamp < ensure_utc(until))

        result: Dict[Optional[str], LedgerTotals] = {}
        with self._session_factory() as session:
            for key, hours, timestamp in session.exec(stmt):
                bucket = result.setdefault(key, LedgerTotals())
                bucket.add(day_key(ensure_utc(timestamp)), float(hours or 0.0))
        return result

    def count(self) -> int:
        with self._session_factory() as session:
            return int(session.exec(select(func.count()).select_from(ActivityLog)).one())


__all__ = ["ActivityLedger", "LedgerTotals"]
