"""SQLModel table for the append-only activity ledger."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from datetime_utils import utc_now


class ActivityLog(SQLModel, table=True):
    """One logged unit of work. Rows are written once and never updated."""

    __tablename__ = "activity_logs"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_name: Optional[str] = None
    project_name: Optional[str] = Field(default=None, index=True)
    task: Optional[str] = None
    manhours: float = 0.0
    timestamp: datetime = Field(default_factory=utc_now, index=True)


__all__ = ["ActivityLog"]
