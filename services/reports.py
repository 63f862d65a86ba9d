"""Aggregated manhour reports built on the activity ledger."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from core.settings import SERVER
from datetime_utils import start_of_month_utc
from services.activity_ledger import ActivityLedger, LedgerTotals
from services.directory import DirectoryService


def _round(value: float) -> float:
    return round(value, 2)


class ReportService:
    def __init__(self, ledger: ActivityLedger, directory: DirectoryService) -> None:
        self.ledger = ledger
        self.directory = directory

    def user_performance(self, since: Optional[datetime] = None) -> List[Dict[str, object]]:
        """Every user's hours since ``since`` (default: start of this month)."""

        since = since or start_of_month_utc()
        totals = self.ledger.aggregate("user", since=since)
        report = []
        for user in self.directory.users():
            bucket = totals.get(user.name) or LedgerTotals()
            report.append({"name": user.name, "total": bucket.total, "daily": dict(bucket.daily)})
        return report

    def project_utilization(
        self,
        since: Optional[datetime] = None,
        working_days: int = SERVER.working_days,
    ) -> Dict[str, object]:
        """Hours per project against ``daily_target * working_days``."""

        since = since or start_of_month_utc()
        totals = self.ledger.aggregate("project", since=since)
        data = []
        for project in self.directory.projects():
            bucket = totals.get(project.name) or LedgerTotals()
            capacity = project.daily_target * working_days
            utilization = bucket.total / capacity * 100 if capacity > 0 else 0.0
            data.append(
                {
                    "name": project.name,
                    "daily_target": project.daily_target,
                    "total": bucket.total,
                    "utilization": _round(utilization),
                    "daily": dict(bucket.daily),
                }
            )
        overall = sum(item["utilization"] for item in data) / len(data) if data else 0.0
        return {
            "workingDays": working_days,
            "overallUtilization": _round(overall),
            "data": data,
        }

    def dashboard_stats(self) -> Dict[str, object]:
        return self.directory.counts()


__all__ = ["ReportService"]
