"""Minimal Google Sheets client used by the reconciliation poller."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from googleapiclient.discovery import build

from services.errors import SheetFormatError


ROW_WIDTH = 6
# leading numeric prefix, so "5h" reads as 5
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class TrackedRow:
    """One sheet row: user, project, task, manhours, status, unique id."""

    user_name: Optional[str] = None
    project_name: Optional[str] = None
    task: Optional[str] = None
    hours: Optional[str] = None
    status: Optional[str] = None
    unique_id: Optional[str] = None

    @classmethod
    def from_cells(cls, cells: Sequence[Any]) -> "TrackedRow":
        values = [_cell(value) for value in list(cells)[:ROW_WIDTH]]
        values += [None] * (ROW_WIDTH - len(values))
        return cls(*values)


def _cell(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_hours(value: Any) -> float:
    """Non-negative hours from a sheet cell; anything unusable becomes 0."""

    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).strip())
        if match is None:
            return 0.0
        number = float(match.group(0))
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def rows_from_response(response: Any) -> List[TrackedRow]:
    if not isinstance(response, dict):
        raise SheetFormatError(f"Unexpected response type: {type(response).__name__}")
    # the API omits "values" entirely for an empty range
    values = response.get("values", [])
    if not isinstance(values, list):
        raise SheetFormatError("'values' is not a list")
    rows: List[TrackedRow] = []
    for index, cells in enumerate(values):
        if not isinstance(cells, list):
            raise SheetFormatError(f"Row {index} is not a list")
        rows.append(TrackedRow.from_cells(cells))
    return rows


class SheetsRowFetcher:
    """Reads a fixed range and normalizes it into :class:`TrackedRow` values."""

    def __init__(self, service_factory=None) -> None:
        self._service_factory = service_factory or _build_service

    def fetch(self, spreadsheet_id: str, range_name: str, credentials) -> List[TrackedRow]:
        service = self._service_factory(credentials)
        response = (
            service.spreadsheets()
            .values()
            .get(spreadsheetId=spreadsheet_id, range=range_name)
            .execute()
        )
        return rows_from_response(response)


def _build_service(credentials):
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


__all__ = ["ROW_WIDTH", "SheetsRowFetcher", "TrackedRow", "parse_hours", "rows_from_response"]
