"""Ad-hoc database migrations for Tracker."""

from __future__ import annotations

from sqlalchemy import text


def _column_exists(conn, table: str, column: str) -> bool:
    result = conn.execute(text(f"PRAGMA table_info('{table}')"))
    return any(row[1] == column for row in result)


def ensure_sync_settings_columns(conn) -> None:
    # databases created before token storage moved into sync_settings
    columns = {
        "spreadsheet_id": "TEXT",
        "access_token": "TEXT",
        "refresh_token": "TEXT",
        "last_sync": "DATETIME",
    }
    for name, ddl_type in columns.items():
        if not _column_exists(conn, "sync_settings", name):
            conn.execute(text(f"ALTER TABLE sync_settings ADD COLUMN {name} {ddl_type}"))


def ensure_activity_log_indexes(conn) -> None:
    conn.execute(
        text(
            """
            CREATE INDEX IF NOT EXISTS ix_activity_logs_timestamp
            ON activity_logs (timestamp)
            """
        )
    )


def run_all(engine) -> None:
    with engine.begin() as conn:
        ensure_sync_settings_columns(conn)
        # SQLModel creates the indexes, but legacy databases may predate them
        ensure_activity_log_indexes(conn)


__all__ = ["run_all"]
