"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env or os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


APP_NAME = "Tracker"


DATA_DIR = Path(os.environ.get("TRACKER_DATA_DIR") or get_default_data_dir(APP_NAME)).expanduser()
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "tracker.db"
SYNC_LOG_PATH = LOG_DIR / "sync.log"


@dataclass(frozen=True)
class SheetsSyncSettings:
    enabled: bool = True
    poll_interval_sec: float = field(
        default_factory=lambda: _env_float("TRACKER_POLL_INTERVAL", 1.0)
    )
    max_backoff_sec: float = 60.0
    # columns: user, project, task, manhours, status, unique id
    sheet_range: str = "Sheet1!A2:F"
    completed_status: str = "Completed"
    log_first_sighting_completed: bool = True
    rate_limit_status: int = 429
    scopes: tuple[str, ...] = (
        "https://www.googleapis.com/auth/spreadsheets.readonly",
    )


SHEETS_SYNC = SheetsSyncSettings()


def _default_redirect_uri() -> str:
    explicit = os.environ.get("GOOGLE_REDIRECT_URI")
    if explicit:
        return explicit
    app_url = os.environ.get("APP_URL", "http://localhost:3000").rstrip("/")
    return f"{app_url}/auth/google/callback"


@dataclass(frozen=True)
class GoogleOAuthSettings:
    client_id: Optional[str] = field(default_factory=lambda: os.environ.get("GOOGLE_CLIENT_ID"))
    client_secret: Optional[str] = field(
        default_factory=lambda: os.environ.get("GOOGLE_CLIENT_SECRET")
    )
    redirect_uri: str = field(default_factory=_default_redirect_uri)
    token_uri: str = "https://oauth2.googleapis.com/token"
    auth_uri: str = "https://accounts.google.com/o/oauth2/auth"


GOOGLE_OAUTH = GoogleOAuthSettings()


@dataclass(frozen=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = field(default_factory=lambda: _env_int("PORT", 3000))
    activity_limit: int = 100
    activity_limit_max: int = 500
    working_days: int = 25


SERVER = ServerSettings()


@dataclass(frozen=True)
class SeedSettings:
    enabled: bool = True
    users: int = 95
    projects: int = 32
    log_days: int = 10
    random_seed: Optional[int] = None


SEED = SeedSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "SYNC_LOG_PATH",
    "SHEETS_SYNC",
    "GOOGLE_OAUTH",
    "SERVER",
    "SEED",
    "SheetsSyncSettings",
    "GoogleOAuthSettings",
    "ServerSettings",
    "SeedSettings",
    "get_default_data_dir",
]
