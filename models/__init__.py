"""ORM models exposed by the Tracker application."""
from .activity_log import ActivityLog
from .directory import Assignment, Project, User
from .sync_state import SyncSettings, TaskStatusCache

__all__ = ["ActivityLog", "Assignment", "Project", "User", "SyncSettings", "TaskStatusCache"]
