# tracker/models/directory.py
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    email: str = Field(unique=True)
    role: Optional[str] = None
    department: Optional[str] = None


class Project(SQLModel, table=True):
    __tablename__ = "projects"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    status: str = "Active"          # Active / On Hold / Completed / Planning
    priority: str = "Medium"        # High / Medium / Low
    deadline: Optional[date] = None
    description: Optional[str] = None
    daily_target: int = 100


class Assignment(SQLModel, table=True):
    __tablename__ = "assignments"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    project_id: Optional[int] = Field(default=None, foreign_key="projects.id", index=True)
    hours_per_week: int = 40


__all__ = ["User", "Project", "Assignment"]
