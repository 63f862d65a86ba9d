"""Read access to users, projects and assignments."""

from __future__ import annotations

from typing import Dict, List

from sqlalchemy import func
from sqlmodel import select

from models import Assignment, Project, User
from storage.db import get_session


class DirectoryService:
    def __init__(self, session_factory=get_session) -> None:
        self._session_factory = session_factory

    def list_users(self) -> List[Dict[str, object]]:
        stmt = (
            select(User, Project.name)
            .join(Assignment, Assignment.user_id == User.id, isouter=True)
            .join(Project, Assignment.project_id == Project.id, isouter=True)
            .order_by(User.id)
        )
        with self._session_factory() as session:
            return [
                {**user.model_dump(), "project_name": project_name}
                for user, project_name in session.exec(stmt)
            ]

    def list_projects(self) -> List[Dict[str, object]]:
        stmt = (
            select(Project, func.count(Assignment.user_id))
            .join(Assignment, Assignment.project_id == Project.id, isouter=True)
            .group_by(Project.id)
            .order_by(Project.id)
        )
        with self._session_factory() as session:
            result = []
            for project, team_size in session.exec(stmt):
                payload = project.model_dump()
                if payload.get("deadline") is not None:
                    payload["deadline"] = payload["deadline"].isoformat()
                payload["team_size"] = int(team_size or 0)
                result.append(payload)
            return result

    def users(self) -> List[User]:
        with self._session_factory() as session:
            return list(session.exec(select(User).order_by(User.id)))

    def projects(self) -> List[Project]:
        with self._session_factory() as session:
            return list(session.exec(select(Project).order_by(Project.id)))

    def counts(self) -> Dict[str, object]:
        with self._session_factory() as session:
            total_users = session.exec(select(func.count()).select_from(User)).one()
            total_projects = session.exec(select(func.count()).select_from(Project)).one()
            assignments = session.exec(select(func.count()).select_from(Assignment)).one()
            statuses = session.exec(
                select(Project.status, func.count()).group_by(Project.status).order_by(Project.status)
            ).all()
        return {
            "totalUsers": int(total_users),
            "totalProjects": int(total_projects),
            "projectStatuses": [{"status": status, "count": int(count)} for status, count in statuses],
            "activeAssignments": int(assignments),
        }


__all__ = ["DirectoryService"]
