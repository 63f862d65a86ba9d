"""Demo data for a fresh database."""
from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import Callable

from sqlalchemy import func
from sqlmodel import Session, select

from core.settings import SEED, SeedSettings
from datetime_utils import midnight_utc, utc_now
from models import ActivityLog, Assignment, Project, User


logger = logging.getLogger(__name__)

PROJECT_STATUSES = ("Active", "On Hold", "Completed", "Planning")
PROJECT_PRIORITIES = ("High", "Medium", "Low")
DAILY_TARGETS = (100, 200, 400, 800, 1000)


def project_name(index: int) -> str:
    return f"Project {chr(65 + (index % 26))}{index}"


def seed_if_empty(
    session_factory: Callable[[], Session],
    settings: SeedSettings = SEED,
) -> bool:
    """Populate users, projects, assignments and recent logs once."""

    with session_factory() as session:
        existing = int(session.exec(select(func.count()).select_from(User)).one())
        if existing:
            return False

        logger.info("Seeding database...")
        rng = random.Random(settings.random_seed)

        for i in range(1, settings.users + 1):
            session.add(
                User(
                    name=f"User {i}",
                    email=f"user{i}@example.com",
                    role="Lead" if i % 5 == 0 else "Developer",
                    department="Engineering" if i % 3 == 0 else "Product",
                )
            )

        for i in range(1, settings.projects + 1):
            session.add(
                Project(
                    name=project_name(i),
                    status=PROJECT_STATUSES[i % 4],
                    priority=PROJECT_PRIORITIES[i % 3],
                    deadline=date(2026, 12, 31),
                    description=f"Description for Project {i}",
                    daily_target=DAILY_TARGETS[i % 5],
                )
            )
        session.flush()

        if settings.projects:
            for i in range(1, settings.users + 1):
                session.add(Assignment(user_id=i, project_id=(i % settings.projects) + 1))

        today = utc_now().date()
        for offset in range(settings.log_days):
            stamp = midnight_utc(today - timedelta(days=offset)) + timedelta(hours=10)
            for j in range(1, settings.projects + 1):
                session.add(
                    ActivityLog(
                        user_name=f"User {(j % max(settings.users, 1)) + 1}",
                        project_name=project_name(j),
                        task="Daily sync and task execution",
                        manhours=float(rng.randint(100, 599)),
                        timestamp=stamp,
                    )
                )

        session.commit()
        logger.info("Seeding complete.")
        return True


__all__ = ["seed_if_empty", "project_name"]
