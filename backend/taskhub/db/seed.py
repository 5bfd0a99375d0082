"""Demo data: five principals (one inactive), five tasks and a short audit history.

Every account's password is "password". Seeding only runs into an empty
user table.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from taskhub.models.activity_log import ActivityLog
from taskhub.models.task import Task
from taskhub.models.user import User
from taskhub.security.passwords import hash_password
from taskhub.services.activity_log import (
    describe_login,
    describe_task_created,
    describe_task_overdue,
    describe_user_created,
)

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"

DEMO_USERS: list[dict] = [
    {"key": "admin", "name": "Admin User", "email": "admin@example.com", "role": "admin", "status": True},
    {"key": "manager", "name": "Manager User", "email": "manager@example.com", "role": "manager", "status": True},
    {"key": "staff1", "name": "Staff User 1", "email": "staff1@example.com", "role": "staff", "status": True},
    {"key": "staff2", "name": "Staff User 2", "email": "staff2@example.com", "role": "staff", "status": True},
    {"key": "inactive", "name": "Inactive Staff User", "email": "inactive@example.com", "role": "staff", "status": False},
]

# (key, title, description, status, due in days, assignee key, creator key)
DEMO_TASKS: list[tuple] = [
    ("review", "Review System Architecture",
     "Review the current system architecture and identify improvements.",
     "pending", 7, "manager", "admin"),
    ("auth", "Implement Authentication System",
     "Implement the token authentication system.",
     "in_progress", 5, "staff1", "admin"),
    ("dashboard", "Create Frontend Dashboard",
     "Design and implement the frontend dashboard.",
     "pending", 7, "staff1", "manager"),
    ("crud", "Implement Task CRUD Operations",
     "Implement create, read, update, and delete operations for tasks.",
     "pending", 3, "staff2", "manager"),
    ("overdue", "Overdue Task Example",
     "This task is intentionally set as overdue for testing the scheduler.",
     "pending", -2, "staff2", "manager"),
]


def seed_demo_data(bind: Engine, bcrypt_rounds: int = 12) -> bool:
    """Insert the demo data. Returns False when users already exist."""
    with Session(bind) as session:
        if session.exec(select(User)).first() is not None:
            logger.info("Users already present; demo seed skipped")
            return False

        password_hash = hash_password(DEMO_PASSWORD, rounds=bcrypt_rounds)
        users: dict[str, User] = {}
        for spec in DEMO_USERS:
            user = User(
                name=spec["name"],
                email=spec["email"],
                password_hash=password_hash,
                role=spec["role"],
                status=spec["status"],
            )
            session.add(user)
            users[spec["key"]] = user
        # No relationships are declared, so parents are flushed before their children
        session.flush()

        today = date.today()
        tasks: dict[str, Task] = {}
        for key, title, description, status, due_in, assignee, creator in DEMO_TASKS:
            task = Task(
                title=title,
                description=description,
                status=status,
                due_date=today + timedelta(days=due_in),
                assigned_to=users[assignee].id,
                created_by=users[creator].id,
            )
            session.add(task)
            tasks[key] = task
        session.flush()

        now = datetime.now(timezone.utc)
        history = [
            (users["admin"].id, "create_user", describe_user_created(users["manager"]), 30),
            (users["admin"].id, "create_user", describe_user_created(users["staff1"]), 25),
            (users["admin"].id, "user_login", describe_login(users["admin"]), 20),
            (users["manager"].id, "user_login", describe_login(users["manager"]), 15),
            (users["admin"].id, "create_task", describe_task_created(tasks["review"], users["manager"]), 10),
            (users["manager"].id, "create_task", describe_task_created(tasks["dashboard"], users["staff1"]), 5),
            (None, "task_overdue", describe_task_overdue(tasks["overdue"].id), 12 * 60),
        ]
        for actor_id, action, description, minutes_ago in history:
            session.add(
                ActivityLog(
                    user_id=actor_id,
                    action=action,
                    description=description,
                    logged_at=now - timedelta(minutes=minutes_ago),
                )
            )
        session.commit()

    logger.info("Seeded %d users and %d tasks", len(DEMO_USERS), len(DEMO_TASKS))
    return True
