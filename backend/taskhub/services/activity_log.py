"""ActivityLogService: the append-only audit trail.

`record()` stages one ActivityLog row on the caller's session and does not
commit. The owning service commits the mutation and its entry together.

Description strings are built here, one function per action.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone

from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import Session, col, select

from taskhub.authz import log_policy
from taskhub.errors import AuthorizationError, NotFoundError
from taskhub.models.activity_log import ActivityLog
from taskhub.models.task import Task
from taskhub.models.user import User
from taskhub.services.result import Err, Ok, Result

# === Description builders ===


def describe_task_created(task: Task, assignee: User) -> str:
    return f"Created task: {task.title} and assigned to user #{assignee.id}"


def describe_task_updated(title: str, old_status: str, new_status: str | None) -> str:
    message = f"Updated task: {title}"
    if new_status is not None and new_status != old_status:
        message += f" (Status changed from {old_status} to {new_status})"
    return message


def describe_task_deleted(title: str) -> str:
    return f"Deleted task: {title}"


def describe_user_created(user: User) -> str:
    return f"Created user: {user.name} with {user.role} role"


def describe_user_updated(user: User) -> str:
    return f"Updated user: {user.name}"


def describe_user_deleted(name: str) -> str:
    return f"Deleted user: {name}"


def describe_login(user: User) -> str:
    return f"User {user.name} logged in"


def describe_logout(user: User) -> str:
    return f"User {user.name} logged out"


def describe_task_overdue(task_id: str) -> str:
    return f"Task overdue: {task_id}"


def describe_export() -> str:
    return "Exported tasks to CSV"


# === Query types ===


class LogFilters(BaseModel):
    """Optional, independent filters for the log listing."""

    from_date: date | None = None
    to_date: date | None = None
    action: str | None = None
    user_id: str | None = None


@dataclass
class LogPage:
    entries: list[ActivityLog]
    users: dict[str, User] = field(default_factory=dict)
    current_page: int = 1
    per_page: int = 15
    total: int = 0

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1


class ActivityLogService:
    """Writes and reads audit entries.

    Usage:
        audit = ActivityLogService(session)
        audit.record(actor.id, "create_task", describe_task_created(task, assignee))
        session.commit()  # together with the task row
    """

    def __init__(self, db_session: Session, per_page: int = 15) -> None:
        self.db = db_session
        self.per_page = per_page

    def record(
        self,
        actor_id: str | None,
        action: str,
        description: str,
        logged_at: datetime | None = None,
    ) -> ActivityLog:
        """Stage one entry. `actor_id=None` marks a system action."""
        entry = ActivityLog(
            user_id=actor_id,
            action=action,
            description=description,
            logged_at=logged_at or datetime.now(timezone.utc),
        )
        self.db.add(entry)
        return entry

    def record_system(self, action: str, description: str, logged_at: datetime | None = None) -> ActivityLog:
        return self.record(None, action, description, logged_at=logged_at)

    def list_logs(self, actor: User, filters: LogFilters | None = None, page: int = 1) -> Result[LogPage]:
        """Admin-only, newest first, `per_page` entries per page."""
        decision = log_policy.view_logs(actor)
        if not decision:
            return Err(AuthorizationError(decision.reason))

        filters = filters or LogFilters()
        page = max(1, page)

        stmt = select(ActivityLog)
        # Bound values must be aware; logged_at is stored as UTC
        if filters.from_date is not None:
            start = datetime.combine(filters.from_date, time.min, tzinfo=timezone.utc)
            stmt = stmt.where(ActivityLog.logged_at >= start)
        if filters.to_date is not None:
            end = datetime.combine(filters.to_date, time.max, tzinfo=timezone.utc)
            stmt = stmt.where(ActivityLog.logged_at <= end)
        if filters.action:
            stmt = stmt.where(ActivityLog.action == filters.action)
        if filters.user_id:
            stmt = stmt.where(ActivityLog.user_id == filters.user_id)

        total = self.db.exec(select(func.count()).select_from(stmt.subquery())).one()
        entries = list(
            self.db.exec(
                stmt.order_by(col(ActivityLog.logged_at).desc(), col(ActivityLog.created_at).desc())
                .offset((page - 1) * self.per_page)
                .limit(self.per_page)
            ).all()
        )
        return Ok(
            LogPage(
                entries=entries,
                users=self._users_for(entries),
                current_page=page,
                per_page=self.per_page,
                total=total,
            )
        )

    def get_log(self, actor: User, log_id: str) -> Result[tuple[ActivityLog, User | None]]:
        decision = log_policy.view_logs(actor)
        if not decision:
            return Err(AuthorizationError(decision.reason))
        entry = self.db.get(ActivityLog, log_id)
        if entry is None:
            return Err(NotFoundError("Activity log not found"))
        user = self.db.get(User, entry.user_id) if entry.user_id else None
        return Ok((entry, user))

    def _users_for(self, entries: list[ActivityLog]) -> dict[str, User]:
        ids = {e.user_id for e in entries if e.user_id}
        if not ids:
            return {}
        users = self.db.exec(select(User).where(col(User.id).in_(ids))).all()
        return {u.id: u for u in users}
