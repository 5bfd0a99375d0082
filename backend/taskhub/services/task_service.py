"""TaskService: task CRUD behind the policy functions.

Every mutation follows the same sequence: load, check integrity, authorize,
apply, then stage one activity_log entry and commit both together.

Usage:
    tasks = TaskService(session, ActivityLogService(session))
    result = tasks.create_task(actor, title="Write report", ..., assigned_to=staff.id)
    if isinstance(result, Ok):
        task = result.value
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, timezone

from sqlalchemy import false, or_
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, col, select

from taskhub.authz import task_policy
from taskhub.errors import AuthorizationError, IntegrityError, NotFoundError, ValidationError
from taskhub.models.task import TASK_STATUSES, Task
from taskhub.models.user import User
from taskhub.services.activity_log import (
    ActivityLogService,
    describe_export,
    describe_task_created,
    describe_task_deleted,
    describe_task_updated,
)
from taskhub.services.result import Err, Ok, Result, commit

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "ID",
    "Title",
    "Description",
    "Status",
    "Due Date",
    "Assigned To",
    "Created By",
    "Created At",
    "Updated At",
]

_UPDATABLE_FIELDS = ("title", "description", "status", "due_date", "assigned_to")


class TaskService:
    """Task operations for one session. Returns Result values, never raises for expected failures."""

    def __init__(self, db_session: Session, activity_log: ActivityLogService) -> None:
        self.db = db_session
        self.activity_log = activity_log

    # === Lookups ===

    def role_of(self, user_id: str) -> str | None:
        """RoleLookup handed to the policy functions."""
        user = self.db.get(User, user_id)
        return user.role if user else None

    def principals_for(self, tasks: list[Task]) -> dict[str, User]:
        """Assignees and creators of `tasks`, keyed by id."""
        ids = {t.assigned_to for t in tasks} | {t.created_by for t in tasks}
        if not ids:
            return {}
        users = self.db.exec(select(User).where(col(User.id).in_(ids))).all()
        return {u.id: u for u in users}

    def visible_tasks_clause(self, actor: User) -> ColumnElement[bool] | None:
        """SQL form of `task_policy.view_task`; None means no restriction."""
        if actor.is_admin():
            return None
        if actor.is_manager():
            staff_ids = select(User.id).where(User.role == "staff")
            return or_(Task.created_by == actor.id, col(Task.assigned_to).in_(staff_ids))
        if actor.is_staff():
            return Task.assigned_to == actor.id
        return false()

    # === Reads ===

    def list_tasks(self, actor: User) -> Result[list[Task]]:
        decision = task_policy.view_task_list(actor)
        if not decision:
            return Err(AuthorizationError(decision.reason))

        stmt = select(Task)
        clause = self.visible_tasks_clause(actor)
        if clause is not None:
            stmt = stmt.where(clause)
        stmt = stmt.order_by(col(Task.due_date), col(Task.created_at))
        return Ok(list(self.db.exec(stmt).all()))

    def get_task(self, actor: User, task_id: str) -> Result[Task]:
        task = self.db.get(Task, task_id)
        if task is None:
            return Err(NotFoundError("Task not found"))
        decision = task_policy.view_task(actor, task, self.role_of)
        if not decision:
            return Err(AuthorizationError(decision.reason))
        return Ok(task)

    # === Mutations ===

    def create_task(
        self,
        actor: User,
        *,
        title: str,
        description: str,
        status: str,
        due_date: date,
        assigned_to: str,
    ) -> Result[Task]:
        invalid = _validate_fields({
            "title": title,
            "description": description,
            "status": status,
            "due_date": due_date,
            "assigned_to": assigned_to,
        })
        if invalid:
            return invalid

        assignee = self._resolve_assignee(assigned_to)
        if isinstance(assignee, Err):
            return assignee

        decision = task_policy.create_task(actor)
        if decision:
            decision = task_policy.assign_task(actor, assignee)
        if not decision:
            logger.warning(
                "Task assignment denied: actor=%s role=%s assignee=%s role=%s",
                actor.id, actor.role, assignee.id, assignee.role,
            )
            return Err(AuthorizationError(decision.reason))

        task = Task(
            title=title,
            description=description,
            status=status,
            due_date=due_date,
            assigned_to=assignee.id,
            created_by=actor.id,
        )
        self.db.add(task)
        self.activity_log.record(actor.id, "create_task", describe_task_created(task, assignee))
        failed = commit(self.db, "create_task")
        if failed:
            return failed
        self.db.refresh(task)
        logger.info("Task created: %s by %s", task.id, actor.id)
        return Ok(task)

    def update_task(self, actor: User, task_id: str, changes: dict) -> Result[Task]:
        """Apply a partial update. `changes` holds only the fields the caller sent."""
        task = self.db.get(Task, task_id)
        if task is None:
            return Err(NotFoundError("Task not found"))

        changes = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}
        invalid = _validate_fields(changes)
        if invalid:
            return invalid

        new_assignee: User | None = None
        if "assigned_to" in changes and changes["assigned_to"] != task.assigned_to:
            resolved = self._resolve_assignee(changes["assigned_to"])
            if isinstance(resolved, Err):
                return resolved
            new_assignee = resolved
        else:
            changes.pop("assigned_to", None)

        decision = task_policy.update_task(actor, task, self.role_of)
        if decision and new_assignee is not None:
            decision = task_policy.assign_task(actor, new_assignee)
        if not decision:
            logger.warning("Task update denied: actor=%s task=%s", actor.id, task.id)
            return Err(AuthorizationError(decision.reason))

        old_status = task.status
        for key, value in changes.items():
            setattr(task, key, value)
        task.updated_at = datetime.now(timezone.utc)
        self.db.add(task)
        self.activity_log.record(
            actor.id,
            "update_task",
            describe_task_updated(task.title, old_status, changes.get("status")),
        )
        failed = commit(self.db, "update_task")
        if failed:
            return failed
        self.db.refresh(task)
        return Ok(task)

    def delete_task(self, actor: User, task_id: str) -> Result[str]:
        """Delete a task; the Ok value is the deleted task's id."""
        task = self.db.get(Task, task_id)
        if task is None:
            return Err(NotFoundError("Task not found"))

        decision = task_policy.delete_task(actor, task)
        if not decision:
            logger.warning("Task delete denied: actor=%s task=%s", actor.id, task.id)
            return Err(AuthorizationError(decision.reason))

        deleted_id, title = task.id, task.title
        self.db.delete(task)
        self.activity_log.record(actor.id, "delete_task", describe_task_deleted(title))
        failed = commit(self.db, "delete_task")
        if failed:
            return failed
        logger.info("Task deleted: %s by %s", deleted_id, actor.id)
        return Ok(deleted_id)

    def export_tasks_csv(self, actor: User) -> Result[str]:
        """Render every visible task as CSV and record the export."""
        decision = task_policy.export_tasks(actor)
        if not decision:
            return Err(AuthorizationError(decision.reason))

        listed = self.list_tasks(actor)
        if isinstance(listed, Err):
            return listed
        tasks = listed.value
        principals = self.principals_for(tasks)

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_HEADER)
        for task in tasks:
            assignee = principals.get(task.assigned_to)
            creator = principals.get(task.created_by)
            writer.writerow([
                task.id,
                task.title,
                task.description,
                task.status,
                task.due_date.strftime("%Y-%m-%d"),
                assignee.name if assignee else "Unknown",
                creator.name if creator else "Unknown",
                task.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                task.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
            ])

        self.activity_log.record(actor.id, "export_tasks", describe_export())
        failed = commit(self.db, "export_tasks")
        if failed:
            return failed
        return Ok(buffer.getvalue())

    # === Helpers ===

    def _resolve_assignee(self, user_id: str) -> User | Err:
        assignee = self.db.get(User, user_id)
        if assignee is None:
            return Err(
                IntegrityError(
                    "The assigned user does not exist.",
                    errors={"assigned_to": ["The assigned user does not exist."]},
                )
            )
        if not assignee.is_active():
            return Err(
                IntegrityError(
                    "The assigned user is inactive.",
                    errors={"assigned_to": ["The assigned user is inactive."]},
                )
            )
        return assignee


def _validate_fields(fields: dict) -> Err | None:
    """Field rules shared by create and update; only keys present are checked.

    A key sent as None is an error, never "leave unchanged".
    """
    errors: dict[str, list[str]] = {
        key: [f"The {key.replace('_', ' ')} field may not be null."]
        for key, value in fields.items()
        if value is None
    }
    title = fields.get("title")
    if title is not None:
        if not title.strip():
            errors["title"] = ["The title field is required."]
        elif len(title) > 255:
            errors["title"] = ["The title may not be greater than 255 characters."]
    if fields.get("status") is not None and fields["status"] not in TASK_STATUSES:
        errors["status"] = ["The selected status is invalid."]
    if fields.get("due_date") is not None and fields["due_date"] < date.today():
        errors["due_date"] = ["The due date must be a date after or equal to today."]
    if errors:
        return Err(ValidationError("Validation Error", errors=errors))
    return None
