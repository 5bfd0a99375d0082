"""Task model."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal
from uuid import uuid4

from sqlmodel import Field as SQLField
from sqlmodel import SQLModel

TaskStatus = Literal["pending", "in_progress", "done"]
TASK_STATUSES: tuple[str, ...] = ("pending", "in_progress", "done")


class Task(SQLModel, table=True):
    """A unit of work created by one principal and assigned to another."""

    __tablename__ = "task"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    description: str = ""
    status: str = "pending"  # "pending" | "in_progress" | "done"
    due_date: date
    assigned_to: str = SQLField(foreign_key="user.id", ondelete="CASCADE", index=True)
    created_by: str = SQLField(foreign_key="user.id", ondelete="CASCADE", index=True)
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))

    def is_overdue(self, today: date | None = None) -> bool:
        """True when the due date is before today.

        Status is not considered: a done task with a past due date still
        reports overdue. The overdue sweep filters out done tasks itself.
        """
        return self.due_date < (today or date.today())
