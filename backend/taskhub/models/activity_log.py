"""Activity log (audit trail) model.

Rows are append-only: application code inserts them and never updates or
deletes them. `user_id` is None for system actions (the overdue sweep) and is
nulled, not cascaded, when the acting user is deleted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlmodel import Field as SQLField
from sqlmodel import SQLModel


class ActivityLog(SQLModel, table=True):
    """One audit entry."""

    __tablename__ = "activity_log"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str | None = SQLField(default=None, foreign_key="user.id", ondelete="SET NULL", index=True)
    action: str = SQLField(index=True)  # "create_task" | "update_user" | "task_overdue" | ...
    description: str
    logged_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc), index=True)
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
