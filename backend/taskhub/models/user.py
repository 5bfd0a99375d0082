"""User (principal) model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel

Role = Literal["admin", "manager", "staff"]
ROLES: tuple[str, ...] = ("admin", "manager", "staff")


class User(SQLModel, table=True):
    """An account that can authenticate and act on tasks.

    `role` is a flat enum compared by the policy functions; there is no
    role hierarchy object. `status` False blocks every authenticated request.
    """

    __tablename__ = "user"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = SQLField(unique=True, index=True)
    password_hash: str = ""
    role: str = "staff"  # "admin" | "manager" | "staff"
    status: bool = True
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))

    def is_admin(self) -> bool:
        return self.role == "admin"

    def is_manager(self) -> bool:
        return self.role == "manager"

    def is_staff(self) -> bool:
        return self.role == "staff"

    def is_active(self) -> bool:
        return self.status is True


class UserSummary(BaseModel):
    """Embedded principal reference (task assignee/creator, log actor)."""

    id: str
    name: str
    email: str
    role: str

    @classmethod
    def of(cls, user: User | None) -> UserSummary | None:
        if user is None:
            return None
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)
