"""UserService: principal management. Reads are admin/manager, writes admin."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, or_, update
from sqlmodel import Session, col, select

from taskhub.authz import user_policy
from taskhub.errors import AuthorizationError, NotFoundError, ValidationError
from taskhub.models.access_token import AccessToken
from taskhub.models.activity_log import ActivityLog
from taskhub.models.task import Task
from taskhub.models.user import ROLES, User
from taskhub.security.passwords import hash_password
from taskhub.services.activity_log import (
    ActivityLogService,
    describe_user_created,
    describe_user_deleted,
    describe_user_updated,
)
from taskhub.services.result import Err, Ok, Result, commit

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("name", "email", "password", "role", "status")


class UserService:
    def __init__(
        self,
        db_session: Session,
        activity_log: ActivityLogService,
        bcrypt_rounds: int = 12,
    ) -> None:
        self.db = db_session
        self.activity_log = activity_log
        self.bcrypt_rounds = bcrypt_rounds

    def list_users(self, actor: User) -> Result[list[User]]:
        decision = user_policy.view_users(actor)
        if not decision:
            return Err(AuthorizationError(decision.reason))
        users = self.db.exec(select(User).order_by(col(User.name))).all()
        return Ok(list(users))

    def get_user(self, actor: User, user_id: str) -> Result[User]:
        user = self.db.get(User, user_id)
        if user is None:
            return Err(NotFoundError("User not found"))
        decision = user_policy.view_users(actor)
        if not decision:
            return Err(AuthorizationError(decision.reason))
        return Ok(user)

    def create_user(
        self,
        actor: User,
        *,
        name: str,
        email: str,
        password: str,
        role: str,
        status: bool = True,
    ) -> Result[User]:
        decision = user_policy.create_user(actor)
        if not decision:
            return Err(AuthorizationError(decision.reason))

        invalid = self._validate(
            {"name": name, "email": email, "password": password, "role": role, "status": status}
        )
        if invalid:
            return invalid

        user = User(
            name=name,
            email=email.lower(),
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
            role=role,
            status=status,
        )
        self.db.add(user)
        self.activity_log.record(actor.id, "create_user", describe_user_created(user))
        failed = commit(self.db, "create_user")
        if failed:
            return failed
        self.db.refresh(user)
        logger.info("User created: %s (%s) by %s", user.id, user.role, actor.id)
        return Ok(user)

    def update_user(self, actor: User, user_id: str, changes: dict) -> Result[User]:
        user = self.db.get(User, user_id)
        if user is None:
            return Err(NotFoundError("User not found"))

        decision = user_policy.update_user(actor, user)
        if not decision:
            return Err(AuthorizationError(decision.reason))

        changes = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}
        invalid = self._validate(changes, ignore_id=user.id)
        if invalid:
            return invalid

        if "password" in changes:
            user.password_hash = hash_password(changes.pop("password"), rounds=self.bcrypt_rounds)
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = datetime.now(timezone.utc)
        self.db.add(user)
        self.activity_log.record(actor.id, "update_user", describe_user_updated(user))
        failed = commit(self.db, "update_user")
        if failed:
            return failed
        self.db.refresh(user)
        return Ok(user)

    def delete_user(self, actor: User, user_id: str) -> Result[str]:
        """Delete a principal with its tasks and tokens; audit rows keep a null actor."""
        user = self.db.get(User, user_id)
        if user is None:
            return Err(NotFoundError("User not found"))

        decision = user_policy.delete_user(actor, user)
        if not decision:
            logger.warning("User delete denied: actor=%s target=%s (%s)", actor.id, user.id, decision.reason)
            return Err(AuthorizationError(decision.reason))

        deleted_id, name = user.id, user.name
        self.db.exec(
            delete(Task).where(or_(Task.assigned_to == deleted_id, Task.created_by == deleted_id))
        )
        self.db.exec(delete(AccessToken).where(AccessToken.user_id == deleted_id))
        self.db.exec(update(ActivityLog).where(ActivityLog.user_id == deleted_id).values(user_id=None))
        self.db.delete(user)
        self.activity_log.record(actor.id, "delete_user", describe_user_deleted(name))
        failed = commit(self.db, "delete_user")
        if failed:
            return failed
        logger.info("User deleted: %s by %s", deleted_id, actor.id)
        return Ok(deleted_id)

    def _validate(self, fields: dict, ignore_id: str | None = None) -> Err | None:
        """Only keys present are checked; a key sent as None is an error."""
        errors: dict[str, list[str]] = {
            key: [f"The {key} field may not be null."] for key, value in fields.items() if value is None
        }
        name = fields.get("name")
        if name is not None:
            if not name.strip():
                errors["name"] = ["The name field is required."]
            elif len(name) > 255:
                errors["name"] = ["The name may not be greater than 255 characters."]
        # Format is checked by EmailStr at the request boundary
        email = fields.get("email")
        if email is not None:
            stmt = select(User).where(User.email == email.lower())
            if ignore_id is not None:
                stmt = stmt.where(User.id != ignore_id)
            if self.db.exec(stmt).first() is not None:
                errors["email"] = ["The email has already been taken."]
        if fields.get("password") is not None and len(fields["password"]) < 8:
            errors["password"] = ["The password must be at least 8 characters."]
        if fields.get("role") is not None and fields["role"] not in ROLES:
            errors["role"] = ["The selected role is invalid."]
        if errors:
            return Err(ValidationError("Validation Error", errors=errors))
        return None
