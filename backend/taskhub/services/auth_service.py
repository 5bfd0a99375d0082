"""AuthService: login, logout and the Identity & Status Gate.

`authenticate()` runs on every authenticated request. The active-status
check happens there rather than only at login, so deactivating a principal
revokes access on their next request even though their token stays valid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlmodel import Session, select

from taskhub.errors import AuthenticationError, InactiveAccountError
from taskhub.models.access_token import AccessToken
from taskhub.models.user import User
from taskhub.security.passwords import verify_password
from taskhub.security.tokens import expiry_for, hash_token, is_expired, issue_token
from taskhub.services.activity_log import ActivityLogService, describe_login, describe_logout
from taskhub.services.result import Err, Ok, Result, commit

logger = logging.getLogger(__name__)

INACTIVE_AT_LOGIN = "User account is inactive"
INACTIVE_AT_GATE = "Your account is inactive. Please contact an administrator."


@dataclass
class LoginResult:
    user: User
    access_token: str
    token_type: str = "Bearer"


@dataclass
class Principal:
    """The authenticated actor and the token row it presented."""

    user: User
    token: AccessToken


class AuthService:
    def __init__(
        self,
        db_session: Session,
        activity_log: ActivityLogService,
        token_ttl_minutes: int = 1440,
    ) -> None:
        self.db = db_session
        self.activity_log = activity_log
        self.token_ttl_minutes = token_ttl_minutes

    def login(self, email: str, password: str) -> Result[LoginResult]:
        user = self.db.exec(select(User).where(User.email == email.lower())).first()
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email)
            return Err(AuthenticationError("Invalid login credentials"))
        if not user.is_active():
            logger.warning("Login refused for inactive account %s", user.id)
            return Err(InactiveAccountError(INACTIVE_AT_LOGIN))

        plain = issue_token()
        self.db.add(
            AccessToken(
                user_id=user.id,
                token_hash=hash_token(plain),
                expires_at=expiry_for(self.token_ttl_minutes),
            )
        )
        self.activity_log.record(user.id, "user_login", describe_login(user))
        failed = commit(self.db, "user_login")
        if failed:
            return failed
        self.db.refresh(user)
        logger.info("User %s logged in", user.id)
        return Ok(LoginResult(user=user, access_token=plain))

    def authenticate(self, token: str | None) -> Result[Principal]:
        """Resolve a bearer token to an active principal."""
        if not token:
            return Err(AuthenticationError("Unauthenticated."))
        row = self.db.exec(select(AccessToken).where(AccessToken.token_hash == hash_token(token))).first()
        if row is None or is_expired(row.expires_at):
            return Err(AuthenticationError("Unauthenticated."))
        user = self.db.get(User, row.user_id)
        if user is None:
            return Err(AuthenticationError("Unauthenticated."))
        if not user.is_active():
            return Err(InactiveAccountError(INACTIVE_AT_GATE))

        row.last_used_at = datetime.now(timezone.utc)
        self.db.add(row)
        failed = commit(self.db, "authenticate")
        if failed:
            return failed
        return Ok(Principal(user=user, token=row))

    def logout(self, principal: Principal) -> Result[None]:
        """Revoke only the presented token and record the logout."""
        user = principal.user
        self.activity_log.record(user.id, "user_logout", describe_logout(user))
        self.db.delete(principal.token)
        failed = commit(self.db, "user_logout")
        if failed:
            return failed
        logger.info("User %s logged out", user.id)
        return Ok(None)
