"""FastAPI dependencies: settings, per-request services and the Identity & Status Gate.

Services are built per request around the request's Session; FastAPI caches
each dependency within a request, so every service shares that one session.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from taskhub.api.errors import unwrap
from taskhub.config import Settings, settings
from taskhub.db.database import get_session
from taskhub.models.user import User
from taskhub.services.activity_log import ActivityLogService
from taskhub.services.auth_service import AuthService, Principal
from taskhub.services.task_service import TaskService
from taskhub.services.user_service import UserService

_bearer = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return settings


def get_activity_log(
    session: Session = Depends(get_session),
    cfg: Settings = Depends(get_settings),
) -> ActivityLogService:
    return ActivityLogService(session, per_page=cfg.logs_per_page)


def get_auth_service(
    session: Session = Depends(get_session),
    activity_log: ActivityLogService = Depends(get_activity_log),
    cfg: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(session, activity_log, token_ttl_minutes=cfg.token_ttl_minutes)


def get_task_service(
    session: Session = Depends(get_session),
    activity_log: ActivityLogService = Depends(get_activity_log),
) -> TaskService:
    return TaskService(session, activity_log)


def get_user_service(
    session: Session = Depends(get_session),
    activity_log: ActivityLogService = Depends(get_activity_log),
    cfg: Settings = Depends(get_settings),
) -> UserService:
    return UserService(session, activity_log, bcrypt_rounds=cfg.bcrypt_rounds)


def get_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    auth: AuthService = Depends(get_auth_service),
) -> Principal:
    """Resolve the bearer token; 401 when unknown or expired, 403 when inactive."""
    token = credentials.credentials if credentials else None
    principal = unwrap(auth.authenticate(token))
    request.state.user_id = principal.user.id
    return principal


def get_current_user(principal: Principal = Depends(get_principal)) -> User:
    return principal.user
