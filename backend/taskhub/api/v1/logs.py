"""Activity log endpoints (admin only).

GET /api/logs       - paginated, newest first; filters: from_date, to_date, action, user_id
GET /api/logs/{id}  - single entry
"""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from taskhub.api.deps import get_activity_log, get_current_user
from taskhub.api.envelope import Envelope
from taskhub.api.errors import unwrap
from taskhub.models.activity_log import ActivityLog
from taskhub.models.user import User, UserSummary
from taskhub.services.activity_log import ActivityLogService, LogFilters

router = APIRouter(prefix="/api", tags=["logs"])


class LogEntryResponse(BaseModel):
    id: str
    user_id: str | None
    action: str
    description: str
    logged_at: datetime
    created_at: datetime
    user: UserSummary | None = None


class LogPageResponse(BaseModel):
    data: list[LogEntryResponse]
    current_page: int
    per_page: int
    total: int
    last_page: int


def _to_response(entry: ActivityLog, user: User | None) -> LogEntryResponse:
    return LogEntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        action=entry.action,
        description=entry.description,
        logged_at=entry.logged_at,
        created_at=entry.created_at,
        user=UserSummary.of(user),
    )


@router.get("/logs", response_model=Envelope[LogPageResponse])
def list_logs(
    from_date: date | None = Query(default=None),
    to_date: date | None = Query(default=None),
    action: str | None = Query(default=None, max_length=64),
    user_id: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    actor: User = Depends(get_current_user),
    audit: ActivityLogService = Depends(get_activity_log),
) -> Envelope[LogPageResponse]:
    filters = LogFilters(from_date=from_date, to_date=to_date, action=action, user_id=user_id)
    result = unwrap(audit.list_logs(actor, filters, page=page))
    return Envelope[LogPageResponse](
        data=LogPageResponse(
            data=[_to_response(e, result.users.get(e.user_id) if e.user_id else None) for e in result.entries],
            current_page=result.current_page,
            per_page=result.per_page,
            total=result.total,
            last_page=result.last_page,
        )
    )


@router.get("/logs/{log_id}", response_model=Envelope[LogEntryResponse])
def get_log(
    log_id: str,
    actor: User = Depends(get_current_user),
    audit: ActivityLogService = Depends(get_activity_log),
) -> Envelope[LogEntryResponse]:
    entry, user = unwrap(audit.get_log(actor, log_id))
    return Envelope[LogEntryResponse](data=_to_response(entry, user))
