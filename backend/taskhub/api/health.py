"""Health check endpoint.

Checks: database connectivity and the overdue scheduler. No authentication.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import text

from taskhub.db.database import engine

router = APIRouter()

VERSION = "1.0.0"


class HealthStatus(BaseModel):
    status: str  # "healthy" | "degraded" | "unhealthy"
    version: str
    checks: dict[str, dict]
    dependencies: dict[str, str]  # Simplified view for frontend
    timestamp: datetime


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request) -> HealthStatus:
    checks: dict[str, dict] = {}
    overall_healthy = True
    has_warning = False

    # 1. Database
    try:
        bind = getattr(request.app.state, "db_engine", None) or engine
        with bind.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            checks["database"] = {"status": "ok", "detail": f"dialect={bind.dialect.name}"}
    except Exception as e:
        checks["database"] = {"status": "error", "detail": str(e)}
        overall_healthy = False

    # 2. Overdue scheduler
    scheduler = getattr(request.app.state, "overdue_scheduler", None)
    if scheduler is None or not scheduler.enabled:
        checks["overdue_scheduler"] = {"status": "disabled", "detail": "set OVERDUE_SWEEP_ENABLED=true to enable"}
    elif scheduler.is_running:
        checks["overdue_scheduler"] = {"status": "ok", "detail": scheduler.get_status()}
    else:
        checks["overdue_scheduler"] = {"status": "warning", "detail": "enabled but not running"}
        has_warning = True

    dependencies = {name: check["status"] for name, check in checks.items()}

    if overall_healthy:
        status = "degraded" if has_warning else "healthy"
    else:
        status = "unhealthy"

    return HealthStatus(
        status=status,
        version=VERSION,
        checks=checks,
        dependencies=dependencies,
        timestamp=datetime.now(timezone.utc),
    )
