"""TaskHub FastAPI Application.

Entry point for the backend server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskhub.api.errors import register_error_handlers
from taskhub.api.health import VERSION
from taskhub.api.health import router as health_router
from taskhub.api.v1.auth import router as auth_router
from taskhub.api.v1.logs import router as logs_router
from taskhub.api.v1.tasks import router as tasks_router
from taskhub.api.v1.users import router as users_router
from taskhub.config import settings
from taskhub.db.database import create_db_and_tables, engine
from taskhub.db.seed import seed_demo_data
from taskhub.middleware.request_logging import RequestLoggingMiddleware
from taskhub.services.overdue import OverdueScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    create_db_and_tables()
    app.state.db_engine = engine

    if settings.seed_demo_data:
        seed_demo_data(engine, bcrypt_rounds=settings.bcrypt_rounds)

    overdue_scheduler = OverdueScheduler(
        bind=engine,
        interval_minutes=settings.overdue_sweep_interval_minutes,
        enabled=settings.overdue_sweep_enabled,
    )
    app.state.overdue_scheduler = overdue_scheduler
    await overdue_scheduler.start()

    yield

    overdue_scheduler.stop()


app = FastAPI(
    title="TaskHub",
    description="Role-based task management with an audit trail",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)
app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

# Routes
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(tasks_router)
app.include_router(users_router)
app.include_router(logs_router)


@app.get("/")
async def root():
    return {"name": "TaskHub", "version": VERSION, "status": "running"}
