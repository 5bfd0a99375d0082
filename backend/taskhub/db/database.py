"""Database setup: SQLModel/SQLAlchemy engine and per-request sessions.

What goes where:
- user, task, activity_log, access_token tables (see taskhub.models)
- One Session per request (get_session); a service commits the mutation
  and its activity_log row together.
"""

from __future__ import annotations

import os

from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from taskhub.config import settings


def get_database_url() -> str:
    """Get database URL, ensuring the data directory exists."""
    url = settings.database_url
    if url.startswith("sqlite:///"):
        db_path = url.replace("sqlite:///", "")
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
    return url


@event.listens_for(Engine, "connect")
def set_sqlite_pragmas(dbapi_connection, connection_record):
    """Enable WAL and foreign keys for SQLite connections."""
    module = type(dbapi_connection).__module__
    if not module.startswith("sqlite3"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = create_engine(
    get_database_url(),
    echo=False,
    connect_args={"check_same_thread": False},  # Required for SQLite + threadpool handlers
)


def table_metadata() -> MetaData:
    """SQLModel metadata with every TaskHub table registered."""
    from taskhub.models import access_token, activity_log, task, user  # noqa: F401

    return SQLModel.metadata


def create_db_and_tables(bind: Engine | None = None) -> None:
    """Create all tables defined by SQLModel metadata."""
    table_metadata().create_all(bind or engine)


def get_session():
    """Dependency for FastAPI endpoints."""
    with Session(engine) as session:
        yield session
