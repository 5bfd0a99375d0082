"""Shared test fixtures for TaskHub backend tests."""

import os
import sys

import pytest

# Ensure backend is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")
os.environ.setdefault("OVERDUE_SWEEP_ENABLED", "false")

from datetime import date, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from taskhub.api.deps import get_settings
from taskhub.config import Settings
from taskhub.db.database import create_db_and_tables, get_session
from taskhub.models.task import Task
from taskhub.models.user import User
from taskhub.security.passwords import hash_password

TEST_PASSWORD = "password"
FAST_ROUNDS = 4  # bcrypt minimum

# Hashed once; every fixture user shares it
_PASSWORD_HASH = hash_password(TEST_PASSWORD, rounds=FAST_ROUNDS)


@pytest.fixture
def engine():
    """Fresh in-memory database per test; one shared connection."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def make_user(session):
    """Factory: make_user("staff", name=..., status=False) -> persisted User."""
    counter = {"n": 0}

    def _make(role: str = "staff", name: str | None = None, status: bool = True, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            password_hash=_PASSWORD_HASH,
            role=role,
            status=status,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def users(make_user):
    """The demo cast: admin, manager, two staff and an inactive staff member."""
    return {
        "admin": make_user("admin", name="Admin User", email="admin@example.com"),
        "manager": make_user("manager", name="Manager User", email="manager@example.com"),
        "staff1": make_user("staff", name="Staff User 1", email="staff1@example.com"),
        "staff2": make_user("staff", name="Staff User 2", email="staff2@example.com"),
        "inactive": make_user("staff", name="Inactive Staff User", email="inactive@example.com", status=False),
    }


@pytest.fixture
def make_task(session):
    """Factory that inserts a task directly, bypassing the service."""

    def _make(creator: User, assignee: User, title: str = "Task", status: str = "pending", due_in: int = 3) -> Task:
        task = Task(
            title=title,
            description=f"{title} description",
            status=status,
            due_date=date.today() + timedelta(days=due_in),
            assigned_to=assignee.id,
            created_by=creator.id,
        )
        session.add(task)
        session.commit()
        session.refresh(task)
        return task

    return _make


@pytest.fixture
def test_settings():
    return Settings(bcrypt_rounds=FAST_ROUNDS, token_ttl_minutes=60, overdue_sweep_enabled=False)


@pytest.fixture
def client(session, test_settings):
    """TestClient on the full app, bound to the per-test session. Lifespan is not run."""
    from taskhub.main import app

    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """login(user) -> Authorization headers for that user."""

    def _login(user: User) -> dict:
        resp = client.post("/api/login", json={"email": user.email, "password": TEST_PASSWORD})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}

    return _login
