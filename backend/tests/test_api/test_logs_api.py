"""Tests for /api/logs over HTTP."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")

from datetime import date, datetime, timedelta, timezone

from taskhub.models.activity_log import ActivityLog


def _add(session, action, description, user=None, days_ago=0):
    entry = ActivityLog(
        user_id=user.id if user else None,
        action=action,
        description=description,
        logged_at=datetime.now(timezone.utc) - timedelta(days=days_ago),
    )
    session.add(entry)
    session.commit()
    return entry


def test_logs_are_admin_only(client, users, login):
    for role in ("manager", "staff1"):
        resp = client.get("/api/logs", headers=login(users[role]))
        assert resp.status_code == 403
        assert resp.json()["message"] == "Not authorized to view activity logs."


def test_page_shape_and_newest_first(client, session, users, login):
    admin = login(users["admin"])
    _add(session, "create_task", "older", users["manager"], days_ago=2)
    _add(session, "update_task", "newer", users["manager"], days_ago=1)

    resp = client.get("/api/logs", headers=admin)
    assert resp.status_code == 200
    page = resp.json()["data"]
    assert set(page) == {"data", "current_page", "per_page", "total", "last_page"}
    assert page["current_page"] == 1
    assert page["per_page"] == 15
    # the admin's own login entry is the newest
    assert [e["description"] for e in page["data"]][1:] == ["newer", "older"]
    assert page["data"][1]["user"] == {
        "id": users["manager"].id,
        "name": "Manager User",
        "email": "manager@example.com",
        "role": "manager",
    }


def test_filters(client, session, users, login):
    admin = login(users["admin"])
    _add(session, "create_task", "by manager", users["manager"], days_ago=3)
    _add(session, "create_task", "by staff", users["staff1"])
    _add(session, "task_overdue", "Task overdue: t-1")

    page = client.get("/api/logs", params={"action": "create_task"}, headers=admin).json()["data"]
    assert {e["description"] for e in page["data"]} == {"by manager", "by staff"}

    page = client.get("/api/logs", params={"user_id": users["staff1"].id}, headers=admin).json()["data"]
    assert [e["description"] for e in page["data"]] == ["by staff"]

    since = (date.today() - timedelta(days=1)).isoformat()
    page = client.get("/api/logs", params={"from_date": since, "action": "create_task"}, headers=admin).json()["data"]
    assert [e["description"] for e in page["data"]] == ["by staff"]

    page = client.get("/api/logs", params={"action": "task_overdue"}, headers=admin).json()["data"]
    assert page["data"][0]["user_id"] is None
    assert page["data"][0]["user"] is None


def test_pagination(client, session, users, login):
    admin = login(users["admin"])
    for i in range(20):
        _add(session, "update_task", f"entry {i}", users["manager"], days_ago=1)

    page2 = client.get("/api/logs", params={"page": 2}, headers=admin).json()["data"]
    assert page2["total"] == 21
    assert page2["last_page"] == 2
    assert len(page2["data"]) == 6

    assert client.get("/api/logs", params={"page": 0}, headers=admin).status_code == 422


def test_show_log(client, session, users, login):
    admin = login(users["admin"])
    entry = _add(session, "delete_user", "User deleted: Gone", users["admin"])

    resp = client.get(f"/api/logs/{entry.id}", headers=admin)
    assert resp.status_code == 200
    assert resp.json()["data"]["description"] == "User deleted: Gone"

    resp = client.get("/api/logs/does-not-exist", headers=admin)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Activity log not found"


def test_date_filters_over_http(client, session, users, login):
    admin = login(users["admin"])
    _add(session, "create_task", "last week", users["manager"], days_ago=7)
    today = datetime.now(timezone.utc).date().isoformat()  # days are UTC days

    resp = client.get("/api/logs", params={"from_date": today}, headers=admin)
    assert resp.status_code == 200
    assert "last week" not in [e["description"] for e in resp.json()["data"]["data"]]

    resp = client.get("/api/logs", params={"to_date": today, "action": "create_task"}, headers=admin)
    assert resp.status_code == 200
    assert [e["description"] for e in resp.json()["data"]["data"]] == ["last week"]

    resp = client.get("/api/logs", params={"from_date": today, "to_date": today}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["data"]["total"] == 1  # the admin's login
