"""End-to-end task rules over HTTP: role isolation, assignment and delete restrictions, export."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")

from datetime import date, timedelta


def _payload(assigned_to, **overrides):
    return {
        "title": "Write onboarding guide",
        "description": "Cover accounts and tooling",
        "status": "pending",
        "due_date": (date.today() + timedelta(days=7)).isoformat(),
        "assigned_to": assigned_to,
        **overrides,
    }


def _create(client, headers, assigned_to, **overrides):
    return client.post("/api/tasks", json=_payload(assigned_to, **overrides), headers=headers)


def _ids(client, headers):
    resp = client.get("/api/tasks", headers=headers)
    assert resp.status_code == 200
    return {t["id"] for t in resp.json()["data"]}


def test_role_isolation(client, users, login):
    admin, manager = login(users["admin"]), login(users["manager"])
    staff1, staff2 = login(users["staff1"]), login(users["staff2"])

    t_admin = _create(client, admin, users["manager"].id, title="Admin to manager").json()["data"]["id"]
    t_s1 = _create(client, manager, users["staff1"].id, title="Manager to staff 1").json()["data"]["id"]
    t_s2 = _create(client, manager, users["staff2"].id, title="Manager to staff 2").json()["data"]["id"]

    assert _ids(client, admin) == {t_admin, t_s1, t_s2}
    assert _ids(client, manager) == {t_s1, t_s2}
    assert _ids(client, staff1) == {t_s1}
    assert _ids(client, staff2) == {t_s2}


def test_list_items_embed_assignee_and_creator(client, users, login):
    manager = login(users["manager"])
    _create(client, manager, users["staff1"].id)
    item = client.get("/api/tasks", headers=manager).json()["data"][0]
    assert item["assignee"]["name"] == "Staff User 1"
    assert item["creator"]["name"] == "Manager User"
    assert item["is_overdue"] is False
    assert "password_hash" not in item["assignee"]


def test_assignment_restriction(client, users, login):
    manager = login(users["manager"])
    resp = _create(client, manager, users["admin"].id)
    assert resp.status_code == 403
    assert resp.json()["message"] == "You are not authorized to assign tasks to this user."
    assert _create(client, manager, users["staff1"].id).status_code == 201

    staff1 = login(users["staff1"])
    assert _create(client, staff1, users["staff2"].id).status_code == 403
    resp = _create(client, staff1, users["staff1"].id)
    assert resp.status_code == 201
    assert resp.json()["message"] == "Task created successfully"


def test_delete_restriction(client, users, login):
    manager, staff1 = login(users["manager"]), login(users["staff1"])
    by_manager = _create(client, manager, users["staff1"].id).json()["data"]["id"]
    by_staff = _create(client, staff1, users["staff1"].id).json()["data"]["id"]

    resp = client.delete(f"/api/tasks/{by_manager}", headers=staff1)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to delete this task."

    resp = client.delete(f"/api/tasks/{by_staff}", headers=staff1)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Task deleted successfully"}


def test_show_task_404_and_403(client, users, login):
    manager, staff2 = login(users["manager"]), login(users["staff2"])
    task_id = _create(client, manager, users["staff1"].id).json()["data"]["id"]

    assert client.get("/api/tasks/missing", headers=manager).status_code == 404
    resp = client.get(f"/api/tasks/{task_id}", headers=staff2)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to view this task."
    assert client.get(f"/api/tasks/{task_id}", headers=manager).json()["data"]["id"] == task_id


def test_create_validation_errors(client, users, login):
    admin = login(users["admin"])
    yesterday = (date.today() - timedelta(days=1)).isoformat()

    resp = _create(client, admin, users["staff1"].id, due_date=yesterday)
    assert resp.status_code == 422
    assert "due_date" in resp.json()["errors"]

    resp = _create(client, admin, users["staff1"].id, status="blocked")
    assert resp.status_code == 422
    assert resp.json()["message"] == "Validation Error"
    assert "status" in resp.json()["errors"]

    resp = client.post("/api/tasks", json={"title": "Only a title"}, headers=admin)
    assert resp.status_code == 422
    assert {"description", "status", "due_date", "assigned_to"} <= set(resp.json()["errors"])


def test_create_with_nonexistent_assignee(client, users, login):
    resp = _create(client, login(users["staff1"]), "no-such-user")
    assert resp.status_code == 422
    assert resp.json()["errors"] == {"assigned_to": ["The assigned user does not exist."]}


def test_partial_update(client, users, login):
    manager, staff1 = login(users["manager"]), login(users["staff1"])
    task_id = _create(client, manager, users["staff1"].id).json()["data"]["id"]

    resp = client.put(f"/api/tasks/{task_id}", json={"status": "done"}, headers=staff1)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "done"
    assert data["title"] == "Write onboarding guide"

    resp = client.put(f"/api/tasks/{task_id}", json={"assigned_to": users["staff2"].id}, headers=staff1)
    assert resp.status_code == 403


def test_export_admin_only(client, users, login):
    manager = login(users["manager"])
    _create(client, manager, users["staff1"].id, title="Quarterly, numbers")
    resp = client.get("/api/tasks/export", headers=manager)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to export tasks."

    resp = client.get("/api/tasks/export", headers=login(users["admin"]))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"] == (
        f'attachment; filename="tasks-export-{date.today().isoformat()}.csv"'
    )
    lines = resp.text.splitlines()
    assert lines[0] == "ID,Title,Description,Status,Due Date,Assigned To,Created By,Created At,Updated At"
    assert '"Quarterly, numbers"' in lines[1]


def test_every_mutation_logged_once(client, users, login):
    admin = login(users["admin"])
    task_id = _create(client, admin, users["staff1"].id, title="Audit me").json()["data"]["id"]
    client.put(f"/api/tasks/{task_id}", json={"title": "Audit me twice"}, headers=admin)
    client.delete(f"/api/tasks/{task_id}", headers=admin)

    page = client.get("/api/logs", headers=admin).json()["data"]
    task_entries = [e for e in page["data"] if e["action"].endswith("_task")]
    assert sorted(e["action"] for e in task_entries) == ["create_task", "delete_task", "update_task"]
    assert any("Audit me" in e["description"] and users["staff1"].id in e["description"] for e in task_entries)


def test_update_with_explicit_nulls_rejected(client, users, login):
    admin = login(users["admin"])
    task_id = _create(client, admin, users["staff1"].id).json()["data"]["id"]

    resp = client.put(
        f"/api/tasks/{task_id}",
        json={"title": None, "status": None, "description": None},
        headers=admin,
    )
    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"title", "status", "description"}

    page = client.get("/api/logs", params={"action": "update_task"}, headers=admin).json()["data"]
    assert page["total"] == 0
    assert client.get(f"/api/tasks/{task_id}", headers=admin).json()["data"]["title"] == "Write onboarding guide"
