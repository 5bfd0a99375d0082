"""Tests for /api/login, /api/logout and the status gate over HTTP."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")


def test_login_success_shape(client, users):
    resp = client.post("/api/login", json={"email": "admin@example.com", "password": "password"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    assert body["data"]["token_type"] == "Bearer"
    assert body["data"]["access_token"]
    assert body["data"]["user"] == {
        "id": users["admin"].id,
        "name": "Admin User",
        "email": "admin@example.com",
        "role": "admin",
    }


def test_login_wrong_password(client, users):
    resp = client.post("/api/login", json={"email": "admin@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid login credentials"}


def test_login_inactive_account(client, users):
    resp = client.post("/api/login", json={"email": "inactive@example.com", "password": "password"})
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "message": "User account is inactive"}


def test_login_validation_error_envelope(client, users):
    resp = client.post("/api/login", json={"email": "not-an-email"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Validation Error"
    assert "email" in body["errors"]
    assert "password" in body["errors"]


def test_missing_or_bad_token_is_401(client, users):
    assert client.get("/api/tasks").status_code == 401
    resp = client.get("/api/tasks", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Unauthenticated."}


def test_deactivated_user_blocked_with_unexpired_token(client, users, login):
    headers = login(users["staff1"])
    assert client.get("/api/tasks", headers=headers).status_code == 200

    admin_headers = login(users["admin"])
    resp = client.put(f"/api/users/{users['staff1'].id}", json={"status": False}, headers=admin_headers)
    assert resp.status_code == 200

    resp = client.get("/api/tasks", headers=headers)
    assert resp.status_code == 403
    assert resp.json() == {
        "success": False,
        "message": "Your account is inactive. Please contact an administrator.",
    }
    print("  PASS: inactive gate")


def test_logout_revokes_token_and_logs(client, users, login):
    headers = login(users["manager"])
    resp = client.post("/api/logout", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert client.get("/api/tasks", headers=headers).status_code == 401

    admin_headers = login(users["admin"])
    logs = client.get("/api/logs", params={"action": "user_logout"}, headers=admin_headers).json()["data"]
    assert [e["description"] for e in logs["data"]] == ["User Manager User logged out"]


def test_response_carries_request_id(client, users):
    resp = client.post("/api/login", json={"email": "admin@example.com", "password": "password"},
                       headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
