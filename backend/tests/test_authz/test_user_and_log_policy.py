"""Tests for user-management and activity-log authorization rules."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")

from taskhub.authz import log_policy, user_policy
from taskhub.models.user import User

ADMIN = User(id="u-admin", name="Admin", email="a@x.io", role="admin")
OTHER_ADMIN = User(id="u-admin-2", name="Admin 2", email="a2@x.io", role="admin")
MANAGER = User(id="u-manager", name="Manager", email="m@x.io", role="manager")
STAFF = User(id="u-staff", name="Staff", email="s@x.io", role="staff")


def test_view_users_admin_and_manager_only():
    assert user_policy.view_users(ADMIN)
    assert user_policy.view_users(MANAGER)
    decision = user_policy.view_users(STAFF)
    assert not decision
    assert decision.reason == "Not authorized to view users."


def test_user_writes_are_admin_only():
    assert user_policy.create_user(ADMIN)
    assert not user_policy.create_user(MANAGER)
    assert not user_policy.create_user(STAFF)
    assert user_policy.update_user(ADMIN, STAFF)
    assert not user_policy.update_user(MANAGER, STAFF)
    assert user_policy.delete_user(ADMIN, STAFF)
    assert not user_policy.delete_user(MANAGER, STAFF)


def test_admin_may_delete_another_admin():
    assert user_policy.delete_user(ADMIN, OTHER_ADMIN)


def test_self_deletion_denied_even_for_admin():
    decision = user_policy.delete_user(ADMIN, ADMIN)
    assert not decision
    assert decision.reason == "Cannot delete your own account."


def test_self_deletion_reason_wins_over_role_reason():
    assert user_policy.delete_user(STAFF, STAFF).reason == "Cannot delete your own account."


def test_logs_admin_only():
    assert log_policy.view_logs(ADMIN)
    assert not log_policy.view_logs(MANAGER)
    assert log_policy.view_logs(STAFF).reason == "Not authorized to view activity logs."
    print("  PASS: log policy")
