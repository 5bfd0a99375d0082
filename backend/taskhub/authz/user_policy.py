"""User-management authorization rules. Reads are admin/manager, writes admin."""

from __future__ import annotations

from taskhub.authz.decision import ALLOW, Decision, Denied
from taskhub.models.user import User


def view_users(actor: User) -> Decision:
    """All-or-nothing: staff get no rows at all."""
    if actor.is_admin() or actor.is_manager():
        return ALLOW
    return Denied("Not authorized to view users.")


def create_user(actor: User) -> Decision:
    if actor.is_admin():
        return ALLOW
    return Denied("Not authorized to create users.")


def update_user(actor: User, target: User) -> Decision:
    if actor.is_admin():
        return ALLOW
    return Denied("Not authorized to update this user.")


def delete_user(actor: User, target: User) -> Decision:
    # Self-deletion is refused before the role check, admins included.
    if actor.id == target.id:
        return Denied("Cannot delete your own account.")
    if actor.is_admin():
        return ALLOW
    return Denied("Not authorized to delete this user.")
