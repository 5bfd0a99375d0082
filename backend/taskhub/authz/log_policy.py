"""Activity log read access: admin only."""

from __future__ import annotations

from taskhub.authz.decision import ALLOW, Decision, Denied
from taskhub.models.user import User


def view_logs(actor: User) -> Decision:
    if actor.is_admin():
        return ALLOW
    return Denied("Not authorized to view activity logs.")
