"""Task authorization rules.

Pure functions of (actor, target) returning a Decision. Checks run in the
order written and the first match wins. Nothing here touches the store: the
role of a task's assignee is resolved through the injected `role_of` lookup.

Matrix:

    action      admin   manager                                  staff
    view        yes     creator, or assignee is staff            assignee
    create      yes     yes (gated by assign)                    yes (gated by assign)
    assign      anyone  staff principals only                    self only
    update      yes     creator, or assignee is staff            assignee
    delete      yes     creator                                  creator
    export      yes     no                                       no

The list filter in TaskService.visible_tasks_clause mirrors `view_task`.
"""

from __future__ import annotations

from taskhub.authz.decision import ALLOW, Decision, Denied, RoleLookup
from taskhub.models.task import Task
from taskhub.models.user import User


def view_task_list(actor: User) -> Decision:
    """Listing is open to every role; the caller filters the rows."""
    return ALLOW


def view_task(actor: User, task: Task, role_of: RoleLookup) -> Decision:
    if actor.is_admin():
        return ALLOW
    if actor.is_manager():
        if task.created_by == actor.id:
            return ALLOW
        if role_of(task.assigned_to) == "staff":
            return ALLOW
        return Denied("Not authorized to view this task.")
    if actor.is_staff():
        if task.assigned_to == actor.id:
            return ALLOW
        return Denied("Not authorized to view this task.")
    return Denied("Not authorized to view this task.")


def create_task(actor: User) -> Decision:
    """Creation is structurally open; `assign_task` is the real gate."""
    return ALLOW


def assign_task(actor: User, assignee: User) -> Decision:
    if actor.is_admin():
        return ALLOW
    if actor.is_manager():
        if assignee.is_staff():
            return ALLOW
        return Denied("You are not authorized to assign tasks to this user.")
    if actor.is_staff():
        if assignee.id == actor.id:
            return ALLOW
        return Denied("You are not authorized to assign tasks to this user.")
    return Denied("You are not authorized to assign tasks to this user.")


def update_task(actor: User, task: Task, role_of: RoleLookup) -> Decision:
    """Authorize changing a task's fields.

    A change of assignee additionally needs `assign_task` against the new
    assignee; callers apply both checks.
    """
    if actor.is_admin():
        return ALLOW
    if actor.is_manager():
        if task.created_by == actor.id:
            return ALLOW
        if role_of(task.assigned_to) == "staff":
            return ALLOW
        return Denied("Not authorized to update this task.")
    if actor.is_staff() and task.assigned_to == actor.id:
        return ALLOW
    return Denied("Not authorized to update this task.")


def delete_task(actor: User, task: Task) -> Decision:
    """Ownership only; being the assignee grants nothing here."""
    if actor.is_admin():
        return ALLOW
    if task.created_by == actor.id:
        return ALLOW
    return Denied("Not authorized to delete this task.")


def export_tasks(actor: User) -> Decision:
    if actor.is_admin():
        return ALLOW
    return Denied("Not authorized to export tasks.")
