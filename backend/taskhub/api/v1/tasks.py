"""Task endpoints. Visibility and write rights follow the caller's role.

GET    /api/tasks         - role-filtered list
GET    /api/tasks/export  - CSV of all tasks (admin only)
GET    /api/tasks/{id}    - single task (404 absent, 403 not visible)
POST   /api/tasks         - create; the assignee is checked against the caller's role
PUT    /api/tasks/{id}    - partial update
DELETE /api/tasks/{id}    - admin or creator only
"""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, Field

from taskhub.api.deps import get_current_user, get_task_service
from taskhub.api.envelope import Envelope, MessageEnvelope
from taskhub.api.errors import unwrap
from taskhub.models.task import Task, TaskStatus
from taskhub.models.user import User, UserSummary
from taskhub.services.task_service import TaskService

router = APIRouter(prefix="/api", tags=["tasks"])


# === Request / Response Models ===


class CreateTaskRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str
    status: TaskStatus
    due_date: date
    assigned_to: str = Field(min_length=1)


class UpdateTaskRequest(BaseModel):
    """All fields optional; only the fields sent are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    due_date: date | None = None
    assigned_to: str | None = Field(default=None, min_length=1)


class TaskResponse(BaseModel):
    id: str
    title: str
    description: str
    status: str
    due_date: date
    assigned_to: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    is_overdue: bool
    assignee: UserSummary | None = None
    creator: UserSummary | None = None


def _to_response(task: Task, principals: dict[str, User]) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        due_date=task.due_date,
        assigned_to=task.assigned_to,
        created_by=task.created_by,
        created_at=task.created_at,
        updated_at=task.updated_at,
        is_overdue=task.is_overdue(),
        assignee=UserSummary.of(principals.get(task.assigned_to)),
        creator=UserSummary.of(principals.get(task.created_by)),
    )


def _single(tasks: TaskService, task: Task) -> TaskResponse:
    return _to_response(task, tasks.principals_for([task]))


# === Endpoints ===


@router.get("/tasks", response_model=Envelope[list[TaskResponse]])
def list_tasks(
    actor: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> Envelope[list[TaskResponse]]:
    rows = unwrap(tasks.list_tasks(actor))
    principals = tasks.principals_for(rows)
    return Envelope[list[TaskResponse]](data=[_to_response(t, principals) for t in rows])


# Registered before /tasks/{task_id} so "export" is not taken as an id.
@router.get("/tasks/export")
def export_tasks(
    actor: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> Response:
    body = unwrap(tasks.export_tasks_csv(actor))
    filename = f"tasks-export-{date.today().isoformat()}.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/tasks/{task_id}", response_model=Envelope[TaskResponse])
def get_task(
    task_id: str,
    actor: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> Envelope[TaskResponse]:
    task = unwrap(tasks.get_task(actor, task_id))
    return Envelope[TaskResponse](data=_single(tasks, task))


@router.post("/tasks", response_model=Envelope[TaskResponse], status_code=201)
def create_task(
    req: CreateTaskRequest,
    actor: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> Envelope[TaskResponse]:
    task = unwrap(
        tasks.create_task(
            actor,
            title=req.title,
            description=req.description,
            status=req.status,
            due_date=req.due_date,
            assigned_to=req.assigned_to,
        )
    )
    return Envelope[TaskResponse](message="Task created successfully", data=_single(tasks, task))


@router.put("/tasks/{task_id}", response_model=Envelope[TaskResponse])
def update_task(
    task_id: str,
    req: UpdateTaskRequest,
    actor: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> Envelope[TaskResponse]:
    task = unwrap(tasks.update_task(actor, task_id, req.model_dump(exclude_unset=True)))
    return Envelope[TaskResponse](message="Task updated successfully", data=_single(tasks, task))


@router.delete("/tasks/{task_id}", response_model=MessageEnvelope)
def delete_task(
    task_id: str,
    actor: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> MessageEnvelope:
    unwrap(tasks.delete_task(actor, task_id))
    return MessageEnvelope(message="Task deleted successfully")
