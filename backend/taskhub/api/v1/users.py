"""User management endpoints.

GET    /api/users       - list (admin, manager)
GET    /api/users/{id}  - single user (admin, manager)
POST   /api/users       - create (admin)
PUT    /api/users/{id}  - partial update (admin)
DELETE /api/users/{id}  - delete (admin, never self)
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from taskhub.api.deps import get_current_user, get_user_service
from taskhub.api.envelope import Envelope, MessageEnvelope
from taskhub.api.errors import unwrap
from taskhub.models.user import Role, User
from taskhub.services.user_service import UserService

router = APIRouter(prefix="/api", tags=["users"])


# === Request / Response Models ===


class CreateUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8)
    role: Role
    status: bool = True


class UpdateUserRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)
    role: Role | None = None
    status: bool | None = None


class UserResponse(BaseModel):
    """Never carries the password hash."""

    id: str
    name: str
    email: str
    role: str
    status: bool
    created_at: datetime
    updated_at: datetime


def _to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        status=user.status,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


# === Endpoints ===


@router.get("/users", response_model=Envelope[list[UserResponse]])
def list_users(
    actor: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Envelope[list[UserResponse]]:
    rows = unwrap(users.list_users(actor))
    return Envelope[list[UserResponse]](data=[_to_response(u) for u in rows])


@router.get("/users/{user_id}", response_model=Envelope[UserResponse])
def get_user(
    user_id: str,
    actor: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Envelope[UserResponse]:
    user = unwrap(users.get_user(actor, user_id))
    return Envelope[UserResponse](data=_to_response(user))


@router.post("/users", response_model=Envelope[UserResponse], status_code=201)
def create_user(
    req: CreateUserRequest,
    actor: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Envelope[UserResponse]:
    user = unwrap(
        users.create_user(
            actor,
            name=req.name,
            email=req.email,
            password=req.password,
            role=req.role,
            status=req.status,
        )
    )
    return Envelope[UserResponse](message="User created successfully", data=_to_response(user))


@router.put("/users/{user_id}", response_model=Envelope[UserResponse])
def update_user(
    user_id: str,
    req: UpdateUserRequest,
    actor: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Envelope[UserResponse]:
    user = unwrap(users.update_user(actor, user_id, req.model_dump(exclude_unset=True)))
    return Envelope[UserResponse](message="User updated successfully", data=_to_response(user))


@router.delete("/users/{user_id}", response_model=MessageEnvelope)
def delete_user(
    user_id: str,
    actor: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> MessageEnvelope:
    unwrap(users.delete_user(actor, user_id))
    return MessageEnvelope(message="User deleted successfully")
