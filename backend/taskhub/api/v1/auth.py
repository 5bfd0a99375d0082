"""Authentication endpoints.

POST /api/login - exchange email/password for a bearer token
POST /api/logout - revoke the presented token
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from taskhub.api.deps import get_auth_service, get_principal
from taskhub.api.envelope import Envelope, MessageEnvelope
from taskhub.api.errors import unwrap
from taskhub.models.user import UserSummary
from taskhub.services.auth_service import AuthService, Principal

router = APIRouter(prefix="/api", tags=["auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginData(BaseModel):
    user: UserSummary
    access_token: str
    token_type: str = "Bearer"


@router.post("/login", response_model=Envelope[LoginData])
def login(req: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> Envelope[LoginData]:
    """Issue a bearer token. Inactive accounts get 403 and no token."""
    result = unwrap(auth.login(req.email, req.password))
    return Envelope[LoginData](
        message="Login successful",
        data=LoginData(
            user=UserSummary.of(result.user),
            access_token=result.access_token,
            token_type=result.token_type,
        ),
    )


@router.post("/logout", response_model=MessageEnvelope)
def logout(
    principal: Principal = Depends(get_principal),
    auth: AuthService = Depends(get_auth_service),
) -> MessageEnvelope:
    unwrap(auth.logout(principal))
    return MessageEnvelope(message="Successfully logged out")
