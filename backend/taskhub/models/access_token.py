"""Bearer token model. Only the SHA-256 digest of a token is stored."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlmodel import Field as SQLField
from sqlmodel import SQLModel


class AccessToken(SQLModel, table=True):
    __tablename__ = "access_token"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = SQLField(foreign_key="user.id", ondelete="CASCADE", index=True)
    name: str = "auth_token"
    token_hash: str = SQLField(unique=True, index=True)
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))
    last_used_at: datetime | None = None
    expires_at: datetime | None = None
