"""Success envelope shared by the JSON endpoints: {"success": true, "message"?, "data"?}."""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str
