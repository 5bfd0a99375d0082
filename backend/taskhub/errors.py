"""Service error taxonomy.

Services return these inside `Err` rather than raising them; the HTTP layer
maps each one to its status code and the JSON error envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass(frozen=True)
class ServiceError:
    """Base error carried by a failed service result."""

    message: str
    status_code: ClassVar[int] = 500


@dataclass(frozen=True)
class ValidationError(ServiceError):
    """Malformed or missing input. Never written to the audit trail."""

    errors: dict[str, list[str]] = field(default_factory=dict)
    status_code: ClassVar[int] = 422


@dataclass(frozen=True)
class AuthenticationError(ServiceError):
    """Missing, unknown or expired credential."""

    status_code: ClassVar[int] = 401


@dataclass(frozen=True)
class InactiveAccountError(ServiceError):
    """Valid credential for a deactivated account."""

    status_code: ClassVar[int] = 403


@dataclass(frozen=True)
class AuthorizationError(ServiceError):
    """Authenticated and active, but the policy denied the action."""

    status_code: ClassVar[int] = 403


@dataclass(frozen=True)
class NotFoundError(ServiceError):
    status_code: ClassVar[int] = 404


@dataclass(frozen=True)
class IntegrityError(ServiceError):
    """A referenced entity (e.g. the assignee) is missing or unusable."""

    errors: dict[str, list[str]] = field(default_factory=dict)
    status_code: ClassVar[int] = 422


@dataclass(frozen=True)
class PersistenceError(ServiceError):
    """The store rejected or failed the write; nothing was persisted."""

    status_code: ClassVar[int] = 500
