"""Result types returned by service methods, plus the shared commit helper."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from taskhub.errors import PersistenceError, ServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: ServiceError


Result = Union[Ok[T], Err]


def commit(session: Session, operation: str) -> Err | None:
    """Commit the session; on store failure roll back and return an Err.

    The mutation and its activity_log row share the session, so a failed
    commit leaves neither behind.
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Commit failed during %s: %s", operation, e, exc_info=True)
        return Err(PersistenceError("A storage error occurred."))
    return None
