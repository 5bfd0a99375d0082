"""Tagged authorization decisions returned by the policy functions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union


@dataclass(frozen=True)
class Allowed:
    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    reason: str

    def __bool__(self) -> bool:
        return False


Decision = Union[Allowed, Denied]

ALLOW = Allowed()

# Resolves a principal id to its role, or None when no such principal exists.
RoleLookup = Callable[[str], Optional[str]]
