# src/subchain/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task model and the console.

The core depends on Protocols instead of concrete implementations.
This keeps the clock and the role storage swappable and makes testing easier.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..roles.role import Role


class Clock(Protocol):
    """Source of "now" for status transitions and activity timers."""

    def now(self) -> datetime: ...


class RoleRepo(Protocol):
    def save_role(self, role: Role) -> None: ...
    def load_role(self, role_id: str) -> Role: ...
    def list_roles(self) -> list[tuple[str, str]]: ...
    def delete_role(self, role_id: str) -> bool: ...
    def count_roles(self) -> int: ...
