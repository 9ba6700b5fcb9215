# src/subchain/roles/role.py

from __future__ import annotations

import logging
import uuid

from ..core.ports import Clock
from ..tasks.task import Task
from ..tasks.task_codec import dumps_task, loads_task

logger = logging.getLogger(__name__)

ROOT_TASK_NAME = "_root"


class Role:
    """
    A named domain of responsibility owning exactly one task tree.

    The role is the persistence boundary of the tree: to_json() writes the
    owned tree, Role.from_json() reads a tree back (not a role).
    """

    def __init__(
        self,
        name: str = "",
        *,
        root_task: Task | None = None,
        role_id: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._id = role_id or str(uuid.uuid4())
        self.name = name
        self._root_task = root_task if root_task is not None else Task(ROOT_TASK_NAME, clock=clock)

    @property
    def id(self) -> str:
        return self._id

    @property
    def root_task(self) -> Task:
        return self._root_task

    def __repr__(self) -> str:
        return f"Role(name={self.name!r}, id={self._id[:8]})"

    @classmethod
    def from_tree(cls, name: str, root_task: Task, *, role_id: str | None = None) -> Role:
        """
        Wrap a decoded tree: repair its parent links and derive its flags.
        """
        root_task.reconcile_parents()
        root_task.update_next_and_critical()
        return cls(name, root_task=root_task, role_id=role_id)

    # ---- serialization ----

    def to_json(self) -> str:
        """Serialize the owned task tree to JSON text."""
        return dumps_task(self._root_task)

    @staticmethod
    def from_json(text: str | bytes, *, clock: Clock | None = None) -> Task:
        """
        Reconstruct a task tree from JSON text.

        Raises TaskFormatError for malformed input. Parent links are not part
        of the stored form: call reconcile_parents() on the result.
        """
        return loads_task(text, clock=clock)
