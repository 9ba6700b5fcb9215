# src/subchain/tasks/task.py

from __future__ import annotations

"""
Task tree node.

A Task owns an ordered list of subtasks and keeps a non-owning reference to its
parent. Two kinds of derived state live on every node:

- calculated_duration: recomputed on every read from the leaves up;
- is_active / is_critical: cached flags, re-derived top-down by
  update_next_and_critical(). Every mutation method below re-runs that pass
  from the tree root, so the flags are only stale after edits made around
  the API (e.g. right after decoding, before reconcile_parents()).
"""

import logging
import uuid
from collections.abc import Iterator
from datetime import date, datetime

from ..core.clock import get_default_clock
from ..core.ports import Clock
from .task_models import ExecutionOrder, TaskStatus

logger = logging.getLogger(__name__)


def _minutes(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


class Task:
    """A schedulable unit of work, composed into trees."""

    def __init__(
        self,
        name: str = "",
        description: str = "",
        *,
        expected_duration: int = 0,
        subtask_order: ExecutionOrder = ExecutionOrder.SERIES,
        due_date: date | None = None,
        clock: Clock | None = None,
        task_id: str | None = None,
        creation_date: datetime | None = None,
    ) -> None:
        self._clock = clock
        self._id = task_id or str(uuid.uuid4())

        self.name = name
        self.description = description

        # Initial assignments bypass the setters: no date stamping, no propagation.
        self._status = TaskStatus.NOT_STARTED
        self._subtask_order = ExecutionOrder(subtask_order)
        self._expected_duration = int(expected_duration)
        self._subtasks: list[Task] = []
        self.parent: Task | None = None

        self._is_active = False
        self.is_critical = False

        self.due_date = due_date
        self.start_date: datetime | None = None
        self.active_date: datetime | None = None
        self.completion_date: datetime | None = None
        self._creation_date = creation_date or self._now()

    # ---- identity ----

    @property
    def id(self) -> str:
        return self._id

    @property
    def creation_date(self) -> datetime:
        return self._creation_date

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Task):
            return self._id == other._id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"Task(name={self.name!r}, id={self._id[:8]}, status={self._status.value}, "
            f"order={self._subtask_order.value}, subtasks={len(self._subtasks)})"
        )

    def _now(self) -> datetime:
        return (self._clock or get_default_clock()).now()

    # ---- tree shape ----

    @property
    def subtasks(self) -> tuple[Task, ...]:
        """Read-only view. Use add/insert/remove_subtask to change it."""
        return tuple(self._subtasks)

    @property
    def is_leaf(self) -> bool:
        return not self._subtasks

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def root(self) -> Task:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def depth(self) -> int:
        n = 0
        node = self.parent
        while node is not None:
            n += 1
            node = node.parent
        return n

    def walk(self) -> Iterator[Task]:
        """Pre-order traversal of this subtree, self first."""
        stack: list[Task] = [self]
        while stack:
            task = stack.pop()
            yield task
            stack.extend(reversed(task._subtasks))

    def find(self, task_id: str) -> Task | None:
        for task in self.walk():
            if task.id == task_id:
                return task
        return None

    def active_leaves(self) -> list[Task]:
        """Leaves on the active path: what should be worked on now."""
        return [t for t in self.walk() if t.is_leaf and t.is_active]

    def critical_leaves(self) -> list[Task]:
        return [t for t in self.walk() if t.is_leaf and t.is_critical]

    # ---- durations ----

    @property
    def subtask_order(self) -> ExecutionOrder:
        return self._subtask_order

    @subtask_order.setter
    def subtask_order(self, value: ExecutionOrder) -> None:
        value = ExecutionOrder(value)
        if value == self._subtask_order:
            return
        self._subtask_order = value
        self._propagate()

    @property
    def expected_duration(self) -> int:
        """Expected duration in minutes. Only meaningful for leaves."""
        return self._expected_duration

    @expected_duration.setter
    def expected_duration(self, value: int) -> None:
        value = int(value)
        if value == self._expected_duration:
            return
        self._expected_duration = value
        self._propagate()

    def _durations(self) -> dict[int, int]:
        """Calculated duration of every node in this subtree, keyed by id(node)."""
        durations: dict[int, int] = {}
        stack: list[tuple[Task, bool]] = [(self, False)]
        while stack:
            task, expanded = stack.pop()
            if not task._subtasks:
                durations[id(task)] = task._expected_duration
            elif expanded:
                children = [durations[id(t)] for t in task._subtasks]
                if task._subtask_order == ExecutionOrder.PARALLEL:
                    durations[id(task)] = max(children)
                else:
                    durations[id(task)] = sum(children)
            else:
                stack.append((task, True))
                stack.extend((t, False) for t in task._subtasks)
        return durations

    @property
    def calculated_duration(self) -> int:
        return self._durations()[id(self)]

    @property
    def buffer(self) -> int:
        return 0

    def calculate_buffer(self) -> int:
        """Slack before the due date. Not available yet."""
        raise NotImplementedError("buffer calculation is not implemented")

    # ---- status & timers ----

    @property
    def status(self) -> TaskStatus:
        return self._status

    @status.setter
    def status(self, value: TaskStatus) -> None:
        value = TaskStatus(value)
        previous = self._status

        if value == TaskStatus.NOT_STARTED:
            self.start_date = None
            self.completion_date = None
        elif value == TaskStatus.IN_PROGRESS:
            if previous != TaskStatus.IN_PROGRESS:
                self.start_date = self._now()
                self.completion_date = None
        elif value == TaskStatus.COMPLETE:
            if previous != TaskStatus.COMPLETE:
                self.completion_date = self._now()

        self._status = value
        if previous != value:
            logger.debug("Task %s status %s -> %s", self._id, previous.value, value.value)

    def toggle_status(self) -> TaskStatus:
        """Cycle NOT_STARTED -> IN_PROGRESS -> COMPLETE -> NOT_STARTED."""
        cycle = {
            TaskStatus.NOT_STARTED: TaskStatus.IN_PROGRESS,
            TaskStatus.IN_PROGRESS: TaskStatus.COMPLETE,
            TaskStatus.COMPLETE: TaskStatus.NOT_STARTED,
        }
        self.status = cycle[self._status]
        return self._status

    @property
    def is_active(self) -> bool:
        """True if the task is on the path currently being worked."""
        return self._is_active

    @is_active.setter
    def is_active(self, value: bool) -> None:
        if value and not self._is_active:
            self.active_date = self._now()
        elif not value:
            self.active_date = None
        self._is_active = bool(value)

    @property
    def active_time(self) -> int:
        """Minutes spent on the active path (live while incomplete)."""
        if self.active_date is None:
            return 0
        if self.completion_date is None:
            return _minutes(self.active_date, self._now())
        return _minutes(self.active_date, self.completion_date)

    @property
    def completion_time(self) -> int | None:
        """Minutes from start to completion, if both happened."""
        if self.completion_date is None or self.start_date is None:
            return None
        return _minutes(self.start_date, self.completion_date)

    # ---- mutation ----

    def _contains(self, subtask: Task) -> bool:
        return any(t is subtask for t in self._subtasks)

    def _check_not_ancestor(self, subtask: Task) -> None:
        node: Task | None = self
        while node is not None:
            if node is subtask:
                raise ValueError(f"task {subtask.id} cannot become a subtask of itself or its descendants")
            node = node.parent

    def _unlink(self, subtask: Task) -> bool:
        for i, t in enumerate(self._subtasks):
            if t is subtask:
                del self._subtasks[i]
                subtask.parent = None
                return True
        return False

    def _take_from_old_parent(self, subtask: Task) -> None:
        old_parent = subtask.parent
        if old_parent is None or old_parent is self:
            return
        old_root = old_parent.root
        old_parent._unlink(subtask)
        if old_root is not self.root:
            old_root.update_next_and_critical()
        logger.debug("Task %s detached from %s", subtask.id, old_parent.id)

    def _propagate(self) -> None:
        self.root.update_next_and_critical()

    def add_subtask(self, subtask: Task) -> None:
        """Append subtask, taking it from its previous parent if it had one."""
        if self._contains(subtask):
            return
        self._check_not_ancestor(subtask)
        self._take_from_old_parent(subtask)

        self._subtasks.append(subtask)
        subtask.parent = self
        logger.debug("Task %s added subtask %s", self._id, subtask.id)
        self._propagate()

    def insert_subtask(self, subtask: Task, index: int) -> None:
        """
        Insert subtask at index (0..len(subtasks)).

        A subtask that is already a child of this task is moved to index
        (clamped to the end once it has been taken out of the list).
        """
        if not 0 <= index <= len(self._subtasks):
            raise IndexError(f"subtask index {index} out of range 0..{len(self._subtasks)}")

        if self._contains(subtask):
            self._unlink(subtask)
            index = min(index, len(self._subtasks))
        else:
            self._check_not_ancestor(subtask)
            self._take_from_old_parent(subtask)

        self._subtasks.insert(index, subtask)
        subtask.parent = self
        logger.debug("Task %s inserted subtask %s at %d", self._id, subtask.id, index)
        self._propagate()

    def remove_subtask(self, subtask: Task) -> None:
        """Remove subtask if present; the removed subtree becomes its own root."""
        if not self._unlink(subtask):
            return
        logger.debug("Task %s removed subtask %s", self._id, subtask.id)
        self._propagate()
        subtask.update_next_and_critical()

    def move_all_subtasks(self, target: Task) -> None:
        raise NotImplementedError("moving subtasks between tasks is not implemented")

    def move_subtask(self, subtask: Task, target: Task) -> None:
        raise NotImplementedError("moving subtasks between tasks is not implemented")

    def reconcile_parents(self) -> None:
        """Re-stamp parent references of the whole subtree from the child lists."""
        for task in self.walk():
            for subtask in task._subtasks:
                subtask.parent = task

    # ---- active / critical path ----

    def update_next_and_critical(self) -> None:
        """
        Re-derive is_active and is_critical for this subtree, top-down.

        Parallel children all share the parent's activity; only the first
        longest one shares its criticality. Series children all share the
        parent's criticality; only the first one shares its activity.
        """
        if self.parent is None:
            self.is_active = True
            self.is_critical = True

        durations = self._durations()
        # Pre-order: a node's flags are final before its children read them.
        for task in self.walk():
            if not task._subtasks:
                continue
            if task._subtask_order == ExecutionOrder.PARALLEL:
                child_durations = [durations[id(t)] for t in task._subtasks]
                longest = child_durations.index(max(child_durations))
                for i, subtask in enumerate(task._subtasks):
                    subtask.is_critical = task.is_critical if i == longest else False
                    subtask.is_active = task._is_active
            else:
                for i, subtask in enumerate(task._subtasks):
                    subtask.is_critical = task.is_critical
                    subtask.is_active = task._is_active if i == 0 else False
