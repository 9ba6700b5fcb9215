# src/subchain/tasks/task_models.py

from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Assigning a status to a task stamps or clears its start/completion dates,
    see Task.status.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """Accept the stored value or a loose spelling ("in-progress", "Complete")."""
        key = raw.strip().lower().replace("-", "_").replace(" ", "_")
        return cls(key)


class ExecutionOrder(StrEnum):
    """How the subtasks of a task compose for duration and path purposes."""

    SERIES = "series"  # one after the other: durations sum
    PARALLEL = "parallel"  # simultaneously: the longest one gates the parent

    @classmethod
    def parse(cls, raw: str) -> ExecutionOrder:
        return cls(raw.strip().lower())
