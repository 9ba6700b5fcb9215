"""Hierarchical task trees with series/parallel durations and active/critical paths."""

from subchain.roles.role import Role
from subchain.tasks.task import Task
from subchain.tasks.task_codec import TaskFormatError
from subchain.tasks.task_models import ExecutionOrder, TaskStatus

__all__ = [
    "ExecutionOrder",
    "Role",
    "Task",
    "TaskFormatError",
    "TaskStatus",
]
