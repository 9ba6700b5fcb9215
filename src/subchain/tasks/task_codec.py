# src/subchain/tasks/task_codec.py

from __future__ import annotations

"""
JSON interchange form of a task tree.

Only structural/state fields are written. Derived values (calculated duration,
active/critical flags, buffer) and the parent back reference are not: a decoded
tree has no parent links until reconcile_parents() is called on its root.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any

from ..core.ports import Clock
from .task import Task
from .task_models import ExecutionOrder, TaskStatus

logger = logging.getLogger(__name__)


class TaskFormatError(ValueError):
    """Serialized task data cannot be parsed into a task tree."""


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def task_to_dict(task: Task) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": task.id,
        "name": task.name,
        "description": task.description,
        "status": task.status.value,
        "subtask_order": task.subtask_order.value,
        "expected_duration": task.expected_duration,
        "due_date": task.due_date.isoformat() if task.due_date is not None else None,
        "start_date": _dt_to_str(task.start_date),
        "active_date": _dt_to_str(task.active_date),
        "completion_date": _dt_to_str(task.completion_date),
        "creation_date": _dt_to_str(task.creation_date),
        "subtasks": [task_to_dict(t) for t in task.subtasks],
    }
    # Absent optional values are omitted rather than written as null.
    return {k: v for k, v in data.items() if v is not None}


def dumps_task(task: Task) -> str:
    return json.dumps(task_to_dict(task), ensure_ascii=False, indent=2)


# ---- decoding ----


def _get_str(data: dict[str, Any], key: str, where: str, *, required: bool = False) -> str:
    if key not in data:
        if required:
            raise TaskFormatError(f"{where}: missing '{key}'")
        return ""
    value = data[key]
    if not isinstance(value, str):
        raise TaskFormatError(f"{where}: '{key}' must be a string")
    return value


def _get_datetime(data: dict[str, Any], key: str, where: str) -> datetime | None:
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise TaskFormatError(f"{where}: '{key}' must be an ISO timestamp")
    try:
        value = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise TaskFormatError(f"{where}: bad timestamp in '{key}': {raw!r}") from exc
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _get_date(data: dict[str, Any], key: str, where: str) -> date | None:
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise TaskFormatError(f"{where}: '{key}' must be an ISO date")
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise TaskFormatError(f"{where}: bad date in '{key}': {raw!r}") from exc


def task_from_dict(data: Any, *, clock: Clock | None = None, where: str = "task") -> Task:
    """
    Build a task tree from its dict form.

    Raises TaskFormatError on any shape or value problem. Parent links are left
    unset and the active/critical flags are not propagated.
    """
    if not isinstance(data, dict):
        raise TaskFormatError(f"{where}: expected an object, got {type(data).__name__}")

    task_id = _get_str(data, "id", where, required=True)
    if not task_id:
        raise TaskFormatError(f"{where}: empty 'id'")
    where = f"{where}[{task_id[:8]}]"

    try:
        status = TaskStatus(data.get("status", TaskStatus.NOT_STARTED.value))
        order = ExecutionOrder(data.get("subtask_order", ExecutionOrder.SERIES.value))
    except ValueError as exc:
        raise TaskFormatError(f"{where}: {exc}") from exc

    duration = data.get("expected_duration", 0)
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise TaskFormatError(f"{where}: 'expected_duration' must be an integer")

    raw_subtasks = data.get("subtasks", [])
    if not isinstance(raw_subtasks, list):
        raise TaskFormatError(f"{where}: 'subtasks' must be a list")

    task = Task(
        _get_str(data, "name", where, required=True),
        _get_str(data, "description", where),
        expected_duration=duration,
        subtask_order=order,
        due_date=_get_date(data, "due_date", where),
        clock=clock,
        task_id=task_id,
        creation_date=_get_datetime(data, "creation_date", where),
    )

    # Restore state as stored; the status setter would re-stamp dates.
    task._status = status
    task.start_date = _get_datetime(data, "start_date", where)
    task.completion_date = _get_datetime(data, "completion_date", where)
    task.active_date = _get_datetime(data, "active_date", where)
    task._is_active = task.active_date is not None

    for i, raw in enumerate(raw_subtasks):
        task._subtasks.append(task_from_dict(raw, clock=clock, where=f"{where}.subtasks[{i}]"))
    return task


def loads_task(text: str | bytes, *, clock: Clock | None = None) -> Task:
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise TaskFormatError(f"not valid JSON: {exc}") from exc
    try:
        task = task_from_dict(data, clock=clock)
    except RecursionError as exc:
        raise TaskFormatError("task tree is nested too deeply") from exc
    logger.debug("Decoded task tree root=%s", task.id)
    return task
