# tests/test_task_status.py

from __future__ import annotations

from datetime import datetime, timezone

from subchain.tasks.task import Task
from subchain.tasks.task_models import TaskStatus

from .fakes import FakeClock


def test_new_task_has_no_status_dates(clock) -> None:
    task = Task("x")
    assert task.status == TaskStatus.NOT_STARTED
    assert task.start_date is None
    assert task.completion_date is None
    assert task.active_date is None
    assert task.creation_date == clock.now()


def test_status_transitions_stamp_and_clear_dates(clock) -> None:
    task = Task("x")

    task.status = TaskStatus.IN_PROGRESS
    started = clock.now()
    assert task.start_date == started
    assert task.completion_date is None

    clock.advance(minutes=30)
    task.status = TaskStatus.IN_PROGRESS
    assert task.start_date == started

    clock.advance(minutes=15)
    task.status = TaskStatus.COMPLETE
    completed = clock.now()
    assert task.completion_date == completed
    assert task.completion_time == 45

    clock.advance(minutes=5)
    task.status = TaskStatus.COMPLETE
    assert task.completion_date == completed

    task.status = TaskStatus.NOT_STARTED
    assert task.start_date is None
    assert task.completion_date is None
    assert task.completion_time is None


def test_restart_after_completion_clears_completion(clock) -> None:
    task = Task("x")
    task.status = TaskStatus.COMPLETE
    assert task.start_date is None
    assert task.completion_time is None

    clock.advance(minutes=1)
    task.status = TaskStatus.IN_PROGRESS
    assert task.start_date == clock.now()
    assert task.completion_date is None


def test_toggle_status_cycles() -> None:
    task = Task("x")
    assert task.toggle_status() == TaskStatus.IN_PROGRESS
    assert task.toggle_status() == TaskStatus.COMPLETE
    assert task.toggle_status() == TaskStatus.NOT_STARTED
    assert task.start_date is None and task.completion_date is None


def test_status_accepts_plain_values() -> None:
    task = Task("x")
    task.status = "in_progress"
    assert task.status is TaskStatus.IN_PROGRESS
    assert TaskStatus.parse("In-Progress") is TaskStatus.IN_PROGRESS


def test_active_time_is_live_until_completion(clock) -> None:
    task = Task("x")
    assert task.active_time == 0

    task.update_next_and_critical()
    clock.advance(minutes=20)
    assert task.active_time == 20

    task.status = TaskStatus.COMPLETE
    clock.advance(minutes=10)
    assert task.active_time == 20


def test_leaving_active_path_resets_active_time(clock) -> None:
    task = Task("x")
    task.is_active = True
    clock.advance(minutes=5)
    assert task.active_time == 5

    task.is_active = False
    assert task.active_date is None
    assert task.active_time == 0


def test_explicit_clock_overrides_default() -> None:
    own = FakeClock(datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc))
    task = Task("x", clock=own)
    task.status = TaskStatus.IN_PROGRESS
    assert task.creation_date == own.now()
    assert task.start_date == own.now()
