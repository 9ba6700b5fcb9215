# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from subchain.core.clock import set_default_clock
from subchain.core.state import AppState
from subchain.roles.role_store import RoleStore
from subchain.tasks.task import Task
from subchain.tasks.task_models import ExecutionOrder

from .fakes import FakeClock


@pytest.fixture(autouse=True)
def clock() -> Iterator[FakeClock]:
    """
    Every test runs on a frozen clock: tasks created without an explicit
    clock read "now" from the process default, which we swap here.
    """
    fake = FakeClock(datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc))
    previous = set_default_clock(fake)
    yield fake
    set_default_clock(previous)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="subchain-test",
        log_level="DEBUG",
        log_to_file=False,
        data_dir=tmp_path,
        roles_db_path=tmp_path / "roles.sqlite3",
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState wired with a real SQLite RoleStore in tmp_path."""
    return AppState(settings=settings, role_store=RoleStore(settings.roles_db_path))


@pytest.fixture()
def sample_tree() -> dict[str, Task]:
    """
    T1 (105 min) parallel
      T2 (15 min)
      T3 (105 min) series
        T4 (45 min)
        T5 (60 min)
    """
    t = {name: Task(name) for name in ("T1", "T2", "T3", "T4", "T5")}
    t["T2"].expected_duration = 15
    t["T4"].expected_duration = 45
    t["T5"].expected_duration = 60

    t["T1"].add_subtask(t["T2"])
    t["T1"].add_subtask(t["T3"])
    t["T3"].add_subtask(t["T4"])
    t["T3"].add_subtask(t["T5"])

    t["T1"].subtask_order = ExecutionOrder.PARALLEL
    t["T3"].subtask_order = ExecutionOrder.SERIES

    t["T1"].update_next_and_critical()
    return t
