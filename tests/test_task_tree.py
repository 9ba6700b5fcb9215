# tests/test_task_tree.py

from __future__ import annotations

import pytest

from subchain.tasks.task import Task


def _names(task: Task) -> list[str]:
    return [t.name for t in task.subtasks]


def test_add_subtask_sets_parent_and_is_idempotent() -> None:
    parent, child = Task("parent"), Task("child")
    parent.add_subtask(child)
    parent.add_subtask(child)

    assert parent.subtasks == (child,)
    assert child.parent is parent
    assert child.root is parent
    assert child.depth == 1
    assert parent.is_root and not child.is_root


def test_add_subtask_takes_child_from_old_parent() -> None:
    old, new = Task("old"), Task("new")
    first, second = Task("first"), Task("second")
    old.add_subtask(first)
    old.add_subtask(second)
    assert not second.is_active

    new.add_subtask(first)

    assert _names(old) == ["second"]
    assert _names(new) == ["first"]
    assert first.parent is new
    # The old tree was re-derived: second is now the head of the series.
    assert second.is_active


def test_add_and_insert_reject_cycles() -> None:
    a, b, c = Task("a"), Task("b"), Task("c")
    a.add_subtask(b)
    b.add_subtask(c)

    with pytest.raises(ValueError):
        c.add_subtask(a)
    with pytest.raises(ValueError):
        a.add_subtask(a)
    with pytest.raises(ValueError):
        c.insert_subtask(a, 0)
    with pytest.raises(ValueError):
        b.insert_subtask(b, 0)
    assert _names(c) == []


def test_insert_subtask_at_position() -> None:
    parent = Task("parent")
    parent.add_subtask(Task("x"))
    parent.add_subtask(Task("y"))

    head = Task("head")
    parent.insert_subtask(head, 0)
    tail = Task("tail")
    parent.insert_subtask(tail, 3)

    assert _names(parent) == ["head", "x", "y", "tail"]
    assert head.parent is parent and tail.parent is parent
    assert head.is_active
    assert not parent.subtasks[1].is_active


def test_insert_subtask_out_of_range_leaves_tree_untouched() -> None:
    parent = Task("parent")
    parent.add_subtask(Task("x"))
    orphan = Task("orphan")

    with pytest.raises(IndexError):
        parent.insert_subtask(orphan, 2)
    with pytest.raises(IndexError):
        parent.insert_subtask(orphan, -1)

    assert _names(parent) == ["x"]
    assert orphan.parent is None


def test_insert_existing_subtask_reorders() -> None:
    parent = Task("parent")
    x, y, z = Task("x"), Task("y"), Task("z")
    for t in (x, y, z):
        parent.add_subtask(t)

    parent.insert_subtask(z, 0)
    assert _names(parent) == ["z", "x", "y"]
    assert z.is_active and not x.is_active

    parent.insert_subtask(x, 3)
    assert _names(parent) == ["z", "y", "x"]
    assert len(parent.subtasks) == 3


def test_remove_subtask_detaches_subtree() -> None:
    parent = Task("parent")
    first, second = Task("first"), Task("second")
    grandchild = Task("grandchild")
    parent.add_subtask(first)
    parent.add_subtask(second)
    first.add_subtask(grandchild)

    parent.remove_subtask(first)

    assert _names(parent) == ["second"]
    assert first.parent is None
    assert grandchild.parent is first
    assert second.is_active
    # The removed subtree is now a tree of its own.
    assert first.is_active and first.is_critical
    assert grandchild.is_active


def test_remove_missing_subtask_is_silent() -> None:
    parent, stranger = Task("parent"), Task("stranger")
    parent.add_subtask(Task("x"))
    parent.remove_subtask(stranger)
    assert _names(parent) == ["x"]


def test_subtask_moves_are_not_supported() -> None:
    a, b, c = Task("a"), Task("b"), Task("c")
    a.add_subtask(c)

    with pytest.raises(NotImplementedError):
        a.move_all_subtasks(b)
    with pytest.raises(NotImplementedError):
        a.move_subtask(c, b)
    assert c.parent is a


def test_reconcile_parents_repairs_links() -> None:
    root, child, grandchild = Task("root"), Task("child"), Task("grandchild")
    root.add_subtask(child)
    child.add_subtask(grandchild)
    child.parent = None
    grandchild.parent = None

    root.reconcile_parents()

    assert child.parent is root
    assert grandchild.parent is child


def test_walk_find_and_identity(sample_tree) -> None:
    root = sample_tree["T1"]
    assert [t.name for t in root.walk()] == ["T1", "T2", "T3", "T4", "T5"]
    assert root.find(sample_tree["T5"].id) is sample_tree["T5"]
    assert root.find("missing") is None

    twin = Task("other name", task_id=sample_tree["T2"].id)
    assert twin == sample_tree["T2"]
    assert hash(twin) == hash(sample_tree["T2"])
    assert Task("a") != Task("a")


def test_subtasks_view_is_read_only() -> None:
    parent = Task("parent")
    parent.add_subtask(Task("x"))
    view = parent.subtasks
    assert isinstance(view, tuple)
    with pytest.raises(AttributeError):
        view.append(Task("y"))  # type: ignore[attr-defined]
