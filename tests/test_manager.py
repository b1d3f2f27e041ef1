"""
Tests for TaskManager: identity cache, mutations, cascade delete, move,
batch operations, persistence.
"""

import sqlite3
from datetime import date, timedelta

import pytest

from tasktree.core.exceptions import NotFoundError, ParentNotFoundError, ValidationError
from tasktree.core.manager import TaskManager
from tasktree.core.models import Task
from tasktree.core.repository import TaskStore


def assert_consistent(manager):
    """Every parent/child edge is recorded on both ends."""
    for task in manager.tasks:
        if task.parent is not None:
            assert any(c is task for c in task.parent.children)
        for child in task.children:
            assert child.parent is task


def build_family(manager):
    parent = manager.add("Parent")
    child = manager.add("Child", parent_id=parent.id)
    grandchild = manager.add("Grandchild", parent_id=child.id)
    return parent, child, grandchild


# --- Construction / modes ---

def test_modes(manager, ephemeral):
    assert manager.is_backed
    assert not ephemeral.is_backed
    assert ephemeral.store is None


def test_ephemeral_ids_start_at_one(ephemeral):
    assert [ephemeral.add(t).id for t in ("a", "b", "c")] == [1, 2, 3]


def test_backed_ids_follow_store(temp_db):
    with TaskStore(temp_db) as store:
        store.insert(Task(10, "Existing"))

    with TaskManager(db_path=temp_db) as manager:
        assert manager.add("Next").id == 11


def test_manager_uses_given_store(store):
    manager = TaskManager(store=store)
    task = manager.add("Shared")
    assert store.exists(task.id)


# --- add ---

def test_add_buy_milk(any_manager):
    task = any_manager.add("Buy milk")
    assert task.id is not None
    assert task.completed is False
    assert task.due_date is None
    assert any_manager.statistics().total == 1


def test_add_with_parent(any_manager):
    parent = any_manager.add("Parent")
    child = any_manager.add("Child", parent_id=parent.id)
    assert any_manager.root_tasks() == [parent]
    assert parent.children == [child]
    assert child.depth == 1
    assert_consistent(any_manager)


@pytest.mark.parametrize("bad", ["", "   "])
def test_add_rejects_empty_title(any_manager, bad):
    with pytest.raises(ValidationError):
        any_manager.add(bad)
    assert any_manager.tasks == []


def test_add_rejects_bad_due_date(any_manager):
    with pytest.raises(ValidationError):
        any_manager.add("Task", due_date="whenever")
    assert any_manager.tasks == []


def test_add_unknown_parent_raises(any_manager):
    with pytest.raises(ParentNotFoundError) as excinfo:
        any_manager.add("Orphan", parent_id=99)
    assert isinstance(excinfo.value, NotFoundError)
    assert any_manager.tasks == []


def test_add_with_due_date_and_url(any_manager):
    task = any_manager.add("Report", due_date="2025-03-01", reference_url="https://x")
    assert task.due_date == date(2025, 3, 1)
    assert task.reference_url == "https://x"


# --- find / identity cache ---

def test_find_returns_same_instance(any_manager):
    task = any_manager.add("Same")
    assert any_manager.find(task.id) is task
    assert any_manager.find(task.id) is any_manager.find(task.id)


def test_find_absent(any_manager):
    assert any_manager.find(123) is None
    assert any_manager.find(None) is None


def test_find_falls_back_to_store_and_caches(manager):
    manager.store.insert(Task(50, "Written elsewhere"))
    found = manager.find(50)
    assert found is not None
    assert found.title == "Written elsewhere"
    assert manager.find(50) is found
    assert found in manager.tasks


def test_store_loaded_child_keeps_its_parent(manager):
    parent = manager.add("Parent")
    child_id = manager.store.insert(Task(None, "Child", parent=Task(parent.id, "stand-in")))

    child = manager.find(child_id)
    assert child.parent is parent
    assert any(c is child for c in parent.children)

    assert manager.complete(child_id) is True
    assert manager.store.parent_id_of(child_id) == parent.id
    assert_consistent(manager)


def test_store_loaded_parent_picks_up_children(manager):
    parent_id = manager.store.insert(Task(None, "Parent"))
    child_id = manager.store.insert(Task(None, "Child", parent=Task(parent_id, "stand-in")))

    parent = manager.find(parent_id)
    assert [c.id for c in parent.children] == [child_id]
    assert manager.find(child_id).parent is parent

    assert manager.delete(parent_id) is True
    assert manager.store.all() == []


def test_failed_insert_leaves_parent_untouched(manager, monkeypatch):
    parent = manager.add("Parent")

    def broken_insert(task):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(manager.store, "insert", broken_insert)
    with pytest.raises(sqlite3.OperationalError):
        manager.add("Child", parent_id=parent.id)
    assert parent.children == []
    assert manager.tasks == [parent]


def test_exists(any_manager):
    task = any_manager.add("Here")
    assert any_manager.exists(task.id)
    assert not any_manager.exists(task.id + 100)


# --- delete ---

def test_delete_cascades(any_manager):
    parent, child, grandchild = build_family(any_manager)
    assert any_manager.delete(parent.id) is True
    assert any_manager.tasks == []
    if any_manager.is_backed:
        assert any_manager.store.all() == []


def test_delete_counts_descendants(any_manager):
    keep = any_manager.add("Keep")
    parent, child, grandchild = build_family(any_manager)
    sibling = any_manager.add("Sibling", parent_id=parent.id)

    before = len(any_manager.tasks)
    any_manager.delete(child.id)

    assert len(any_manager.tasks) == before - 2
    assert parent.children == [sibling]
    assert child.parent is None
    assert any_manager.find(grandchild.id) is None
    assert any_manager.find(keep.id) is keep
    assert_consistent(any_manager)
    if any_manager.is_backed:
        assert len(any_manager.store.all()) == before - 2


def test_delete_missing(any_manager):
    assert any_manager.delete(42) is False


# --- complete / edit ---

def test_complete_and_uncomplete(any_manager):
    task = any_manager.add("Flip")
    assert any_manager.complete(task.id) is True
    assert any_manager.complete(task.id) is True
    assert task.completed is True
    assert any_manager.uncomplete(task.id) is True
    assert task.completed is False
    assert any_manager.complete(999) is False
    assert any_manager.uncomplete(999) is False


def test_overdue_then_completed(any_manager, fixed_today):
    task = any_manager.add("Late", due_date=fixed_today - timedelta(days=1))
    assert task.is_overdue()
    any_manager.complete(task.id)
    assert not task.is_overdue()


def test_edit_title_empty_keeps_title(any_manager):
    task = any_manager.add("Keep me")
    with pytest.raises(ValidationError):
        any_manager.edit_title(task.id, "")
    assert task.title == "Keep me"
    if any_manager.is_backed:
        assert any_manager.store.find(task.id).title == "Keep me"


def test_edit_title(any_manager):
    task = any_manager.add("Old")
    assert any_manager.edit_title(task.id, "New") is True
    assert task.title == "New"
    assert any_manager.edit_title(999, "New") is False


def test_edit_missing_task_returns_false_before_validation(any_manager):
    assert any_manager.edit_title(999, "") is False


def test_edit_due_date(any_manager):
    task = any_manager.add("Due")
    assert any_manager.edit_due_date(task.id, "20250101") is True
    assert task.due_date == date(2025, 1, 1)
    assert any_manager.edit_due_date(task.id, None) is True
    assert task.due_date is None
    with pytest.raises(ValidationError):
        any_manager.edit_due_date(task.id, "nope")
    assert any_manager.edit_due_date(999, None) is False


def test_edit_reference_url(any_manager):
    task = any_manager.add("Link")
    assert any_manager.edit_reference_url(task.id, "https://a") is True
    assert task.reference_url == "https://a"
    assert any_manager.edit_reference_url(task.id, "") is True
    assert task.reference_url == ""
    assert any_manager.edit_reference_url(999, "x") is False


# --- move ---

def test_move_under_new_parent(any_manager):
    a = any_manager.add("A")
    b = any_manager.add("B")
    assert any_manager.move(b.id, a.id) is True
    assert b.parent is a
    assert a.children == [b]
    assert any_manager.root_tasks() == [a]
    assert_consistent(any_manager)


def test_move_to_root(any_manager):
    parent, child, _ = build_family(any_manager)
    assert any_manager.move(child.id, None) is True
    assert child.is_root
    assert parent.children == []
    assert_consistent(any_manager)


@pytest.mark.parametrize("target", ["self", "child", "grandchild"])
def test_move_into_own_subtree_is_rejected(any_manager, target):
    parent, child, grandchild = build_family(any_manager)
    new_parent = {"self": parent, "child": child, "grandchild": grandchild}[target]

    assert any_manager.move(parent.id, new_parent.id) is False
    assert parent.is_root
    assert parent.children == [child]
    assert child.children == [grandchild]


def test_move_missing_task_or_parent(any_manager):
    task = any_manager.add("T")
    assert any_manager.move(999, None) is False
    assert any_manager.move(task.id, 999) is False
    assert task.is_root


def test_moves_keep_a_forest(any_manager):
    tasks = [any_manager.add(f"T{i}") for i in range(6)]
    moves = [(1, 0), (2, 1), (3, 2), (0, 3), (4, 0), (5, 4), (0, 5), (2, None), (0, 2)]
    for task_index, parent_index in moves:
        parent_id = tasks[parent_index].id if parent_index is not None else None
        any_manager.move(tasks[task_index].id, parent_id)
        assert_consistent(any_manager)
        for task in any_manager.tasks:
            assert task not in task.ancestors()


def test_move_is_persisted(temp_db):
    with TaskManager(db_path=temp_db) as manager:
        a = manager.add("A")
        b = manager.add("B")
        manager.move(b.id, a.id)

    with TaskManager(db_path=temp_db) as manager:
        reloaded_a = manager.find(a.id)
        assert [c.title for c in reloaded_a.children] == ["B"]


# --- Batch operations ---

def test_complete_all(any_manager):
    a = any_manager.add("A")
    b = any_manager.add("B")
    assert any_manager.complete_all([a.id, b.id]) is True
    assert a.completed and b.completed


def test_complete_all_applies_every_id_even_after_failure(any_manager):
    a = any_manager.add("A")
    b = any_manager.add("B")
    assert any_manager.complete_all([a.id, 999, b.id]) is False
    assert a.completed and b.completed


def test_uncomplete_all(any_manager):
    a = any_manager.add("A")
    any_manager.complete(a.id)
    assert any_manager.uncomplete_all([a.id]) is True
    assert not a.completed


def test_delete_all(any_manager):
    parent, child, _ = build_family(any_manager)
    other = any_manager.add("Other")
    # child is already gone once parent is deleted
    assert any_manager.delete_all([parent.id, child.id, other.id]) is False
    assert any_manager.tasks == []


# --- Persistence / lifecycle ---

def test_mutations_persist_across_managers(temp_db, fixed_today):
    with TaskManager(db_path=temp_db) as manager:
        parent, child, grandchild = build_family(manager)
        manager.complete(child.id)
        manager.edit_due_date(grandchild.id, fixed_today)
        manager.edit_reference_url(parent.id, "https://p")

    with TaskManager(db_path=temp_db) as manager:
        parent = manager.find(1)
        child = parent.children[0]
        grandchild = child.children[0]
        assert parent.reference_url == "https://p"
        assert child.completed
        assert grandchild.due_date == fixed_today
        assert grandchild.depth == 2


def test_reload_replaces_cache(manager):
    task = manager.add("Before")
    manager.reload()
    reloaded = manager.find(task.id)
    assert reloaded is not task
    assert reloaded.title == "Before"


def test_close_releases_store(temp_db):
    manager = TaskManager(db_path=temp_db)
    manager.close()
    assert manager.store.closed


def test_children_of(any_manager):
    parent, child, _ = build_family(any_manager)
    assert any_manager.children_of(parent.id) == [child]
    assert any_manager.children_of(999) == []
