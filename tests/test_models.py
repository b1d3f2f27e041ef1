"""
Tests for the Task entity: state changes, hierarchy, date classification.
"""

from datetime import date, datetime, timedelta
import json

import pytest

from tasktree.core.exceptions import ValidationError
from tasktree.core.models import Task, validate_title

from conftest import TODAY


# --- Construction ---

def test_construction_defaults():
    task = Task(1, "Buy milk")
    assert task.id == 1
    assert task.title == "Buy milk"
    assert task.completed is False
    assert task.due_date is None
    assert task.reference_url is None
    assert task.parent is None
    assert task.children == []


def test_construction_links_parent():
    parent = Task(1, "Parent")
    child = Task(2, "Child", parent=parent)
    assert child.parent is parent
    assert parent.children == [child]


def test_construction_accepts_empty_title():
    """Only update_title validates; the constructor takes any title."""
    task = Task(1, "")
    assert task.title == ""
    blank = Task(2, "   ")
    assert blank.title == "   "


def test_construction_coerces_due_date():
    assert Task(1, "a", due_date="2025-12-31").due_date == date(2025, 12, 31)
    assert Task(2, "b", due_date=datetime(2025, 1, 2, 15, 30)).due_date == date(2025, 1, 2)


def test_construction_rejects_bad_due_date():
    with pytest.raises(ValidationError):
        Task(1, "a", due_date="someday")


def test_equality_is_identity():
    assert Task(1, "same") != Task(1, "same")
    task = Task(1, "same")
    assert task == task


# --- State changes ---

def test_complete_is_idempotent():
    task = Task(1, "a")
    task.complete()
    task.complete()
    assert task.completed is True


def test_uncomplete_on_incomplete_task_is_noop():
    task = Task(1, "a")
    task.uncomplete()
    assert task.completed is False
    task.complete()
    task.uncomplete()
    assert task.completed is False


@pytest.mark.parametrize("bad", ["", "   ", "\t\n", None])
def test_update_title_rejects_empty(bad):
    task = Task(1, "Original")
    with pytest.raises(ValidationError):
        task.update_title(bad)
    assert task.title == "Original"


def test_update_title_replaces():
    task = Task(1, "Original")
    task.update_title("New")
    assert task.title == "New"


def test_validate_title_returns_title():
    assert validate_title("ok") == "ok"


def test_update_due_date_accepts_formats_and_none():
    task = Task(1, "a")
    task.update_due_date(date(2025, 3, 1))
    assert task.due_date == date(2025, 3, 1)
    task.update_due_date("20250402")
    assert task.due_date == date(2025, 4, 2)
    task.update_due_date(None)
    assert task.due_date is None


def test_update_due_date_failure_leaves_date():
    task = Task(1, "a", due_date=date(2025, 3, 1))
    with pytest.raises(ValidationError):
        task.update_due_date("not a date")
    with pytest.raises(ValidationError):
        task.update_due_date(42)
    assert task.due_date == date(2025, 3, 1)


def test_update_reference_url_keeps_empty_string_distinct():
    task = Task(1, "a")
    task.update_reference_url("")
    assert task.reference_url == ""
    task.update_reference_url(None)
    assert task.reference_url is None
    task.update_reference_url("https://example.com")
    assert task.reference_url == "https://example.com"


# --- Hierarchy ---

def test_add_child_is_noop_when_present():
    parent = Task(1, "P")
    child = Task(2, "C")
    parent.add_child(child)
    parent.add_child(child)
    assert parent.children == [child]
    assert child.parent is parent


def test_remove_child_clears_back_reference():
    parent = Task(1, "P")
    child = Task(2, "C", parent=parent)
    parent.remove_child(child)
    assert parent.children == []
    assert child.parent is None


def test_remove_child_keeps_foreign_back_reference():
    parent = Task(1, "P")
    other = Task(2, "O")
    child = Task(3, "C", parent=other)
    parent.remove_child(child)
    assert child.parent is other


def test_tree_walk():
    root = Task(1, "Root")
    a = Task(2, "A", parent=root)
    b = Task(3, "B", parent=root)
    a1 = Task(4, "A1", parent=a)
    a1x = Task(5, "A1x", parent=a1)

    assert root.is_root and not root.is_leaf
    assert a1x.is_leaf and not a1x.is_root
    assert [root.depth, a.depth, a1.depth, a1x.depth] == [0, 1, 2, 3]
    assert a1x.ancestors() == [a1, a, root]
    assert root.ancestors() == []
    assert root.descendants() == [a, a1, a1x, b]
    assert a.siblings() == [b]
    assert root.siblings() == []


def test_descendants_contain_each_task_once():
    root = Task(1, "Root")
    tasks = [root]
    for i in range(2, 12):
        tasks.append(Task(i, f"T{i}", parent=tasks[(i - 2) // 2]))
    descendants = root.descendants()
    assert len(descendants) == len({id(t) for t in descendants}) == 10


# --- Date classification ---

def test_due_today_is_not_overdue():
    task = Task(1, "a", due_date=TODAY)
    assert task.is_overdue(TODAY) is False
    assert task.is_due_today(TODAY) is True


def test_overdue_only_when_past_and_incomplete():
    task = Task(1, "a", due_date=TODAY - timedelta(days=1))
    assert task.is_overdue(TODAY) is True
    task.complete()
    assert task.is_overdue(TODAY) is False


def test_due_soon_window():
    def due_in(days):
        return Task(1, "a", due_date=TODAY + timedelta(days=days))

    assert due_in(0).is_due_soon(3, TODAY)
    assert due_in(3).is_due_soon(3, TODAY)
    assert not due_in(4).is_due_soon(3, TODAY)
    assert not due_in(-1).is_due_soon(3, TODAY)
    assert due_in(7).is_due_soon(7, TODAY)


def test_due_soon_excludes_completed():
    task = Task(1, "a", due_date=TODAY + timedelta(days=1))
    task.complete()
    assert not task.is_due_soon(today=TODAY)


def test_no_due_date_classifications():
    task = Task(1, "a")
    assert not task.is_overdue(TODAY)
    assert not task.is_due_today(TODAY)
    assert not task.is_due_soon(today=TODAY)
    assert task.days_until_due(TODAY) is None


def test_days_until_due_is_signed():
    assert Task(1, "a", due_date=TODAY + timedelta(days=5)).days_until_due(TODAY) == 5
    assert Task(2, "b", due_date=TODAY - timedelta(days=2)).days_until_due(TODAY) == -2


def test_classification_defaults_to_today_provider(fixed_today):
    task = Task(1, "a", due_date=fixed_today - timedelta(days=1))
    assert task.is_overdue()


# --- Serialization ---

def test_to_dict_and_json():
    parent = Task(1, "P")
    child = Task(2, "C", parent=parent, due_date=date(2025, 1, 5), reference_url="u")
    data = child.to_dict()
    assert data["parent_id"] == 1
    assert data["due_date"] == "2025-01-05"
    assert data["reference_url"] == "u"
    assert parent.to_dict()["children"] == [2]
    assert json.loads(child.to_json())["title"] == "C"
