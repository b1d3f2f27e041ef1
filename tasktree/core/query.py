"""
FILE: tasktree/core/query.py
PURPOSE: Read-only projections over a set of tasks
EXPORTS:
  - root_tasks(tasks) -> List[Task]
  - completed_tasks(tasks) -> List[Task]
  - incomplete_tasks(tasks) -> List[Task]
  - overdue_tasks(tasks, today) -> List[Task]
  - tasks_due_today(tasks, today) -> List[Task]
  - tasks_due_soon(tasks, days, today) -> List[Task]
  - tasks_with_due_date(tasks) -> List[Task]
  - child_tasks(tasks) -> List[Task]
  - parent_tasks(tasks) -> List[Task]
  - flatten_tree(roots) -> List[Tuple[Task, int]]
DEPENDENCIES:
  - tasktree.core.models (Task)
NOTES:
  - Pure functions: no mutation, no storage access
  - Input order is preserved in every result
"""

from datetime import date
from typing import Iterable, List, Optional, Tuple

from .constants import DEFAULT_DUE_SOON_DAYS
from .models import Task


def root_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if t.is_root]


def completed_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if t.completed]


def incomplete_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if not t.completed]


def overdue_tasks(tasks: Iterable[Task], today: Optional[date] = None) -> List[Task]:
    return [t for t in tasks if t.is_overdue(today)]


def tasks_due_today(tasks: Iterable[Task], today: Optional[date] = None) -> List[Task]:
    return [t for t in tasks if t.is_due_today(today)]


def tasks_due_soon(
    tasks: Iterable[Task],
    days: int = DEFAULT_DUE_SOON_DAYS,
    today: Optional[date] = None,
) -> List[Task]:
    return [t for t in tasks if t.is_due_soon(days, today)]


def tasks_with_due_date(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if t.due_date is not None]


def child_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Tasks that have a parent."""
    return [t for t in tasks if not t.is_root]


def parent_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Tasks that have at least one child."""
    return [t for t in tasks if not t.is_leaf]


def flatten_tree(roots: Iterable[Task], depth: int = 0) -> List[Tuple[Task, int]]:
    """
    Walk the forest in display order.

    Args:
        roots: Top-level tasks to start from
        depth: Depth assigned to the roots

    Returns:
        (task, depth) pairs, each parent immediately followed by its subtree
    """
    result = []
    for task in roots:
        result.append((task, depth))
        result.extend(flatten_tree(task.children, depth + 1))
    return result
