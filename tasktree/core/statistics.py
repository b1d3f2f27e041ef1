"""
FILE: tasktree/core/statistics.py
PURPOSE: Counts and rates derived from the query layer
EXPORTS:
  - Statistics (dataclass)
  - compute_statistics(tasks, today) -> Statistics
  - completion_rate(tasks) -> float
  - on_time_rate(tasks, today) -> float
  - depth_statistics(tasks) -> Dict[str, float]
  - children_count_by_parent(tasks) -> Dict[int, int]
  - summary(tasks, today) -> Dict[str, Any]
DEPENDENCIES:
  - dataclasses, decimal (stdlib)
  - tasktree.core.query (projections)
NOTES:
  - Rates are percentages rounded half-up to 1 decimal, 0 for an empty set
  - "today" is resolved once per call so every count uses the same date
"""

from dataclasses import asdict, dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional

from . import dates, query
from .models import Task


@dataclass(frozen=True)
class Statistics:
    """Snapshot of task counts."""

    total: int = 0
    completed: int = 0
    incomplete: int = 0
    overdue: int = 0
    due_today: int = 0
    due_soon: int = 0
    with_due_date: int = 0
    root_tasks: int = 0
    child_tasks: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def _round_ratio(numerator: int, denominator: int) -> float:
    """numerator / denominator to 1 decimal, halves rounded away from zero."""
    ratio = Decimal(numerator) / Decimal(denominator)
    return float(ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _percent(part: int, whole: int) -> float:
    if whole == 0:
        return 0
    return _round_ratio(part * 100, whole)


def compute_statistics(tasks: Iterable[Task], today: Optional[date] = None) -> Statistics:
    tasks = list(tasks)
    today = today or dates.today()
    return Statistics(
        total=len(tasks),
        completed=len(query.completed_tasks(tasks)),
        incomplete=len(query.incomplete_tasks(tasks)),
        overdue=len(query.overdue_tasks(tasks, today)),
        due_today=len(query.tasks_due_today(tasks, today)),
        due_soon=len(query.tasks_due_soon(tasks, today=today)),
        with_due_date=len(query.tasks_with_due_date(tasks)),
        root_tasks=len(query.root_tasks(tasks)),
        child_tasks=len(query.child_tasks(tasks)),
    )


def completion_rate(tasks: Iterable[Task]) -> float:
    """Completed / total x 100."""
    tasks = list(tasks)
    return _percent(len(query.completed_tasks(tasks)), len(tasks))


def on_time_rate(tasks: Iterable[Task], today: Optional[date] = None) -> float:
    """Share of due-dated tasks that are completed or not yet overdue."""
    with_due = query.tasks_with_due_date(tasks)
    on_time = [t for t in with_due if t.completed or not t.is_overdue(today)]
    return _percent(len(on_time), len(with_due))


def depth_statistics(tasks: Iterable[Task]) -> Dict[str, float]:
    """
    Max and average depth across all tasks.

    Returns:
        {"max": int, "average": float}, both 0 for an empty set
    """
    depths = [t.depth for t in tasks]
    if not depths:
        return {"max": 0, "average": 0}
    return {"max": max(depths), "average": _round_ratio(sum(depths), len(depths))}


def children_count_by_parent(tasks: Iterable[Task]) -> Dict[int, int]:
    return {t.id: len(t.children) for t in query.parent_tasks(tasks)}


def summary(tasks: Iterable[Task], today: Optional[date] = None) -> Dict[str, Any]:
    """Nested overview used by the stats screens and the Markdown export."""
    tasks = list(tasks)
    stats = compute_statistics(tasks, today)
    return {
        "overview": f"{stats.completed}/{stats.total} tasks completed",
        "completion_rate": f"{completion_rate(tasks)}%",
        "on_time_rate": f"{on_time_rate(tasks, today)}%",
        "urgent": {
            "overdue": stats.overdue,
            "due_today": stats.due_today,
            "due_soon": stats.due_soon,
        },
        "structure": {
            "root_tasks": stats.root_tasks,
            "child_tasks": stats.child_tasks,
            "max_depth": depth_statistics(tasks)["max"],
        },
    }
