"""
FILE: tasktree/core/models.py
PURPOSE: Task domain model - a node in the task tree
EXPORTS:
  - Task (dataclass)
DEPENDENCIES:
  - dataclasses (stdlib)
  - datetime (stdlib)
  - json (stdlib)
  - typing (stdlib)
  - tasktree.core.dates (today provider, date coercion)
  - tasktree.core.exceptions (ValidationError)
NOTES:
  - Task has from_row() for SQLite row conversion and to_json() for output
  - Equality is identity (eq=False): the manager's cache relies on one
    object per id
  - parent is a non-owning back reference; children is the owning list
  - Construction does not validate the title, only update_title() does;
    TaskManager.add() validates before constructing
  - Date classifications take an optional "today" for deterministic checks
"""

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from . import dates
from .constants import DEFAULT_DUE_SOON_DAYS
from .exceptions import ValidationError


def validate_title(title: Optional[str]) -> str:
    """
    Check that a title is usable.

    Raises:
        ValidationError: If title is None, empty or whitespace-only
    """
    if title is None or not title.strip():
        raise ValidationError("Title cannot be empty")
    return title


@dataclass(eq=False)
class Task:
    """A task with completion state, optional due date and subtasks."""

    id: Optional[int]
    title: str
    parent: Optional["Task"] = field(default=None, repr=False)
    due_date: Optional[date] = None
    reference_url: Optional[str] = None
    completed: bool = False
    children: List["Task"] = field(default_factory=list, repr=False)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.due_date = dates.coerce_date(self.due_date)
        parent = self.parent
        if parent is not None:
            self.parent = None
            parent.add_child(self)

    @classmethod
    def from_row(cls, row) -> "Task":
        """
        Convert SQLite row to Task object.

        The returned task is parent-less and child-less; wiring is the
        repository's job.
        """
        # reference_url arrived in migration 2
        try:
            reference_url = row["reference_url"]
        except (KeyError, IndexError):
            reference_url = None

        due_date = row["due_date"]
        return cls(
            id=int(row["id"]),
            title=str(row["title"]),
            due_date=date.fromisoformat(due_date) if due_date else None,
            reference_url=reference_url,
            completed=bool(row["completed"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # --- State changes ---

    def complete(self) -> None:
        self.completed = True

    def uncomplete(self) -> None:
        self.completed = False

    def update_title(self, new_title: str) -> None:
        """
        Replace the title.

        Raises:
            ValidationError: If new_title is empty or whitespace-only
        """
        self.title = validate_title(new_title)

    def update_due_date(self, new_due_date) -> None:
        """
        Set or clear the due date.

        Args:
            new_due_date: date, datetime, date string, or None to clear

        Raises:
            ValidationError: If the value cannot be read as a date
                (the current due date is left untouched)
        """
        self.due_date = dates.coerce_date(new_due_date)

    def update_reference_url(self, new_url: Optional[str]) -> None:
        # "" and None are kept distinct on purpose
        self.reference_url = new_url

    # --- Hierarchy ---

    def add_child(self, task: "Task") -> None:
        """Append task to children (no-op if present) and point it back here."""
        if any(child is task for child in self.children):
            return
        self.children.append(task)
        if task.parent is not self:
            task.parent = self

    def remove_child(self, task: "Task") -> None:
        """Drop task from children and clear its back reference if it pointed here."""
        self.children = [child for child in self.children if child is not task]
        if task.parent is self:
            task.parent = None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def depth(self) -> int:
        """Distance from the root (root = 0)."""
        if self.parent is None:
            return 0
        return self.parent.depth + 1

    def ancestors(self) -> List["Task"]:
        """Ancestors ordered nearest first; empty for a root."""
        result = []
        node = self.parent
        while node is not None:
            result.append(node)
            node = node.parent
        return result

    def descendants(self) -> List["Task"]:
        """Every transitive child exactly once, depth-first pre-order."""
        result = []
        for child in self.children:
            result.append(child)
            result.extend(child.descendants())
        return result

    def siblings(self) -> List["Task"]:
        if self.parent is None:
            return []
        return [task for task in self.parent.children if task is not self]

    # --- Due date classification ---

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """Due strictly before today and not completed."""
        if self.due_date is None or self.completed:
            return False
        return self.due_date < (today or dates.today())

    def is_due_today(self, today: Optional[date] = None) -> bool:
        """Due exactly today, completed or not."""
        if self.due_date is None:
            return False
        return self.due_date == (today or dates.today())

    def is_due_soon(
        self, days: int = DEFAULT_DUE_SOON_DAYS, today: Optional[date] = None
    ) -> bool:
        """Due within [today, today + days] and not completed."""
        if self.due_date is None or self.completed:
            return False
        today = today or dates.today()
        return 0 <= (self.due_date - today).days <= days

    def days_until_due(self, today: Optional[date] = None) -> Optional[int]:
        """Signed day count to the due date (negative when past), None if unset."""
        if self.due_date is None:
            return None
        return (self.due_date - (today or dates.today())).days

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "reference_url": self.reference_url,
            "parent_id": self.parent.id if self.parent else None,
            "children": [child.id for child in self.children],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_json(self) -> str:
        """Serialize task to JSON string."""
        return json.dumps(self.to_dict(), indent=2)
