"""
FILE: tasktree/core/manager.py
PURPOSE: Business logic layer - identity cache and sole mutation gateway
EXPORTS:
  - TaskManager (class)
      add(title, parent_id, due_date, reference_url) -> Task
      find(task_id) -> Task | None
      delete(task_id) -> bool
      complete(task_id) / uncomplete(task_id) -> bool
      edit_title / edit_due_date / edit_reference_url -> bool
      move(task_id, new_parent_id) -> bool
      complete_all / uncomplete_all / delete_all(task_ids) -> bool
      root_tasks(), overdue_tasks(), tasks_due_soon(days), ... -> List[Task]
      statistics() -> Statistics, completion_rate(), on_time_rate(), ...
      reload(), close()
DEPENDENCIES:
  - tasktree.core.models (Task, validate_title)
  - tasktree.core.repository (TaskStore)
  - tasktree.core.query / tasktree.core.statistics (read side)
  - tasktree.core.exceptions (ParentNotFoundError, ValidationError)
NOTES:
  - Backed mode loads every task from the store at construction and
    persists each mutation immediately; ephemeral mode keeps tasks in
    memory only, with ids from a counter starting at 1
  - Mode is fixed at construction and checked through is_backed
  - Same id always yields the same Task object within one manager
  - Not-found (and move cycle rejection) is a False return; invalid input
    raises ValidationError before anything changes
  - move() persists the new parent_id
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from . import query, statistics
from .constants import DEFAULT_DUE_SOON_DAYS
from .dates import DateLike, coerce_date
from .exceptions import ParentNotFoundError
from .models import Task, validate_title
from .repository import TaskStore
from .statistics import Statistics

logger = logging.getLogger(__name__)


class TaskManager:
    """In-memory task tree backed (optionally) by a TaskStore."""

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        use_database: bool = True,
        store: Optional[TaskStore] = None,
    ):
        """
        Create a manager.

        Args:
            db_path: SQLite file for backed mode (defaults to config.DB_PATH)
            use_database: False for an ephemeral, memory-only manager
            store: Already-open store to use instead of opening db_path

        Raises:
            StorageError: If backed and the database can't be opened
        """
        self._tasks: Dict[int, Task] = {}
        self._next_id = 1
        self._store: Optional[TaskStore] = None

        if store is not None or use_database:
            self._store = store if store is not None else TaskStore(db_path)
            self._load_from_store()

    @property
    def is_backed(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> Optional[TaskStore]:
        return self._store

    @property
    def tasks(self) -> List[Task]:
        """Every known task, in insertion (id) order."""
        return list(self._tasks.values())

    def all_tasks(self) -> List[Task]:
        return self.tasks

    # --- Lifecycle ---

    def _load_from_store(self) -> None:
        self._tasks = {task.id: task for task in self._store.all()}
        logger.info("Loaded %d task(s)", len(self._tasks))

    def reload(self) -> None:
        """Discard the cache and re-read every task (backed mode only)."""
        if self.is_backed:
            self._load_from_store()

    def close(self) -> None:
        if self._store is not None:
            self._store.close()

    def __enter__(self) -> "TaskManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Internal helpers ---

    def _generate_next_id(self) -> int:
        if self.is_backed:
            return self._store.next_id()
        task_id = self._next_id
        self._next_id += 1
        return task_id

    def _persist(self, task: Task) -> None:
        if self.is_backed:
            self._store.update(task)

    def _forget(self, task: Task) -> None:
        if self.is_backed:
            self._store.delete(task.id)
        self._tasks.pop(task.id, None)

    # --- Lookup ---

    def find(self, task_id: Optional[int]) -> Optional[Task]:
        """
        Fetch a task by id.

        Checks the cache first; in backed mode a miss falls through to the
        store, the result is cached and wired to its stored parent and
        children.

        Returns:
            Task if found, None otherwise (including task_id=None)
        """
        if task_id is None:
            return None

        task = self._tasks.get(task_id)
        if task is None and self.is_backed:
            task = self._store.find(task_id)
            if task is not None:
                logger.debug("Cache miss for task %s, loaded from store", task_id)
                self._tasks[task.id] = task
                self._wire_loaded(task)
        return task

    def _wire_loaded(self, task: Task) -> None:
        # task must already be cached so the lookups below terminate
        parent = self.find(self._store.parent_id_of(task.id))
        if parent is not None:
            parent.add_child(task)

        for child_id in self._store.child_ids(task.id):
            child = self._tasks.get(child_id)
            if child is None:
                self.find(child_id)
            elif child.parent is None:
                task.add_child(child)

    def exists(self, task_id: int) -> bool:
        if self.is_backed:
            return self._store.exists(task_id)
        return task_id in self._tasks

    # --- Mutations ---

    def add(
        self,
        title: str,
        parent_id: Optional[int] = None,
        due_date: DateLike = None,
        reference_url: Optional[str] = None,
    ) -> Task:
        """
        Create a new task.

        Args:
            title: Task title (must not be empty or whitespace-only)
            parent_id: Optional parent task id
            due_date: Optional due date (date, datetime or date string)
            reference_url: Optional link or free text

        Returns:
            Newly created Task

        Raises:
            ValidationError: If title or due_date is invalid
            ParentNotFoundError: If parent_id doesn't exist
        """
        validate_title(title)
        due = coerce_date(due_date)

        parent = None
        if parent_id is not None:
            parent = self.find(parent_id)
            if parent is None:
                raise ParentNotFoundError(parent_id)

        task = Task(
            id=self._generate_next_id(),
            title=title,
            parent=parent,
            due_date=due,
            reference_url=reference_url,
        )

        if self.is_backed:
            try:
                task.id = self._store.insert(task)
            except Exception:
                if parent is not None:
                    parent.remove_child(task)
                raise
        self._tasks[task.id] = task

        logger.debug("Added task %s (parent=%s)", task.id, parent_id)
        return task

    def delete(self, task_id: int) -> bool:
        """
        Delete a task and its whole subtree.

        Returns:
            True if deleted, False if task_id doesn't exist

        Notes:
            - Descendants are collected before anything is removed
            - Removal runs deepest-first so no stored row is ever left
              pointing at an already-deleted parent
        """
        task = self.find(task_id)
        if task is None:
            return False

        descendants = task.descendants()
        for descendant in reversed(descendants):
            if descendant.parent is not None:
                descendant.parent.remove_child(descendant)
            self._forget(descendant)

        if task.parent is not None:
            task.parent.remove_child(task)
        self._forget(task)

        logger.debug("Deleted task %s and %d descendant(s)", task_id, len(descendants))
        return True

    def complete(self, task_id: int) -> bool:
        task = self.find(task_id)
        if task is None:
            return False
        task.complete()
        self._persist(task)
        return True

    def uncomplete(self, task_id: int) -> bool:
        task = self.find(task_id)
        if task is None:
            return False
        task.uncomplete()
        self._persist(task)
        return True

    def edit_title(self, task_id: int, new_title: str) -> bool:
        """
        Update a task's title.

        Returns:
            True if updated, False if task_id doesn't exist

        Raises:
            ValidationError: If new_title is empty (title stays unchanged)
        """
        task = self.find(task_id)
        if task is None:
            return False
        task.update_title(new_title)
        self._persist(task)
        return True

    def edit_due_date(self, task_id: int, new_due_date: DateLike) -> bool:
        """
        Set or clear (None) a task's due date.

        Raises:
            ValidationError: If new_due_date can't be read as a date
        """
        task = self.find(task_id)
        if task is None:
            return False
        task.update_due_date(new_due_date)
        self._persist(task)
        return True

    def edit_reference_url(self, task_id: int, new_url: Optional[str]) -> bool:
        task = self.find(task_id)
        if task is None:
            return False
        task.update_reference_url(new_url)
        self._persist(task)
        return True

    def move(self, task_id: int, new_parent_id: Optional[int]) -> bool:
        """
        Re-parent a task (None makes it a root).

        Returns:
            True if moved; False if the task or new parent doesn't exist, or
            if the new parent is the task itself or one of its descendants
        """
        task = self.find(task_id)
        if task is None:
            return False

        new_parent = None
        if new_parent_id is not None:
            new_parent = self.find(new_parent_id)
            if new_parent is None:
                return False
            if new_parent is task or any(a is task for a in new_parent.ancestors()):
                logger.debug("Rejected move of %s under its own subtree (%s)", task_id, new_parent_id)
                return False

        if task.parent is not None:
            task.parent.remove_child(task)
        if new_parent is not None:
            new_parent.add_child(task)

        self._persist(task)
        return True

    # --- Batch operations ---

    def complete_all(self, task_ids: Iterable[int]) -> bool:
        """Complete every id in order; True only if all succeeded."""
        results = [self.complete(task_id) for task_id in task_ids]
        return all(results)

    def uncomplete_all(self, task_ids: Iterable[int]) -> bool:
        results = [self.uncomplete(task_id) for task_id in task_ids]
        return all(results)

    def delete_all(self, task_ids: Iterable[int]) -> bool:
        """Delete every id in order; True only if all succeeded."""
        results = [self.delete(task_id) for task_id in task_ids]
        return all(results)

    # --- Queries ---

    def root_tasks(self) -> List[Task]:
        return query.root_tasks(self._tasks.values())

    def completed_tasks(self) -> List[Task]:
        return query.completed_tasks(self._tasks.values())

    def incomplete_tasks(self) -> List[Task]:
        return query.incomplete_tasks(self._tasks.values())

    def overdue_tasks(self, today: Optional[date] = None) -> List[Task]:
        return query.overdue_tasks(self._tasks.values(), today)

    def tasks_due_today(self, today: Optional[date] = None) -> List[Task]:
        return query.tasks_due_today(self._tasks.values(), today)

    def tasks_due_soon(
        self, days: int = DEFAULT_DUE_SOON_DAYS, today: Optional[date] = None
    ) -> List[Task]:
        return query.tasks_due_soon(self._tasks.values(), days, today)

    def tasks_with_due_date(self) -> List[Task]:
        return query.tasks_with_due_date(self._tasks.values())

    def child_tasks(self) -> List[Task]:
        return query.child_tasks(self._tasks.values())

    def parent_tasks(self) -> List[Task]:
        return query.parent_tasks(self._tasks.values())

    def children_of(self, parent_id: int) -> List[Task]:
        """Direct children of parent_id, or [] if it doesn't exist."""
        parent = self.find(parent_id)
        if parent is None:
            return []
        return list(parent.children)

    # --- Statistics ---

    def statistics(self, today: Optional[date] = None) -> Statistics:
        return statistics.compute_statistics(self._tasks.values(), today)

    def completion_rate(self) -> float:
        return statistics.completion_rate(self._tasks.values())

    def on_time_rate(self, today: Optional[date] = None) -> float:
        return statistics.on_time_rate(self._tasks.values(), today)

    def depth_statistics(self) -> Dict[str, float]:
        return statistics.depth_statistics(self._tasks.values())

    def children_count_by_parent(self) -> Dict[int, int]:
        return statistics.children_count_by_parent(self._tasks.values())

    def summary(self, today: Optional[date] = None) -> Dict[str, Any]:
        return statistics.summary(self._tasks.values(), today)
