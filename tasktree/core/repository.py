"""
FILE: tasktree/core/repository.py
PURPOSE: SQLite persistence for tasks and tree reconstruction from flat rows
EXPORTS:
  - TaskStore (class)
      insert(task) -> int
      update(task) -> None
      delete(task_id) -> None
      find(task_id) -> Task | None
      all() -> List[Task]
      roots() -> List[Task]
      children_of(parent_id) -> List[Task]
      parent_id_of(task_id) -> int | None
      child_ids(parent_id) -> List[int]
      exists(task_id) -> bool
      next_id() -> int
      clear_all() -> None
      close() -> None
  - build_tree(rows) -> Dict[int, Task]
DEPENDENCIES:
  - sqlite3 (stdlib)
  - pathlib (stdlib)
  - datetime (stdlib)
  - tasktree.config (default DB_PATH)
  - tasktree.core.models (Task)
  - tasktree.core.migrations (apply_migrations)
  - tasktree.core.exceptions (StorageError)
NOTES:
  - One connection per store, opened at construction and held until close()
  - Auto-creates the parent directory and migrates the schema on open
  - Returns domain objects (Task), never raw rows
  - Uses row_factory for dict-like row access
  - Every mutating call commits immediately; no batching
  - delete() removes exactly one row: cascading is the manager's job
  - Rows whose parent_id does not resolve become root tasks
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .. import config
from .exceptions import StorageError
from .migrations import apply_migrations
from .models import Task

logger = logging.getLogger(__name__)


def build_tree(rows: Iterable[sqlite3.Row]) -> Dict[int, Task]:
    """
    Reconstruct tasks and their parent/child edges from flat rows.

    All Task objects are built first, then each row's parent_id is resolved
    against the complete id -> Task map. Children keep row order.

    Args:
        rows: Rows from the tasks table, in the order children should appear

    Returns:
        Mapping of id to wired Task, in row order
    """
    rows = list(rows)
    tasks: Dict[int, Task] = {}
    for row in rows:
        task = Task.from_row(row)
        tasks[task.id] = task

    for row in rows:
        parent_id = row["parent_id"]
        if parent_id is None:
            continue
        parent = tasks.get(int(parent_id))
        if parent is None:
            logger.warning(
                "Task %s references missing parent %s; treating it as a root task",
                row["id"],
                parent_id,
            )
            continue
        parent.add_child(tasks[int(row["id"])])

    return tasks


class TaskStore:
    """Durable task rows in a single-file SQLite database."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Open (or create) the database and migrate it.

        Args:
            db_path: SQLite file path (defaults to ~/.tasktree/tasks.db)

        Raises:
            StorageError: If the file or its directory can't be created/opened
        """
        self.db_path = Path(db_path) if db_path else config.DB_PATH
        self._conn: Optional[sqlite3.Connection] = None

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        except (OSError, sqlite3.Error) as e:
            raise StorageError(self.db_path, str(e)) from e

        conn.row_factory = sqlite3.Row
        try:
            applied = apply_migrations(conn)
        except sqlite3.Error as e:
            conn.close()
            raise StorageError(self.db_path, str(e)) from e

        self._conn = conn
        logger.info("Opened task store %s (%d migration(s) applied)", self.db_path, applied)

    # --- Lifecycle ---

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError(self.db_path, "store is closed")
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Closed task store %s", self.db_path)

    def __enter__(self) -> "TaskStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Writes ---

    def insert(self, task: Task) -> int:
        """
        Insert a task row with its current state.

        Args:
            task: Task to write; task.id is used when set, otherwise SQLite
                assigns one

        Returns:
            The durable id of the new row

        Note:
            Sets created_at and updated_at on both the row and the task.
        """
        now = datetime.now().isoformat()
        cursor = self.conn.execute(
            """
            INSERT INTO tasks (id, title, completed, parent_id, due_date,
                               reference_url, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.id,
                task.title,
                1 if task.completed else 0,
                task.parent.id if task.parent else None,
                task.due_date.isoformat() if task.due_date else None,
                task.reference_url,
                now,
                now,
            ),
        )
        self.conn.commit()

        task.created_at = now
        task.updated_at = now
        logger.debug("Inserted task %s", cursor.lastrowid)
        return cursor.lastrowid

    def update(self, task: Task) -> None:
        """
        Overwrite the row matching task.id with the task's current fields.

        Note:
            Automatically updates updated_at timestamp.
            Writes parent_id, so re-parenting is persisted too.
        """
        now = datetime.now().isoformat()
        self.conn.execute(
            """
            UPDATE tasks
            SET title = ?,
                completed = ?,
                parent_id = ?,
                due_date = ?,
                reference_url = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                task.title,
                1 if task.completed else 0,
                task.parent.id if task.parent else None,
                task.due_date.isoformat() if task.due_date else None,
                task.reference_url,
                now,
                task.id,
            ),
        )
        self.conn.commit()
        task.updated_at = now
        logger.debug("Updated task %s", task.id)

    def delete(self, task_id: int) -> None:
        """Delete exactly one row. Children rows are left untouched."""
        self.conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        self.conn.commit()
        logger.debug("Deleted task %s", task_id)

    def clear_all(self) -> None:
        """Delete every row."""
        self.conn.execute("DELETE FROM tasks")
        self.conn.commit()
        logger.info("Cleared all tasks from %s", self.db_path)

    # --- Reads ---

    def find(self, task_id: int) -> Optional[Task]:
        """
        Fetch single task by ID.

        Returns:
            Parent-less, child-less Task if found, None otherwise
        """
        row = self.conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return Task.from_row(row) if row else None

    def _fetch_tree(self) -> Dict[int, Task]:
        rows = self.conn.execute("SELECT * FROM tasks ORDER BY id").fetchall()
        return build_tree(rows)

    def all(self) -> List[Task]:
        """
        List all tasks with parent/child edges wired.

        Returns:
            Every task, ordered by id
        """
        return list(self._fetch_tree().values())

    def roots(self) -> List[Task]:
        """
        List root tasks, each with its full subtree wired.

        Note:
            Includes rows whose parent_id points at a missing task.
        """
        return [task for task in self._fetch_tree().values() if task.is_root]

    def children_of(self, parent_id: int) -> List[Task]:
        """
        List direct children of parent_id, wired against the whole table.

        Returns:
            The children (each with parent and subtree set), or [] if the
            parent doesn't exist
        """
        parent = self._fetch_tree().get(parent_id)
        return list(parent.children) if parent else []

    def parent_id_of(self, task_id: int) -> Optional[int]:
        """Stored parent_id of a row, None for roots and missing rows."""
        row = self.conn.execute(
            "SELECT parent_id FROM tasks WHERE id = ?", (task_id,)
        ).fetchone()
        if row is None or row["parent_id"] is None:
            return None
        return int(row["parent_id"])

    def child_ids(self, parent_id: int) -> List[int]:
        """Ids of rows whose parent_id is parent_id, in id order."""
        rows = self.conn.execute(
            "SELECT id FROM tasks WHERE parent_id = ? ORDER BY id", (parent_id,)
        ).fetchall()
        return [int(row["id"]) for row in rows]

    def exists(self, task_id: int) -> bool:
        """Check for a row without building a Task."""
        row = self.conn.execute(
            "SELECT 1 FROM tasks WHERE id = ? LIMIT 1", (task_id,)
        ).fetchone()
        return row is not None

    def next_id(self) -> int:
        """Return max(id) + 1, or 1 for an empty table."""
        row = self.conn.execute("SELECT COALESCE(MAX(id), 0) + 1 FROM tasks").fetchone()
        return int(row[0])
