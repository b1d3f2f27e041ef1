"""
FILE: tasktree/core/migrations.py
PURPOSE: Idempotent schema migrations for the tasks table
EXPORTS:
  - MIGRATIONS: ordered list of Migration
  - SCHEMA_VERSION: latest version number
  - apply_migrations(conn) -> int
DEPENDENCIES:
  - sqlite3 (stdlib)
  - logging (stdlib)
NOTES:
  - Version tracked in PRAGMA user_version
  - Column additions also check PRAGMA table_info, so databases created
    before versioning are upgraded without "duplicate column" failures
  - parent_id is declared as a self reference, but foreign key enforcement
    stays off: cascading delete belongs to the task manager
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    apply: Callable[[sqlite3.Connection], None]


def _column_names(conn: sqlite3.Connection, table: str) -> List[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()]


def _create_tasks_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            completed INTEGER NOT NULL DEFAULT 0 CHECK(completed IN (0, 1)),
            parent_id INTEGER REFERENCES tasks(id),
            due_date TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_parent_id ON tasks(parent_id)")


def _add_reference_url(conn: sqlite3.Connection) -> None:
    if "reference_url" in _column_names(conn, "tasks"):
        return
    conn.execute("ALTER TABLE tasks ADD COLUMN reference_url TEXT")


MIGRATIONS = [
    Migration(1, "create tasks table", _create_tasks_table),
    Migration(2, "add tasks.reference_url", _add_reference_url),
]

SCHEMA_VERSION = MIGRATIONS[-1].version


def apply_migrations(conn: sqlite3.Connection) -> int:
    """
    Bring the schema up to SCHEMA_VERSION.

    Safe to call on every start: already-applied migrations are skipped.

    Returns:
        Number of migrations applied in this call

    Raises:
        sqlite3.Error: If a migration fails (the failing step is rolled back)
    """
    current = conn.execute("PRAGMA user_version").fetchone()[0]
    applied = 0

    for migration in MIGRATIONS:
        if migration.version <= current:
            continue
        try:
            migration.apply(conn)
            # PRAGMA doesn't accept bound parameters
            conn.execute(f"PRAGMA user_version = {int(migration.version)}")
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            logger.exception("Migration %d (%s) failed", migration.version, migration.description)
            raise
        logger.info("Applied migration %d: %s", migration.version, migration.description)
        applied += 1

    return applied
