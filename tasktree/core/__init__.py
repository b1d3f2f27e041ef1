"""
FILE: tasktree/core/__init__.py
PURPOSE: Task tree model, persistence, manager and read-side queries
EXPORTS:
  - Task, TaskManager, TaskStore, Statistics
  - TaskTreeError, ValidationError, NotFoundError, ParentNotFoundError,
    StorageError
  - parse_date_string
"""

from .dates import parse_date_string
from .exceptions import (
    NotFoundError,
    ParentNotFoundError,
    StorageError,
    TaskTreeError,
    ValidationError,
)
from .manager import TaskManager
from .models import Task
from .repository import TaskStore
from .statistics import Statistics

__all__ = [
    "Task",
    "TaskManager",
    "TaskStore",
    "Statistics",
    "TaskTreeError",
    "ValidationError",
    "NotFoundError",
    "ParentNotFoundError",
    "StorageError",
    "parse_date_string",
]
