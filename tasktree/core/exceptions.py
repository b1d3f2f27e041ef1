"""
FILE: tasktree/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - TaskTreeError (base exception)
  - ValidationError
  - NotFoundError
  - ParentNotFoundError
  - StorageError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from TaskTreeError for easy catching
  - Exceptions include context (IDs, paths) for helpful error messages
  - Core raises these, UI layers catch and display
  - Edit/delete/complete/move report "not found" as a False return, not
    as an exception; only add() with a missing parent raises
"""


class TaskTreeError(Exception):
    """Base exception for all tasktree errors."""
    pass


class ValidationError(TaskTreeError):
    """Input validation failed (empty title, unparseable date)."""

    def __init__(self, message: str):
        super().__init__(message)


class NotFoundError(TaskTreeError):
    """A referenced entity doesn't exist."""
    pass


class ParentNotFoundError(NotFoundError):
    """Parent task given to add() doesn't exist."""

    def __init__(self, parent_id: int):
        self.parent_id = parent_id
        super().__init__(f"Parent task not found: {parent_id}")


class StorageError(TaskTreeError):
    """Database file could not be opened, created or migrated."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open task database at {path}: {reason}")
