"""
FILE: tasktree/repl/__init__.py
PURPOSE: Interactive shell package (navigation mode + command mode)
EXPORTS:
  - main(db_path) (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (line editing, key bindings)
  - rich (formatted output)
  - tasktree.core.manager (TaskManager)
NOTES:
  - Entry point for interactive mode
"""

from .main import main

__all__ = ["main"]
