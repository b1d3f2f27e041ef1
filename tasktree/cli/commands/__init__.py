"""
FILE: tasktree/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all command handlers for easy importing
from .tasks import (
    add,
    ls,
    show,
    done,
    undone,
    edit,
    due,
    url,
    mv,
    rm,
)
from .system import (
    version,
    help,
    repl,
    stats,
    export,
)

__all__ = [
    "add",
    "ls",
    "show",
    "done",
    "undone",
    "edit",
    "due",
    "url",
    "mv",
    "rm",
    "version",
    "help",
    "repl",
    "stats",
    "export",
]
