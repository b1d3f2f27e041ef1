"""
FILE: tasktree/repl/commands/__init__.py
PURPOSE: Shell command handler modules
"""

# Export all command handlers for easy importing
from .tasks import (
    handle_add_command,
    handle_add_child_command,
    handle_complete_command,
    handle_uncomplete_command,
    handle_edit_command,
    handle_due_command,
    handle_url_command,
    handle_move_command,
    handle_delete_command,
    handle_show_command,
    handle_ls_command,
    handle_overdue_command,
    handle_soon_command,
)
from .system import (
    handle_stats_command,
    handle_export_command,
    handle_nav_command,
    handle_help_command,
    handle_clear_command,
)
from .navigation import handle_nav_action

__all__ = [
    "handle_add_command",
    "handle_add_child_command",
    "handle_complete_command",
    "handle_uncomplete_command",
    "handle_edit_command",
    "handle_due_command",
    "handle_url_command",
    "handle_move_command",
    "handle_delete_command",
    "handle_show_command",
    "handle_ls_command",
    "handle_overdue_command",
    "handle_soon_command",
    "handle_stats_command",
    "handle_export_command",
    "handle_nav_command",
    "handle_help_command",
    "handle_clear_command",
    "handle_nav_action",
]
