"""
FILE: tasktree/repl/main.py
PURPOSE: Interactive shell with navigation mode and command mode
EXPORTS:
  - main(db_path) - Entry point for the shell
  - run_repl(db_path) - Main loop
  - execute_command(result) -> bool
  - REPLContext / repl_context (session state)
DEPENDENCIES:
  - prompt_toolkit (PromptSession, history, completion, toolbar)
  - rich (formatted output)
  - tasktree.core.manager (TaskManager)
  - tasktree.repl.parser / completer / navigation / commands
NOTES:
  - One backed TaskManager is opened for the session and closed on exit
  - Starts in navigation mode on a terminal; '/' switches to command mode
    and 'nav' switches back
  - Without a TTY, runs command mode with plain input() only
  - Bottom toolbar shows live task counts
  - Ctrl+D, 'exit', 'quit' or 'q' exits
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

from ..core.manager import TaskManager
from .completer import create_completer
from .navigation import NavigationState, run_navigation
from .parser import ParseResult, parse_command

logger = logging.getLogger(__name__)

MODE_NAVIGATION = "navigation"
MODE_COMMAND = "command"

# Rich console for formatted output
console = Console()


# --- Session state ---


@dataclass
class REPLContext:
    """
    Persistent state for one shell session.

    Attributes:
        manager: Backed TaskManager (None before the session starts)
        mode: MODE_NAVIGATION or MODE_COMMAND
        nav: Selection state, kept across mode switches
        interactive: True when stdin/stdout are a terminal
        running: Cleared to end the session
    """
    manager: Optional[TaskManager] = None
    mode: str = MODE_COMMAND
    nav: NavigationState = field(default_factory=NavigationState)
    interactive: bool = False
    running: bool = True

    def reset(self, manager: TaskManager, interactive: bool) -> None:
        """Start a new session on manager."""
        self.manager = manager
        self.mode = MODE_NAVIGATION if interactive else MODE_COMMAND
        self.nav = NavigationState()
        self.interactive = interactive
        self.running = True


# Global shell context (reset at the start of every session)
repl_context = REPLContext()


PROMPT_TEXT = "tasktree> "


def get_bottom_toolbar() -> HTML:
    """
    Create bottom toolbar showing task counts.

    Returns:
        HTML formatted toolbar
    """
    if repl_context.manager is None:
        return HTML("<style bg='#444444' fg='#ffffff'> tasktree </style>")

    stats = repl_context.manager.statistics()
    text = (
        f"{stats.total} tasks | {stats.completed} done | "
        f"{stats.overdue} overdue | {stats.due_today} due today | "
        "'help' for commands, 'nav' to navigate"
    )
    return HTML(f"<style bg='#444444' fg='#ffffff'> {text} </style>")


def get_nav_header() -> str:
    stats = repl_context.manager.statistics()
    return (
        f"tasktree  {stats.total} tasks, {stats.completed} done, "
        f"{stats.overdue} overdue, {stats.due_soon} due soon"
    )


# Import command handlers from command modules
from .commands import (  # noqa: E402
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
    handle_stats_command,
    handle_export_command,
    handle_nav_command,
    handle_help_command,
    handle_clear_command,
    handle_nav_action,
)
from .display import display_tree  # noqa: E402


# Canonical command -> handler (aliases are resolved by the parser)
HANDLERS = {
    "add": handle_add_command,
    "add-child": handle_add_child_command,
    "complete": handle_complete_command,
    "uncomplete": handle_uncomplete_command,
    "edit": handle_edit_command,
    "due": handle_due_command,
    "url": handle_url_command,
    "move": handle_move_command,
    "delete": handle_delete_command,
    "show": handle_show_command,
    "ls": handle_ls_command,
    "overdue": handle_overdue_command,
    "soon": handle_soon_command,
    "stats": handle_stats_command,
    "export": handle_export_command,
    "nav": handle_nav_command,
    "help": handle_help_command,
    "clear": handle_clear_command,
}


def execute_command(result: ParseResult) -> bool:
    """
    Execute a parsed command.

    Args:
        result: Parsed command from parser

    Returns:
        True to continue the session, False to exit
    """
    command = result.command

    if command == "exit":
        console.print("[dim]Goodbye![/dim]")
        repl_context.running = False
        return False

    # Empty command (just Enter pressed)
    if not command:
        return True

    handler = HANDLERS.get(command)
    if handler:
        handler(result)
        console.print()
    else:
        console.print(f"[red]Unknown command:[/red] {command}")
        console.print("[dim]Type 'help' for available commands[/dim]")
        console.print()

    return True


def _read_line(session: Optional[PromptSession]) -> str:
    if session is None:
        return input(PROMPT_TEXT)
    return session.prompt(HTML("<b>tasktree&gt; </b>"))


def run_command_mode(session: Optional[PromptSession]) -> None:
    """Read and execute commands until exit or a switch to navigation."""
    display_tree(repl_context.manager, console)
    console.print()

    while repl_context.running and repl_context.mode == MODE_COMMAND:
        try:
            result = parse_command(_read_line(session))
            if not execute_command(result):
                break
        except KeyboardInterrupt:
            console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
        except EOFError:
            console.print()
            console.print("[dim]Goodbye![/dim]")
            repl_context.running = False


def run_navigation_mode() -> None:
    """Show the navigation list once and carry out the chosen action."""
    state = repl_context.nav
    state.refresh(repl_context.manager.root_tasks())

    action = run_navigation(state, header=get_nav_header)
    if action is None:
        repl_context.running = False
        return
    handle_nav_action(action)


def run_repl(db_path: Optional[Union[str, Path]] = None) -> None:
    """
    Main shell loop.

    Args:
        db_path: Database file (defaults to config.DB_PATH)

    Raises:
        StorageError: If the database can't be opened
    """
    interactive = sys.stdin.isatty() and sys.stdout.isatty()
    manager = TaskManager(db_path=db_path)
    repl_context.reset(manager, interactive)

    session = None
    if interactive:
        session = PromptSession(
            history=InMemoryHistory(),
            completer=create_completer(manager.all_tasks),
            complete_while_typing=True,
            bottom_toolbar=get_bottom_toolbar,
        )

    console.print("[bold cyan]tasktree[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if not interactive:
        console.print("[dim](Running in simple mode - no navigation or autocomplete)[/dim]")
    console.print()

    try:
        while repl_context.running:
            try:
                if repl_context.mode == MODE_NAVIGATION:
                    run_navigation_mode()
                else:
                    run_command_mode(session)
            except KeyboardInterrupt:
                continue
    finally:
        manager.close()
        logger.info("Shell session closed")


def main(db_path: Optional[Union[str, Path]] = None) -> None:
    """
    Entry point for the shell.

    Called when user runs: tasktree  (or tasktree repl)
    """
    run_repl(db_path)


if __name__ == "__main__":
    main()
