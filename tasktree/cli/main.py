"""
FILE: tasktree/cli/main.py
PURPOSE: Typer-based CLI for one-shot task management commands
EXPORTS:
  - app (Typer application)
  - main() (entry point)
  - open_manager(ctx) - context manager yielding a backed TaskManager
  - version() / help() / repl() / stats() / export()
  - add() / ls() / show() / done() / undone() / edit() / due() / url()
    / mv() / rm()
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - tasktree.config (settings, database path)
  - tasktree.logging_setup (log configuration)
  - tasktree.core (TaskManager, exceptions)
  - tasktree.repl (interactive mode)
NOTES:
  - Global --db option selects the database file for every command
  - Running with no command launches the interactive shell
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
  - The manager is opened per command and always closed, even on errors
"""

import sys
from contextlib import contextmanager
from typing import Iterator, Optional

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from rich.console import Console

from .. import __version__
from ..config import Settings, load_settings
from ..core.exceptions import StorageError
from ..core.manager import TaskManager
from ..logging_setup import setup_logging

# Typer app setup
app = typer.Typer(
    name="tasktree",
    help="Terminal-native hierarchical task manager",
    add_completion=False,
)

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)


@app.callback(invoke_without_command=True)
def default_command(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(None, "--db", help="Path to the task database"),
):
    """
    Resolve settings, configure logging, and launch the shell when no
    subcommand is given.
    """
    settings = load_settings(db)
    setup_logging(settings.log_dir, console_level=settings.log_level)
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        from ..repl import main as repl_main
        try:
            repl_main(settings.db_path)
        except StorageError as e:
            error_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)


@contextmanager
def open_manager(ctx: typer.Context) -> Iterator[TaskManager]:
    """
    Open a backed TaskManager for one command.

    Exits with code 1 (after printing the reason) if the database can't be
    opened. The manager is closed on every exit path.
    """
    settings: Settings = ctx.obj if isinstance(ctx.obj, Settings) else load_settings()
    try:
        manager = TaskManager(db_path=settings.db_path)
    except StorageError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    try:
        yield manager
    finally:
        manager.close()


# Import command modules to register commands with app
# Commands are decorated with @app.command() in their modules
from .commands import (  # noqa: E402
    # System commands
    version,
    help,
    repl,
    stats,
    export,
    # Task commands
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


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
