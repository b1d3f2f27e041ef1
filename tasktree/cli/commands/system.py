"""
FILE: tasktree/cli/commands/system.py
PURPOSE: System commands (version, help, repl, stats, export)
"""

import json
from pathlib import Path
from typing import Optional

import typer

# Import shared objects from main module
# These will be available after main.py imports this module
from ..main import app, console, error_console, open_manager, __version__
from ...config import Settings, load_settings
from ...core.exceptions import StorageError
from ...formatting import export_filename, to_markdown


@app.command()
def version():
    """Show tasktree version."""
    console.print(f"tasktree v{__version__}")


@app.command()
def help():
    """Show available commands and usage."""
    console.print("\n[bold cyan]tasktree[/bold cyan] - Terminal-native hierarchical task manager\n")
    console.print(f"[dim]Version {__version__}[/dim]\n")

    console.print("[bold]Usage:[/bold]")
    console.print("  tasktree [--db PATH] \\[command] \\[options]")
    console.print("  tasktree                    [dim]# Launch interactive shell (default)[/dim]\n")

    console.print("[bold]Commands:[/bold]")

    commands = [
        ("add", "Create a new task", 'tasktree add "Task title" [--parent ID] [--due DATE] [--url URL]'),
        ("ls", "Show the task tree", "tasktree ls [--overdue|--today|--soon N|--done|--todo]"),
        ("show", "View full task details", "tasktree show <task_id>"),
        ("done", "Mark task(s) as complete", "tasktree done <task_id(s)>"),
        ("undone", "Reopen task(s)", "tasktree undone <task_id(s)>"),
        ("edit", "Update task title", 'tasktree edit <task_id> "New title"'),
        ("due", "Set or clear a due date", "tasktree due <task_id> <date|none>"),
        ("url", "Set or clear a reference URL", "tasktree url <task_id> \\[url]"),
        ("mv", "Move task under a new parent", "tasktree mv <task_id> <parent_id|root>"),
        ("rm", "Delete task(s) and subtasks", "tasktree rm <task_id(s)>"),
        ("stats", "Show statistics", "tasktree stats [--json]"),
        ("export", "Export the tree as Markdown", "tasktree export [--output FILE]"),
        ("repl", "Launch interactive shell", "tasktree repl"),
        ("version", "Show version", "tasktree version"),
        ("help", "Show this help message", "tasktree help"),
    ]

    for cmd, desc, example in commands:
        console.print(f"  [green]{cmd:8}[/green] {desc}")
        console.print(f"           [dim]{example}[/dim]\n")

    console.print("[bold]Date formats:[/bold]")
    console.print("  YYYY-MM-DD, YYYYMMDD, MMDD (rolls to next year if past), today, tomorrow, none\n")

    console.print("[bold]Global Options:[/bold]")
    console.print("  [yellow]--db[/yellow]      Database file (default ~/.tasktree/tasks.db, or $TASKTREE_DB)")
    console.print("  [yellow]--json[/yellow]    Output as JSON (for scripting)")
    console.print("  [yellow]--raw[/yellow]     Plain text output (no colors)")
    console.print("  [yellow]--help[/yellow]    Show detailed help for a command\n")

    console.print("[bold]Examples:[/bold]")
    console.print("  tasktree                         # Launch shell (default)")
    console.print('  tasktree add "Write documentation"')
    console.print('  tasktree add "Outline" --parent 1 --due tomorrow')
    console.print("  tasktree done 3,5,7              # Complete multiple tasks")
    console.print("  tasktree due 5 1231              # Due on Dec 31")
    console.print("  tasktree mv 5 root               # Make task 5 top-level")
    console.print("  tasktree ls --soon 7 --json\n")


@app.command()
def repl(ctx: typer.Context):
    """
    Launch the interactive shell.

    The shell provides:
    - Navigation mode (arrow keys, single-key actions)
    - Command mode with history and autocomplete (Tab key)
    - Exit with Ctrl+D, 'q' or 'exit'

    Example:
        tasktree repl
    """
    # Import here to avoid loading shell dependencies for one-shot commands
    from ...repl import main as repl_main

    settings: Settings = ctx.obj if isinstance(ctx.obj, Settings) else load_settings()
    try:
        repl_main(settings.db_path)
    except StorageError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def stats(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show task statistics.

    Example:
        tasktree stats
        tasktree stats --json
    """
    with open_manager(ctx) as manager:
        if json_output:
            data = manager.statistics().to_dict()
            data["completion_rate"] = manager.completion_rate()
            data["on_time_rate"] = manager.on_time_rate()
            data["depth"] = manager.depth_statistics()
            console.print(json.dumps(data, indent=2))
            return

        summary = manager.summary()
        console.print("\n[bold cyan]Statistics[/bold cyan]\n")
        console.print(f"  {summary['overview']}")
        console.print(f"  Completion rate: [green]{summary['completion_rate']}[/green]")
        console.print(f"  On-time rate:    [green]{summary['on_time_rate']}[/green]\n")

        urgent = summary["urgent"]
        console.print(f"  [red]Overdue:[/red]   {urgent['overdue']}")
        console.print(f"  [bright_magenta]Due today:[/bright_magenta] {urgent['due_today']}")
        console.print(f"  [yellow]Due soon:[/yellow]  {urgent['due_soon']}\n")

        structure = summary["structure"]
        console.print(
            f"  [dim]Top-level: {structure['root_tasks']} | "
            f"Subtasks: {structure['child_tasks']} | "
            f"Max depth: {structure['max_depth']}[/dim]\n"
        )


@app.command()
def export(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write to FILE (.md appended if missing)"),
):
    """
    Export the task tree as Markdown.

    Prints to stdout unless --output is given.

    Example:
        tasktree export
        tasktree export --output weekly
    """
    with open_manager(ctx) as manager:
        content = to_markdown(manager)

    if output is None:
        console.print(content, markup=False, highlight=False, end="")
        return

    path = Path(export_filename(output))
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        error_console.print(f"[red]Error saving file:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Saved to {path}[/green]")
