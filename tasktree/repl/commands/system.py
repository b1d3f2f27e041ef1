"""
FILE: tasktree/repl/commands/system.py
PURPOSE: System command handlers for the shell (stats, export, nav, help, clear)
"""

from pathlib import Path

from rich.panel import Panel

from ..main import MODE_NAVIGATION, console, repl_context
from ..parser import ParseResult
from ..display import display_stats
from ...formatting import export_filename, to_markdown


def handle_stats_command(result: ParseResult) -> None:
    """Handle 'stats' command - show statistics."""
    display_stats(repl_context.manager, console)


def save_markdown(filename: str) -> bool:
    """
    Write the Markdown export to filename (normalized to end in .md).

    Returns:
        True if the file was written
    """
    path = Path(export_filename(filename))
    try:
        path.write_text(to_markdown(repl_context.manager), encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error saving file:[/red] {e}")
        return False
    console.print(f"[green]✓ Saved to {path}[/green]")
    return True


def handle_export_command(result: ParseResult) -> None:
    """
    Handle 'export' command - Markdown export.

    Usage:
        export              # Print Markdown
        export weekly       # Save to weekly.md
    """
    if result.args:
        save_markdown(result.text)
        return
    console.print(to_markdown(repl_context.manager), markup=False, highlight=False)


def handle_nav_command(result: ParseResult) -> None:
    """Handle 'nav' command - switch to navigation mode."""
    if not repl_context.interactive:
        console.print("[red]Error:[/red] Navigation mode needs an interactive terminal")
        return
    repl_context.mode = MODE_NAVIGATION


def handle_help_command(result: ParseResult) -> None:
    """
    Handle 'help' command - show available commands.

    Args:
        result: Parsed command (unused)
    """
    help_text = """
[bold cyan]Commands:[/bold cyan]

  [cyan]add|a <title>[/cyan]                   Create a top-level task
  [cyan]add-child|ac <parent> <title>[/cyan]   Create a subtask
  [cyan]complete|c <id>[,<id>...][/cyan]       Mark task(s) as complete
  [cyan]uncomplete|uc <id>[,<id>...][/cyan]    Reopen task(s)
  [cyan]edit|e <id> <title>[/cyan]             Update task title
  [cyan]due <id> <date>[/cyan]                 Set or clear a due date
  [cyan]url <id> \\[url][/cyan]                  Set (or clear, with no url) a reference URL
  [cyan]move|mv <id> <parent|root>[/cyan]      Move task under a new parent
  [cyan]delete|d <id>[,<id>...][/cyan]         Delete task(s) and their subtasks
  [cyan]show|i <id>[/cyan]                     View full task details
  [cyan]ls[/cyan]                              Show the task tree
  [cyan]overdue[/cyan]                         List overdue tasks
  [cyan]soon \\[days][/cyan]                     List tasks due within N days (default 3)
  [cyan]stats[/cyan]                           Show statistics
  [cyan]export \\[file][/cyan]                   Print Markdown, or save it to a .md file
  [cyan]nav[/cyan]                             Switch to navigation mode
  [cyan]help[/cyan]                            Show this help
  [cyan]clear[/cyan]                           Clear the screen
  [cyan]exit|quit|q[/cyan]                     Exit

[bold cyan]Dates:[/bold cyan]

  [dim]YYYY-MM-DD, YYYYMMDD, MMDD (next year if already past), today, tomorrow, none[/dim]

[bold cyan]Navigation mode keys:[/bold cyan]

  [dim]↑/↓ or k/j   Move selection
  digits+Enter  Jump to task ID
  Enter         Action menu for the selected task
  c e d u       Complete/uncomplete, edit title, due date, URL
  a / A         Add top-level task / add child of selected task
  x             Delete selected task
  i             Details
  m             Markdown export
  /             Command mode
  q             Quit[/dim]

[bold cyan]Examples:[/bold cyan]

  [dim]a Write report
  ac 1 "Collect numbers"
  due 2 tomorrow
  due 2 1231
  c 1,2
  mv 2 root
  export weekly[/dim]
"""
    console.print(Panel(help_text, title="tasktree Help", border_style="cyan"))


def handle_clear_command(result: ParseResult) -> None:
    """
    Clear the screen.

    Args:
        result: Parsed command (no arguments used)
    """
    console.clear()
