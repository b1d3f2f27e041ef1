"""
FILE: tasktree/repl/display.py
PURPOSE: Display functions for the shell (tree, tables, details, stats)
EXPORTS:
  - display_tree() - Whole task tree
  - display_tasks_table() - Flat task list (query results)
  - display_task_details() - Full details panel for one task
  - display_stats() - Statistics summary
DEPENDENCIES:
  - rich (formatted output)
  - tasktree.core (Task, TaskManager)
  - tasktree.formatting (TaskFormatter)
NOTES:
  - Every function takes an optional console so tests can capture output
"""

from typing import List, Optional

from rich.console import Console
from rich.panel import Panel

from ..core.constants import STATUS_DUE_SOON, STATUS_DUE_TODAY, STATUS_OVERDUE
from ..core.manager import TaskManager
from ..core.models import Task
from ..formatting import TaskFormatter

# Create console instance here to avoid circular import
console = Console()

_STATUS_LABELS = {
    STATUS_OVERDUE: "[red]⚠ OVERDUE[/red]",
    STATUS_DUE_TODAY: "[bright_magenta]📅 Due today[/bright_magenta]",
    STATUS_DUE_SOON: "[yellow]⏰ Due soon[/yellow]",
}


def display_tree(manager: TaskManager, console_instance: Optional[Console] = None) -> None:
    """Print every root task and its subtree."""
    console_instance = console_instance or console
    roots = manager.root_tasks()
    if not roots:
        console_instance.print("[dim]No tasks yet. Use 'add <title>' to create one.[/dim]")
        return
    console_instance.print(TaskFormatter.create_tree(roots))


def display_tasks_table(
    tasks: List[Task], title: str = "Tasks", console_instance: Optional[Console] = None
) -> None:
    """
    Display tasks in a formatted table.

    Args:
        tasks: List of Task objects to display
        title: Table title
        console_instance: Optional Rich console instance (defaults to module console)
    """
    console_instance = console_instance or console
    if not tasks:
        console_instance.print("[dim]No tasks found[/dim]")
        return
    console_instance.print(TaskFormatter.create_table(tasks, title=title))


def display_task_details(task: Task, console_instance: Optional[Console] = None) -> None:
    """
    Display a details panel for one task.

    Shows status, due date with its classification, URL, parent, and
    children titles.
    """
    console_instance = console_instance or console

    lines = [
        f"[bold]ID:[/bold]          {task.id}",
        f"[bold]Title:[/bold]       {task.title}",
        f"[bold]Status:[/bold]      {'[green]✓ Completed[/green]' if task.completed else '○ Incomplete'}",
    ]

    if task.due_date:
        status = TaskFormatter.due_status(task)
        label = _STATUS_LABELS.get(status, "Scheduled")
        lines.append(f"[bold]Due Date:[/bold]    {task.due_date} ({label})")
    else:
        lines.append("[bold]Due Date:[/bold]    [dim](not set)[/dim]")

    if task.reference_url:
        lines.append(f"[bold]URL:[/bold]         {task.reference_url}")
    else:
        lines.append("[bold]URL:[/bold]         [dim](not set)[/dim]")

    if task.parent:
        lines.append(f"[bold]Parent Task:[/bold] {task.parent.title}")
    if task.children:
        lines.append(f"[bold]Child Tasks:[/bold] {', '.join(c.title for c in task.children)}")

    console_instance.print(Panel("\n".join(lines), title="Task Details", border_style="cyan"))


def display_stats(manager: TaskManager, console_instance: Optional[Console] = None) -> None:
    console_instance = console_instance or console
    summary = manager.summary()
    urgent = summary["urgent"]
    structure = summary["structure"]

    console_instance.print(f"[bold cyan]Statistics[/bold cyan]  {summary['overview']}")
    console_instance.print(
        f"  Completion: [green]{summary['completion_rate']}[/green] | "
        f"On time: [green]{summary['on_time_rate']}[/green]"
    )
    console_instance.print(
        f"  [red]Overdue: {urgent['overdue']}[/red] | "
        f"[bright_magenta]Due today: {urgent['due_today']}[/bright_magenta] | "
        f"[yellow]Due soon: {urgent['due_soon']}[/yellow]"
    )
    console_instance.print(
        f"  [dim]Top-level: {structure['root_tasks']} | Subtasks: {structure['child_tasks']} | "
        f"Max depth: {structure['max_depth']}[/dim]"
    )

