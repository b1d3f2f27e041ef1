"""
FILE: tasktree/cli/commands/tasks.py
PURPOSE: Task management commands (add, ls, show, done, undone, edit, due, url, mv, rm)
"""

import json
from typing import Optional

import typer
from rich.panel import Panel

from ..main import app, console, error_console, open_manager
from ...core.constants import DEFAULT_DUE_SOON_DAYS, ROOT_KEYWORDS
from ...core.dates import parse_date_string
from ...core.exceptions import NotFoundError, TaskTreeError, ValidationError
from ...formatting import TaskFormatter, parse_task_ids


def _parse_ids_or_exit(id_string: str):
    try:
        ids = parse_task_ids(id_string)
    except ValueError:
        error_console.print(f"[red]Error:[/red] Invalid task ID list: {id_string}")
        raise typer.Exit(1)
    if not ids:
        error_console.print("[red]Error:[/red] At least one task ID is required")
        raise typer.Exit(1)
    return ids


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Task title"),
    parent_id: Optional[int] = typer.Option(None, "--parent", "-p", help="Parent task ID"),
    due_date: Optional[str] = typer.Option(None, "--due", "-d", help="Due date (YYYY-MM-DD, YYYYMMDD, MMDD, today, tomorrow)"),
    reference_url: Optional[str] = typer.Option(None, "--url", "-u", help="Reference link"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new task.

    Example:
        tasktree add "Write documentation"
        tasktree add "Draft outline" --parent 3 --due tomorrow
    """
    with open_manager(ctx) as manager:
        try:
            due = parse_date_string(due_date) if due_date else None
            task = manager.add(title, parent_id=parent_id, due_date=due, reference_url=reference_url)
        except (ValidationError, NotFoundError) as e:
            error_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        except TaskTreeError as e:
            error_console.print(f"[red]Unexpected error:[/red] {e}")
            raise typer.Exit(1)

        if json_output:
            console.print(task.to_json())
        elif raw:
            console.print(f"{task.id}: {task.title}")
        elif task.parent:
            console.print(
                f"[green]✓ Created task [bold]#{task.id}[/bold] under #{task.parent.id}:[/green] {task.title}"
            )
        else:
            console.print(f"[green]✓ Created task [bold]#{task.id}[/bold]:[/green] {task.title}")


@app.command()
def ls(
    ctx: typer.Context,
    overdue: bool = typer.Option(False, "--overdue", help="Only overdue tasks"),
    today: bool = typer.Option(False, "--today", help="Only tasks due today"),
    soon: Optional[int] = typer.Option(None, "--soon", help=f"Only tasks due within N days (e.g. {DEFAULT_DUE_SOON_DAYS})"),
    done_only: bool = typer.Option(False, "--done", help="Only completed tasks"),
    todo_only: bool = typer.Option(False, "--todo", help="Only incomplete tasks"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Show the task tree, or a flat filtered list when a filter is given.

    Example:
        tasktree ls
        tasktree ls --overdue
        tasktree ls --soon 7 --json
    """
    with open_manager(ctx) as manager:
        filtered = None
        title = "Tasks"
        if overdue:
            filtered, title = manager.overdue_tasks(), "Overdue"
        elif today:
            filtered, title = manager.tasks_due_today(), "Due today"
        elif soon is not None:
            filtered, title = manager.tasks_due_soon(soon), f"Due within {soon} day(s)"
        elif done_only:
            filtered, title = manager.completed_tasks(), "Completed"
        elif todo_only:
            filtered, title = manager.incomplete_tasks(), "Incomplete"

        if json_output:
            tasks = filtered if filtered is not None else manager.tasks
            console.print(TaskFormatter.to_json_array(tasks))
            return

        if raw:
            if filtered is None:
                lines = TaskFormatter.to_raw_lines(manager.root_tasks())
            else:
                lines = [TaskFormatter.task_line(t) for t in filtered]
            for line in lines:
                console.print(line, markup=False, highlight=False)
            return

        if filtered is None:
            roots = manager.root_tasks()
            if not roots:
                console.print("[dim]No tasks yet. Use 'tasktree add <title>' to create one.[/dim]")
                return
            console.print(TaskFormatter.create_tree(roots, title=title))
        else:
            if not filtered:
                console.print("[dim]No tasks found[/dim]")
                return
            console.print(TaskFormatter.create_table(filtered, title=title))

        stats = manager.statistics()
        console.print(
            f"\n[dim]Total: {stats.total} | Completed: {stats.completed} | "
            f"Overdue: {stats.overdue} | Due today: {stats.due_today}[/dim]"
        )


@app.command()
def show(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    View full task details.

    Example:
        tasktree show 5
    """
    with open_manager(ctx) as manager:
        task = manager.find(task_id)
        if task is None:
            error_console.print(f"[red]Error:[/red] Task {task_id} not found")
            raise typer.Exit(1)

        if json_output:
            console.print(task.to_json())
            return

        lines = [
            f"[bold]ID:[/bold] {task.id}",
            f"[bold]Status:[/bold] {'[green]completed[/green]' if task.completed else 'open'}",
            f"[bold]Due:[/bold] {task.due_date or '-'}",
        ]
        days = task.days_until_due()
        if days is not None and not task.completed:
            lines.append(f"[bold]Days left:[/bold] {days}")
        lines.append(f"[bold]URL:[/bold] {task.reference_url if task.reference_url is not None else '-'}")
        lines.append(f"[bold]Parent:[/bold] {f'#{task.parent.id} {task.parent.title}' if task.parent else '-'}")
        lines.append(f"[bold]Depth:[/bold] {task.depth}")
        if task.children:
            lines.append("[bold]Children:[/bold] " + ", ".join(f"#{c.id}" for c in task.children))
        lines.append(f"[dim]Created: {task.created_at or '-'} | Updated: {task.updated_at or '-'}[/dim]")

        console.print(Panel("\n".join(lines), title=task.title, border_style="cyan"))


@app.command()
def done(
    ctx: typer.Context,
    task_ids: str = typer.Argument(..., help="Task ID(s), comma-separated"),
):
    """
    Mark task(s) as complete.

    Example:
        tasktree done 5
        tasktree done 3,5,7
    """
    ids = _parse_ids_or_exit(task_ids)
    with open_manager(ctx) as manager:
        failed = [task_id for task_id in ids if not manager.complete(task_id)]
        completed = len(ids) - len(failed)
        if completed:
            console.print(f"[green]✓ Completed {completed} task(s)[/green]")
        for task_id in failed:
            error_console.print(f"[red]Error:[/red] Task {task_id} not found")
        if failed:
            raise typer.Exit(1)


@app.command()
def undone(
    ctx: typer.Context,
    task_ids: str = typer.Argument(..., help="Task ID(s), comma-separated"),
):
    """
    Mark task(s) as not complete.

    Example:
        tasktree undone 5
    """
    ids = _parse_ids_or_exit(task_ids)
    with open_manager(ctx) as manager:
        failed = [task_id for task_id in ids if not manager.uncomplete(task_id)]
        reopened = len(ids) - len(failed)
        if reopened:
            console.print(f"[green]✓ Reopened {reopened} task(s)[/green]")
        for task_id in failed:
            error_console.print(f"[red]Error:[/red] Task {task_id} not found")
        if failed:
            raise typer.Exit(1)


@app.command()
def edit(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    title: str = typer.Argument(..., help="New title"),
):
    """
    Update task title.

    Example:
        tasktree edit 5 "Updated title"
    """
    with open_manager(ctx) as manager:
        try:
            updated = manager.edit_title(task_id, title)
        except ValidationError as e:
            error_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        if not updated:
            error_console.print(f"[red]Error:[/red] Task {task_id} not found")
            raise typer.Exit(1)
        console.print(f"[green]✓ Updated task [bold]#{task_id}[/bold]:[/green] {title}")


@app.command()
def due(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    date_text: str = typer.Argument(..., metavar="DATE", help="YYYY-MM-DD, YYYYMMDD, MMDD, today, tomorrow, none"),
):
    """
    Set or clear a task's due date.

    Example:
        tasktree due 5 tomorrow
        tasktree due 5 1231
        tasktree due 5 none
    """
    with open_manager(ctx) as manager:
        try:
            due_date = parse_date_string(date_text)
            updated = manager.edit_due_date(task_id, due_date)
        except ValidationError as e:
            error_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        if not updated:
            error_console.print(f"[red]Error:[/red] Task {task_id} not found")
            raise typer.Exit(1)

        if due_date is None:
            console.print(f"[green]✓ Due date cleared for task #{task_id}[/green]")
        else:
            console.print(f"[green]✓ Due date set to {due_date} for task #{task_id}[/green]")


@app.command()
def url(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    reference_url: Optional[str] = typer.Argument(None, metavar="URL", help="Link to store (omit to clear)"),
):
    """
    Set or clear a task's reference URL.

    Example:
        tasktree url 5 https://example.com/issue/42
        tasktree url 5
    """
    with open_manager(ctx) as manager:
        if not manager.edit_reference_url(task_id, reference_url):
            error_console.print(f"[red]Error:[/red] Task {task_id} not found")
            raise typer.Exit(1)
        if reference_url is None:
            console.print(f"[green]✓ URL cleared for task #{task_id}[/green]")
        else:
            console.print(f"[green]✓ URL set for task #{task_id}:[/green] {reference_url}")


@app.command()
def mv(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
    parent: str = typer.Argument(..., help="New parent ID, or 'root'"),
):
    """
    Move task under another parent (or to the top level).

    Example:
        tasktree mv 5 2
        tasktree mv 5 root
    """
    if parent.lower() in ROOT_KEYWORDS:
        new_parent_id = None
    else:
        try:
            new_parent_id = int(parent)
        except ValueError:
            error_console.print(f"[red]Error:[/red] Invalid parent ID: {parent}")
            raise typer.Exit(1)

    with open_manager(ctx) as manager:
        if not manager.move(task_id, new_parent_id):
            error_console.print(
                f"[red]Error:[/red] Cannot move task {task_id} under {parent} "
                "(task not found, parent not found, or parent is inside the task's subtree)"
            )
            raise typer.Exit(1)
        target = "top level" if new_parent_id is None else f"#{new_parent_id}"
        console.print(f"[green]✓ Moved task [bold]#{task_id}[/bold] to {target}[/green]")


@app.command()
def rm(
    ctx: typer.Context,
    task_ids: str = typer.Argument(..., help="Task ID(s), comma-separated"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Delete task(s) together with all their subtasks.

    Example:
        tasktree rm 5
        tasktree rm 3,5,7
    """
    ids = _parse_ids_or_exit(task_ids)
    with open_manager(ctx) as manager:
        results = {task_id: manager.delete(task_id) for task_id in ids}

        if json_output:
            console.print(json.dumps({"deleted": [i for i, ok in results.items() if ok],
                                      "not_found": [i for i, ok in results.items() if not ok]}, indent=2))
        else:
            for task_id, ok in results.items():
                if ok:
                    console.print(f"[green]✓ Deleted task {task_id}[/green]")
                else:
                    error_console.print(f"[red]Error:[/red] Task {task_id} not found")

        if not all(results.values()):
            raise typer.Exit(1)
