"""
FILE: tasktree/repl/commands/tasks.py
PURPOSE: Task command handlers for the shell
"""

from typing import List, Optional

from ..main import console, repl_context
from ..parser import ParseResult
from ..display import display_task_details, display_tasks_table, display_tree
from ...core.constants import DATE_FORMATS_HELP, DEFAULT_DUE_SOON_DAYS, ROOT_KEYWORDS
from ...core.dates import parse_date_string
from ...core.exceptions import NotFoundError, TaskTreeError, ValidationError
from ...formatting import parse_task_ids


def _parse_id(value: Optional[str], usage: str) -> Optional[int]:
    """Parse one task ID argument, printing usage on failure."""
    if value is None:
        console.print("[red]Error:[/red] Task ID required")
        console.print(f"[dim]Usage: {usage}[/dim]")
        return None
    try:
        return int(value)
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid task ID: {value}")
        return None


def _parse_ids(result: ParseResult, usage: str) -> List[int]:
    """Parse "1,2,3" or "1 2 3" into IDs, printing usage on failure."""
    if not result.args:
        console.print("[red]Error:[/red] Task ID required")
        console.print(f"[dim]Usage: {usage}[/dim]")
        return []
    try:
        return parse_task_ids(",".join(result.args))
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid task ID list: {' '.join(result.args)}")
        return []


def handle_add_command(result: ParseResult) -> None:
    """
    Handle 'add' command - create a top-level task.

    Usage:
        add Buy groceries
        a "Task with spaces"
    """
    if not result.args:
        console.print("[red]Error:[/red] Task title required")
        console.print("[dim]Usage: add <title>[/dim]")
        return

    try:
        task = repl_context.manager.add(result.text)
        console.print(f"[green]✓ Created task [bold]#{task.id}[/bold]:[/green] {task.title}")
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
    except TaskTreeError as e:
        console.print(f"[red]Unexpected error:[/red] {e}")


def handle_add_child_command(result: ParseResult) -> None:
    """
    Handle 'add-child' command - create a subtask.

    Usage:
        add-child 3 Draft outline
        ac 3 "Draft outline"
    """
    usage = "add-child <parent_id> <title>"
    parent_id = _parse_id(result.args[0] if result.args else None, usage)
    if parent_id is None:
        return

    title = " ".join(result.args[1:])
    if not title.strip():
        console.print("[red]Error:[/red] Title is required")
        console.print(f"[dim]Usage: {usage}[/dim]")
        return

    try:
        task = repl_context.manager.add(title, parent_id=parent_id)
        console.print(f"[green]✓ Created task [bold]#{task.id}[/bold] under #{parent_id}:[/green] {task.title}")
    except (ValidationError, NotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
    except TaskTreeError as e:
        console.print(f"[red]Unexpected error:[/red] {e}")


def handle_complete_command(result: ParseResult) -> None:
    """
    Handle 'complete' command - mark task(s) complete.

    Usage:
        complete 42
        c 1,2,3
    """
    for task_id in _parse_ids(result, "complete <task_id(s)>"):
        if repl_context.manager.complete(task_id):
            console.print(f"[green]✓ Task {task_id} completed[/green]")
        else:
            console.print(f"[red]Error:[/red] Task {task_id} not found")


def handle_uncomplete_command(result: ParseResult) -> None:
    """
    Handle 'uncomplete' command - reopen task(s).

    Usage:
        uncomplete 42
        uc 1,2
    """
    for task_id in _parse_ids(result, "uncomplete <task_id(s)>"):
        if repl_context.manager.uncomplete(task_id):
            console.print(f"[green]✓ Task {task_id} reopened[/green]")
        else:
            console.print(f"[red]Error:[/red] Task {task_id} not found")


def handle_edit_command(result: ParseResult) -> None:
    """
    Handle 'edit' command - update task title.

    Usage:
        edit 42 New title
        e 42 "New title"
    """
    usage = "edit <task_id> <new title>"
    task_id = _parse_id(result.args[0] if result.args else None, usage)
    if task_id is None:
        return

    new_title = " ".join(result.args[1:])
    try:
        if repl_context.manager.edit_title(task_id, new_title):
            console.print(f"[green]✓ Task {task_id} updated:[/green] {new_title}")
        else:
            console.print(f"[red]Error:[/red] Task {task_id} not found")
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")


def handle_due_command(result: ParseResult) -> None:
    """
    Handle 'due' command - set or clear a due date.

    Usage:
        due 42 tomorrow
        due 42 1231
        due 42 none
    """
    usage = "due <task_id> <date>"
    task_id = _parse_id(result.args[0] if result.args else None, usage)
    if task_id is None:
        return

    if len(result.args) < 2:
        console.print(f"[red]Error:[/red] Date is required. Use {DATE_FORMATS_HELP}")
        return

    try:
        due_date = parse_date_string(result.args[1])
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    if not repl_context.manager.edit_due_date(task_id, due_date):
        console.print(f"[red]Error:[/red] Task {task_id} not found")
    elif due_date is None:
        console.print(f"[green]✓ Due date cleared for task {task_id}[/green]")
    else:
        console.print(f"[green]✓ Due date set to {due_date} for task {task_id}[/green]")


def handle_url_command(result: ParseResult) -> None:
    """
    Handle 'url' command - set or clear a reference URL.

    Usage:
        url 42 https://example.com/ticket/7
        url 42            (clears)
    """
    task_id = _parse_id(result.args[0] if result.args else None, "url <task_id> \\[url]")
    if task_id is None:
        return

    new_url = " ".join(result.args[1:]) or None
    if not repl_context.manager.edit_reference_url(task_id, new_url):
        console.print(f"[red]Error:[/red] Task {task_id} not found")
    elif new_url is None:
        console.print(f"[green]✓ URL cleared for task {task_id}[/green]")
    else:
        console.print(f"[green]✓ URL set for task {task_id}:[/green] {new_url}")


def handle_move_command(result: ParseResult) -> None:
    """
    Handle 'move' command - re-parent a task.

    Usage:
        move 5 2
        mv 5 root
    """
    usage = "move <task_id> <parent_id|root>"
    task_id = _parse_id(result.args[0] if result.args else None, usage)
    if task_id is None:
        return

    if len(result.args) < 2:
        console.print("[red]Error:[/red] New parent required")
        console.print(f"[dim]Usage: {usage}[/dim]")
        return

    target = result.args[1]
    if target.lower() in ROOT_KEYWORDS:
        new_parent_id = None
    else:
        new_parent_id = _parse_id(target, usage)
        if new_parent_id is None:
            return

    if repl_context.manager.move(task_id, new_parent_id):
        where = "top level" if new_parent_id is None else f"#{new_parent_id}"
        console.print(f"[green]✓ Moved task {task_id} to {where}[/green]")
    else:
        console.print(
            f"[red]Error:[/red] Cannot move task {task_id} under {target} "
            "(not found, or inside the task's own subtree)"
        )


def handle_delete_command(result: ParseResult) -> None:
    """
    Handle 'delete' command - delete task(s) with their subtasks.

    Usage:
        delete 42
        d 1,2,3
    """
    for task_id in _parse_ids(result, "delete <task_id(s)>"):
        if repl_context.manager.delete(task_id):
            console.print(f"[green]✓ Task {task_id} deleted[/green]")
        else:
            console.print(f"[red]Error:[/red] Task {task_id} not found")


def handle_show_command(result: ParseResult) -> None:
    """
    Handle 'show' command - full task details.

    Usage:
        show 42
        i 42
    """
    task_id = _parse_id(result.args[0] if result.args else None, "show <task_id>")
    if task_id is None:
        return

    task = repl_context.manager.find(task_id)
    if task is None:
        console.print(f"[red]Error:[/red] Task {task_id} not found")
        return
    display_task_details(task, console)


def handle_ls_command(result: ParseResult) -> None:
    """Handle 'ls' command - show the task tree."""
    display_tree(repl_context.manager, console)


def handle_overdue_command(result: ParseResult) -> None:
    """Handle 'overdue' command - list overdue tasks."""
    display_tasks_table(repl_context.manager.overdue_tasks(), "Overdue", console)


def handle_soon_command(result: ParseResult) -> None:
    """
    Handle 'soon' command - list tasks due within N days.

    Usage:
        soon
        soon 7
        soon --days 7
    """
    days = DEFAULT_DUE_SOON_DAYS
    raw = result.flags.get("days", result.args[0] if result.args else None)
    if raw is True:
        console.print("[red]Error:[/red] --days needs a number")
        return
    if raw is not None:
        try:
            days = int(raw)
        except ValueError:
            console.print(f"[red]Error:[/red] Invalid number of days: {raw}")
            return
    tasks = repl_context.manager.tasks_due_soon(days)
    display_tasks_table(tasks, f"Due within {days} day(s)", console)
