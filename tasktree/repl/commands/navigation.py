"""
FILE: tasktree/repl/commands/navigation.py
PURPOSE: Handlers for actions chosen in navigation mode
NOTES:
  - Runs after the navigation Application has exited, so plain input()
    prompts are safe here
  - Each action reuses the matching command handler with a built
    ParseResult
"""

import webbrowser

from ..main import MODE_COMMAND, console, repl_context
from ..parser import ParseResult
from ..display import display_task_details
from ..navigation import MENU_ACTIONS
from ...core.constants import DATE_FORMATS_HELP
from ...formatting import DEFAULT_EXPORT_FILENAME, to_markdown
from .system import save_markdown
from .tasks import (
    handle_add_child_command,
    handle_add_command,
    handle_complete_command,
    handle_delete_command,
    handle_due_command,
    handle_edit_command,
    handle_uncomplete_command,
    handle_url_command,
)


def ask(message: str) -> str:
    """Prompt for one line; EOF counts as an empty answer."""
    try:
        return input(message).strip()
    except EOFError:
        return ""


def ask_confirmation(message: str) -> bool:
    """Ask user for confirmation (y/N)."""
    return ask(f"{message} (y/N): ").lower() in ("y", "yes")


def _toggle(task) -> None:
    if task.completed:
        handle_uncomplete_command(ParseResult("uncomplete", [str(task.id)]))
    else:
        handle_complete_command(ParseResult("complete", [str(task.id)]))


def _edit(task) -> None:
    new_title = ask(f"New title [{task.title}]: ")
    if new_title:
        handle_edit_command(ParseResult("edit", [str(task.id), new_title]))


def _due(task) -> None:
    date_text = ask(f"Due date ({DATE_FORMATS_HELP}): ")
    if date_text:
        handle_due_command(ParseResult("due", [str(task.id), date_text]))


def _url(task) -> None:
    console.print(f"Current URL: {task.reference_url or '(none)'}")
    new_url = ask("New URL (leave empty to clear): ")
    handle_url_command(ParseResult("url", [str(task.id)] + ([new_url] if new_url else [])))


def _open_url(task) -> None:
    if not task.reference_url:
        console.print("[yellow]No URL set for this task[/yellow]")
        return
    console.print(f"URL: {task.reference_url}")
    if ask_confirmation("Open in browser?"):
        webbrowser.open(task.reference_url)


def _add() -> None:
    title = ask("Task title: ")
    if title:
        handle_add_command(ParseResult("add", [title]))


def _add_child(task) -> None:
    title = ask(f"Child task title (under #{task.id}): ")
    if title:
        handle_add_child_command(ParseResult("add-child", [str(task.id), title]))


def _delete(task) -> None:
    if ask_confirmation(f"Delete task '{task.title}' and its subtasks?"):
        handle_delete_command(ParseResult("delete", [str(task.id)]))


def _details(task) -> None:
    display_task_details(task, console)


def _export() -> None:
    console.print(to_markdown(repl_context.manager), markup=False, highlight=False)
    if ask_confirmation("Save to file?"):
        filename = ask(f"Filename (default: {DEFAULT_EXPORT_FILENAME}): ")
        save_markdown(filename)


def _menu(task) -> None:
    console.print(f"\n[bold]Task:[/bold] {task.title}")
    if task.reference_url:
        console.print(f"[bold]URL:[/bold] {task.reference_url}")
    for key, _action, label in MENU_ACTIONS:
        console.print(f"  [cyan][{key.upper()}][/cyan] {label}")
    console.print("  [dim][Enter] Cancel[/dim]")

    choice = ask("Choose action: ").lower()
    for key, action, _label in MENU_ACTIONS:
        if choice == key:
            handle_nav_action(action)
            return


_TASK_HANDLERS = {
    "toggle": _toggle,
    "edit": _edit,
    "due": _due,
    "url": _url,
    "open_url": _open_url,
    "add_child": _add_child,
    "delete": _delete,
    "details": _details,
    "menu": _menu,
}


def handle_nav_action(action: str) -> None:
    """
    Carry out one navigation-mode action on the selected task.

    Args:
        action: Action name from NAV_ACTION_KEYS or MENU_ACTIONS
    """
    if action == "quit":
        repl_context.running = False
        return
    if action == "command":
        repl_context.mode = MODE_COMMAND
        return
    if action == "add":
        _add()
        return
    if action == "export":
        _export()
        return

    handler = _TASK_HANDLERS.get(action)
    task = repl_context.nav.selected_task
    if handler is None or task is None:
        return
    handler(task)
