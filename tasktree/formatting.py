"""
FILE: tasktree/formatting.py
PURPOSE: Shared formatting utilities for CLI and REPL output
EXPORTS:
  - TaskFormatter: Class for formatting tasks (lines, trees, tables, JSON)
  - to_markdown(manager, generated_at) -> str
  - parse_task_ids(id_string) -> List[int]
  - export_filename(name) -> str
DEPENDENCIES:
  - rich (tree and table rendering)
  - json (for JSON serialization)
  - tasktree.core (Task, TaskManager, query helpers)
NOTES:
  - Centralized formatting logic for consistency
  - Used by both CLI and REPL
  - Style choice per task: overdue=red, due soon=yellow, completed=dim
"""

import json
from datetime import datetime
from typing import List, Optional

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .core.constants import (
    STATUS_DUE_SOON,
    STATUS_DUE_TODAY,
    STATUS_OVERDUE,
    STATUS_SCHEDULED,
)
from .core.manager import TaskManager
from .core.models import Task
from .core.query import flatten_tree

DEFAULT_EXPORT_FILENAME = "tasks.md"

# Rich style per due status
STATUS_STYLES = {
    STATUS_OVERDUE: "red",
    STATUS_DUE_TODAY: "bright_magenta",
    STATUS_DUE_SOON: "yellow",
    STATUS_SCHEDULED: "white",
}


class TaskFormatter:
    """Centralized task display formatting."""

    @staticmethod
    def due_status(task: Task) -> Optional[str]:
        """
        Classify a task's due date for display.

        Returns:
            STATUS_OVERDUE, STATUS_DUE_TODAY, STATUS_DUE_SOON,
            STATUS_SCHEDULED, or None when there is no due date or the
            task is completed
        """
        if task.due_date is None or task.completed:
            return None
        if task.is_overdue():
            return STATUS_OVERDUE
        if task.is_due_today():
            return STATUS_DUE_TODAY
        if task.is_due_soon():
            return STATUS_DUE_SOON
        return STATUS_SCHEDULED

    @staticmethod
    def due_label(task: Task) -> str:
        """Short due-date suffix, e.g. " ⚠ (overdue: 2025-01-01)"."""
        if task.due_date is None:
            return ""
        status = TaskFormatter.due_status(task)
        if status == STATUS_OVERDUE:
            return f" ⚠ (overdue: {task.due_date})"
        if status == STATUS_DUE_TODAY:
            return " 📅 (due today)"
        if status == STATUS_DUE_SOON:
            return f" ⏰ (due: {task.due_date})"
        return f" (due: {task.due_date})"

    @staticmethod
    def task_line(task: Task, depth: int = 0) -> str:
        """
        One plain-text line for a task.

        Example:
            "  [ ] 3: Write report 🔗 ⏰ (due: 2025-01-03)"
        """
        checkbox = "[✓]" if task.completed else "[ ]"
        link = " 🔗" if task.reference_url else ""
        return f"{'  ' * depth}{checkbox} {task.id}: {task.title}{link}{TaskFormatter.due_label(task)}"

    @staticmethod
    def task_style(task: Task) -> str:
        if task.completed:
            return "dim"
        return STATUS_STYLES.get(TaskFormatter.due_status(task), "white")

    @staticmethod
    def create_tree(roots: List[Task], title: str = "Tasks") -> Tree:
        """
        Build a Rich tree of the given roots and all their descendants.

        Args:
            roots: Top-level tasks
            title: Label for the tree root

        Returns:
            Rich Tree ready for display
        """
        tree = Tree(f"[bold cyan]{title}[/bold cyan]")

        def add_nodes(branch: Tree, tasks: List[Task]) -> None:
            for task in tasks:
                label = Text(TaskFormatter.task_line(task), style=TaskFormatter.task_style(task))
                node = branch.add(label)
                add_nodes(node, task.children)

        add_nodes(tree, roots)
        return tree

    @staticmethod
    def create_table(tasks: List[Task], title: str = "Tasks") -> Table:
        """
        Create Rich table for a flat task list (query results).

        Args:
            tasks: Tasks to display
            title: Table title

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", width=6, no_wrap=True)
        table.add_column("✓", width=3)
        table.add_column("Title", style="white")
        table.add_column("Due", width=12)
        table.add_column("Parent", style="blue", width=8)

        for task in tasks:
            due_style = TaskFormatter.task_style(task)
            due_text = str(task.due_date) if task.due_date else "-"
            table.add_row(
                str(task.id),
                "[green]✓[/green]" if task.completed else "○",
                task.title,
                f"[{due_style}]{due_text}[/{due_style}]",
                str(task.parent.id) if task.parent else "-",
            )

        return table

    @staticmethod
    def to_json_array(tasks: List[Task]) -> str:
        """Convert task list to JSON array string."""
        return json.dumps([t.to_dict() for t in tasks], indent=2)

    @staticmethod
    def to_raw_lines(roots: List[Task]) -> List[str]:
        """Indented plain-text lines for roots and their subtrees."""
        return [TaskFormatter.task_line(task, depth) for task, depth in flatten_tree(roots)]


def to_markdown(manager: TaskManager, generated_at: Optional[datetime] = None) -> str:
    """
    Render the whole task tree as a Markdown document.

    Args:
        manager: Source of tasks and statistics
        generated_at: Timestamp for the header (defaults to now)

    Returns:
        Markdown text: title, statistics section, nested checkbox list
    """
    generated_at = generated_at or datetime.now()
    stats = manager.statistics()

    lines = [
        "# Task List",
        "",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "## Statistics",
        "",
        f"- Total tasks: {stats.total}",
        f"- Completed: {stats.completed}",
        f"- Remaining: {stats.incomplete}",
        f"- Overdue: {stats.overdue}",
        f"- Due today: {stats.due_today}",
        "",
        "## Tasks",
        "",
    ]

    roots = manager.root_tasks()
    if not roots:
        lines.append("_No tasks yet._")

    for task, depth in flatten_tree(roots):
        checkbox = "[x]" if task.completed else "[ ]"
        line = f"{'  ' * depth}- {checkbox} {task.title}"
        if task.due_date:
            if task.is_overdue():
                line += f" _(**OVERDUE: {task.due_date}**)_"
            elif task.is_due_today():
                line += " _(**DUE TODAY**)_"
            else:
                line += f" _(Due: {task.due_date})_"
        if task.reference_url:
            line += f" [link]({task.reference_url})"
        lines.append(line)

    return "\n".join(lines) + "\n"


def parse_task_ids(id_string: str) -> List[int]:
    """
    Parse comma-separated task IDs.

    Args:
        id_string: Comma-separated string of IDs (e.g., "1,2,3")

    Returns:
        List of integers

    Raises:
        ValueError: If any ID is not a valid integer
    """
    ids = [part.strip() for part in id_string.split(",")]
    return [int(part) for part in ids if part]


def export_filename(name: Optional[str]) -> str:
    """
    Normalize a Markdown export filename.

    Empty or missing names become "tasks.md"; ".md" is appended when absent.
    """
    name = (name or "").strip()
    if not name:
        return DEFAULT_EXPORT_FILENAME
    if not name.endswith(".md"):
        name += ".md"
    return name
