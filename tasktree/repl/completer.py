"""
FILE: tasktree/repl/completer.py
PURPOSE: Autocomplete logic for shell commands and arguments
EXPORTS:
  - TaskTreeCompleter (Completer for command/arg completion)
  - create_completer(get_tasks) -> TaskTreeCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
  - typing (type hints)
  - tasktree.core.constants (date keywords, root keywords)
NOTES:
  - Suggests command names (and aliases) at start of line
  - Suggests task IDs for commands expecting an ID first
  - Suggests "root" and task IDs as the second argument of move
  - Suggests date keywords as the second argument of due
  - Task source is a callable so the completer never holds stale tasks
  - Case-insensitive matching
"""

from typing import Callable, Iterable, List, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core.constants import DATE_KEYWORD_TODAY, DATE_KEYWORD_TOMORROW, DATE_KEYWORDS_CLEAR
from ..core.models import Task
from .parser import COMMAND_ALIASES

# Commands whose first argument is a task ID
ID_FIRST_COMMANDS = {
    "add-child", "complete", "uncomplete", "edit", "due", "url",
    "move", "delete", "show",
}

# Cap for responsiveness on large trees
MAX_ID_SUGGESTIONS = 200


class TaskTreeCompleter(Completer):
    """
    Custom completer for the tasktree shell.

    Provides context-aware autocomplete:
    - Command names at start of input
    - Task IDs (with titles) where a command expects one
    - Date keywords after "due <id>"
    """

    # Available commands
    COMMANDS = [
        "add", "add-child", "complete", "uncomplete", "edit", "due", "url",
        "move", "delete", "show", "ls", "overdue", "soon", "stats", "export",
        "nav", "help", "clear", "exit",
    ]

    DATE_KEYWORDS = [DATE_KEYWORD_TODAY, DATE_KEYWORD_TOMORROW, *DATE_KEYWORDS_CLEAR]

    def __init__(self, get_tasks: Optional[Callable[[], List[Task]]] = None):
        self._get_tasks = get_tasks

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on current input.

        Args:
            document: Current document with cursor position
            complete_event: Event that triggered completion

        Yields:
            Completion objects for matching suggestions

        Logic:
            1. If at start or only whitespace -> suggest commands
            2. First argument of an ID command -> suggest task IDs
            3. Second argument of move -> suggest "root" and task IDs
            4. Second argument of due -> suggest date keywords
            5. Otherwise -> no suggestions
        """
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.split()
        at_new_word = text_before_cursor.endswith(" ")

        # Case 1: Empty input or typing the command
        if not words or (not at_new_word and len(words) == 1):
            word = words[0] if words else ""
            yield from self._complete_commands(word)
            return

        command = words[0].lower()
        command = COMMAND_ALIASES.get(command, command)

        # Index of the argument being typed (0 = first after command)
        arg_index = len(words) - 1 if at_new_word else len(words) - 2
        word = "" if at_new_word else words[-1]

        # Case 2: First argument is a task ID
        if command in ID_FIRST_COMMANDS and arg_index == 0:
            yield from self._complete_task_ids(word)
            return

        # Case 3: New parent for move
        if command == "move" and arg_index == 1:
            if "root".startswith(word.lower()):
                yield Completion("root", start_position=-len(word), display_meta="Make top-level")
            yield from self._complete_task_ids(word)
            return

        # Case 4: Date for due
        if command == "due" and arg_index == 1:
            yield from self._complete_date_keywords(word)
            return

    def _complete_commands(self, word: str) -> Iterable[Completion]:
        """
        Complete command names.

        Args:
            word: Partial command being typed

        Yields:
            Completion objects for matching commands
        """
        word_lower = word.lower()
        for command in self.COMMANDS:
            if command.startswith(word_lower):
                yield Completion(
                    command,
                    start_position=-len(word),
                    display=command,
                    display_meta=self._get_command_description(command),
                )

    def _complete_date_keywords(self, word: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for keyword in self.DATE_KEYWORDS:
            if keyword.startswith(word_lower):
                yield Completion(keyword, start_position=-len(word), display=keyword)

    def _complete_task_ids(self, word: str) -> Iterable[Completion]:
        """
        Complete task IDs with helpful labels (title + state).
        """
        if self._get_tasks is None:
            return

        tasks = self._get_tasks()
        for t in tasks[:MAX_ID_SUGGESTIONS]:
            id_str = str(t.id)
            if id_str.startswith(word):
                title = (t.title or "").strip()
                display_title = title if len(title) <= 40 else title[:37] + "..."
                meta = f"{display_title} [done]" if t.completed else display_title
                yield Completion(
                    id_str,
                    start_position=-len(word),
                    display=id_str,
                    display_meta=meta,
                )

    @staticmethod
    def _get_command_description(command: str) -> str:
        """Get description for a command (shown in autocomplete menu)."""
        descriptions = {
            "add": "Create a top-level task (a)",
            "add-child": "Create a subtask (ac)",
            "complete": "Mark task(s) complete (c)",
            "uncomplete": "Reopen task(s) (uc)",
            "edit": "Update task title (e)",
            "due": "Set or clear a due date",
            "url": "Set or clear a reference URL",
            "move": "Move task under a new parent (mv)",
            "delete": "Delete task(s) and subtasks (d)",
            "show": "View full task details (i)",
            "ls": "Show the task tree",
            "overdue": "List overdue tasks",
            "soon": "List tasks due soon",
            "stats": "Show statistics",
            "export": "Export as Markdown",
            "nav": "Switch to navigation mode",
            "help": "Show available commands",
            "clear": "Clear the screen",
            "exit": "Exit the shell (q)",
        }
        return descriptions.get(command, "")


def create_completer(get_tasks: Optional[Callable[[], List[Task]]] = None) -> TaskTreeCompleter:
    """
    Create and return a TaskTreeCompleter instance.

    Args:
        get_tasks: Callable returning the current tasks (for ID suggestions)

    Returns:
        TaskTreeCompleter configured for tasktree commands

    Usage:
        completer = create_completer(manager.all_tasks)
        session = PromptSession(completer=completer)
    """
    return TaskTreeCompleter(get_tasks)
