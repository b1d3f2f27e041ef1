"""
FILE: tasktree/repl/navigation.py
PURPOSE: Keystroke-driven navigation mode for the shell
EXPORTS:
  - NavigationState (selection, id buffer, scroll window)
  - NAV_ACTION_KEYS / MENU_ACTIONS (key -> action name)
  - render_fragments(state, height, today) -> formatted text fragments
  - build_application(state, header) -> prompt_toolkit Application
  - run_navigation(state, header) -> action name or None
DEPENDENCIES:
  - prompt_toolkit (Application, KeyBindings, layout)
  - tasktree.core (Task, flatten_tree)
  - tasktree.formatting (TaskFormatter for row text and due status)
NOTES:
  - NavigationState is pure and has no terminal dependency
  - The Application only moves the selection and edits the id buffer;
    every other key exits with an action name that the shell loop handles
    with ordinary prompts, then navigation resumes
  - Typed digits jump to that task id on Enter, or after a 1 second pause
    (checked on the next keypress)
  - Row colors: selected=green, overdue=red, due soon=yellow, completed=dim
  - Rendered inline and erased on exit, so action output stays visible
    above the list
"""

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Tuple

from prompt_toolkit.application import Application, get_app
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style

from ..core.models import Task
from ..core.query import flatten_tree
from ..formatting import TaskFormatter

# Digits typed this long after the previous one start a new id
ID_BUFFER_TIMEOUT = 1.0

# Rows reserved for the header and status lines
CHROME_ROWS = 5

# Single-key actions in navigation mode
NAV_ACTION_KEYS = {
    "c": "toggle",
    "e": "edit",
    "d": "due",
    "u": "url",
    "a": "add",
    "A": "add_child",
    "x": "delete",
    "i": "details",
    "m": "export",
    "/": "command",
    "q": "quit",
}

# Actions that need a selected task
TASK_ACTIONS = {"toggle", "edit", "due", "url", "add_child", "delete", "details", "open_url", "menu"}

# Enter with an empty id buffer: (key, action, label)
MENU_ACTIONS = [
    ("c", "toggle", "Complete/Uncomplete"),
    ("e", "edit", "Edit title"),
    ("d", "due", "Set due date"),
    ("u", "url", "Edit URL"),
    ("v", "open_url", "View/Open URL"),
    ("a", "add_child", "Add child task"),
    ("x", "delete", "Delete task"),
]

NAV_STYLE = Style.from_dict({
    "header": "bold ansicyan",
    "selected": "bold ansigreen",
    "overdue": "ansired",
    "due-soon": "ansiyellow",
    "completed": "ansibrightblack",
    "status": "ansibrightblack",
    "buffer": "bold ansimagenta",
})


@dataclass
class NavigationState:
    """
    Selection state over the flattened task tree.

    Attributes:
        rows: (task, depth) pairs in display order
        selected: Index of the selected row (0 when empty)
        offset: First row of the scroll window
        id_buffer: Digits typed so far
        id_input_time: Monotonic time of the last digit (None when empty)
    """
    rows: List[Tuple[Task, int]] = field(default_factory=list)
    selected: int = 0
    offset: int = 0
    id_buffer: str = ""
    id_input_time: Optional[float] = None

    def refresh(self, roots: List[Task]) -> None:
        """
        Rebuild rows from the current tree.

        Keeps the selected task selected when it still exists; otherwise
        clamps the index into range.
        """
        current = self.selected_task
        self.rows = flatten_tree(roots)
        if current is not None and self.select_id(current.id):
            return
        self._clamp()

    def _clamp(self) -> None:
        if not self.rows:
            self.selected = 0
        else:
            self.selected = max(0, min(self.selected, len(self.rows) - 1))

    @property
    def selected_task(self) -> Optional[Task]:
        if not self.rows:
            return None
        return self.rows[self.selected][0]

    def move_up(self) -> None:
        if self.selected > 0:
            self.selected -= 1

    def move_down(self) -> None:
        if self.selected < len(self.rows) - 1:
            self.selected += 1

    def select_id(self, task_id: int) -> bool:
        """Select the row holding task_id. Returns False if not shown."""
        for index, (task, _depth) in enumerate(self.rows):
            if task.id == task_id:
                self.selected = index
                return True
        return False

    # --- Id buffer ---

    def type_digit(self, digit: str, now: Optional[float] = None) -> None:
        now = time.monotonic() if now is None else now
        self.expire_buffer(now)
        self.id_buffer += digit
        self.id_input_time = now

    def backspace(self, now: Optional[float] = None) -> None:
        self.id_buffer = self.id_buffer[:-1]
        self.id_input_time = (time.monotonic() if now is None else now) if self.id_buffer else None

    def clear_buffer(self) -> None:
        self.id_buffer = ""
        self.id_input_time = None

    def commit_buffer(self) -> bool:
        """
        Jump to the id typed so far and clear the buffer.

        Returns:
            True if a row with that id was selected
        """
        if not self.id_buffer:
            return False
        found = self.select_id(int(self.id_buffer))
        self.clear_buffer()
        return found

    def expire_buffer(self, now: float) -> bool:
        """Commit the buffer if the last digit is older than the timeout."""
        if self.id_input_time is not None and now - self.id_input_time > ID_BUFFER_TIMEOUT:
            return self.commit_buffer()
        return False

    # --- Scrolling ---

    def window(self, height: int) -> Tuple[int, int]:
        """
        Rows visible in a viewport of the given height.

        Moves the offset just enough to keep the selection visible.

        Returns:
            (start, end) slice bounds into rows
        """
        height = max(1, height)
        if self.selected < self.offset:
            self.offset = self.selected
        elif self.selected >= self.offset + height:
            self.offset = self.selected - height + 1
        self.offset = max(0, min(self.offset, max(0, len(self.rows) - height)))
        return self.offset, min(len(self.rows), self.offset + height)


def row_style(task: Task, selected: bool, today: Optional[date] = None) -> str:
    """Style class for one row; selection wins over due status."""
    if selected:
        return "class:selected"
    if task.completed:
        return "class:completed"
    if task.is_overdue(today):
        return "class:overdue"
    if task.is_due_today(today) or task.is_due_soon(today=today):
        return "class:due-soon"
    return ""


def render_fragments(state: NavigationState, height: int, today: Optional[date] = None) -> List[Tuple[str, str]]:
    """
    Formatted text for the task list.

    Args:
        state: Navigation state (its offset may be adjusted)
        height: Rows available for tasks
        today: Reference date for coloring (defaults to the current date)

    Returns:
        (style, text) fragments, one line per visible row
    """
    if not state.rows:
        return [("class:status", "No tasks yet. Press 'a' to add one.\n")]

    start, end = state.window(height)
    fragments = []
    if start > 0:
        fragments.append(("class:status", f"  ... ({start} more above)\n"))
    for index in range(start, end):
        task, depth = state.rows[index]
        is_selected = index == state.selected
        marker = "> " if is_selected else "  "
        fragments.append((row_style(task, is_selected, today), marker + TaskFormatter.task_line(task, depth) + "\n"))
    remaining = len(state.rows) - end
    if remaining > 0:
        fragments.append(("class:status", f"  ... ({remaining} more below)\n"))
    return fragments


def status_fragments(state: NavigationState) -> List[Tuple[str, str]]:
    """Selected-task line plus the key legend."""
    fragments = []
    task = state.selected_task
    if task is not None:
        fragments.append(("", f"Selected: {task.title} (ID: {task.id})"))
        if state.id_buffer:
            fragments.append(("class:buffer", f" | Typing ID: {state.id_buffer}"))
        fragments.append(("", "\n"))
        fragments.append((
            "class:status",
            "↑/↓: Navigate | Enter: Actions | c: Done | i: Details | a/A: Add | x: Delete | m: Export | /: Cmd | q: Quit",
        ))
    else:
        fragments.append(("class:status", "a: Add | /: Cmd | q: Quit"))
    return fragments


def build_application(
    state: NavigationState,
    header: Optional[Callable[[], str]] = None,
) -> Application:
    """
    Create the inline navigation Application.

    Args:
        state: Shared navigation state (mutated by key presses)
        header: Optional callable returning the header text (e.g. counts)

    Returns:
        Application whose run() returns an action name, or None
    """
    kb = KeyBindings()

    def _exit_with(event, action: str) -> None:
        state.clear_buffer()
        if action in TASK_ACTIONS and state.selected_task is None:
            return
        event.app.exit(result=action)

    @kb.add("up")
    @kb.add("k")
    def _up(event):
        state.clear_buffer()
        state.move_up()

    @kb.add("down")
    @kb.add("j")
    def _down(event):
        state.clear_buffer()
        state.move_down()

    for digit in "0123456789":
        @kb.add(digit)
        def _digit(event):
            state.type_digit(event.data)

    @kb.add("backspace")
    def _backspace(event):
        state.backspace()

    @kb.add("escape", eager=True)
    @kb.add("c-c")
    def _clear(event):
        state.clear_buffer()

    @kb.add("enter")
    def _enter(event):
        if state.id_buffer:
            state.commit_buffer()
        else:
            _exit_with(event, "menu")

    @kb.add("c-d")
    def _eof(event):
        event.app.exit(result="quit")

    for key, action in NAV_ACTION_KEYS.items():
        @kb.add(key)
        def _action(event, action=action):
            state.expire_buffer(time.monotonic())
            _exit_with(event, action)

    def _task_rows():
        height = get_app().output.get_size().rows - CHROME_ROWS
        return render_fragments(state, height)

    def _header():
        text = header() if header is not None else "tasktree"
        return [("class:header", text)]

    layout = Layout(HSplit([
        Window(FormattedTextControl(_header), height=1),
        Window(FormattedTextControl(_task_rows, focusable=True)),
        Window(height=1, char="-", style="class:status"),
        Window(FormattedTextControl(lambda: status_fragments(state)), height=2),
    ]))

    return Application(
        layout=layout,
        key_bindings=kb,
        style=NAV_STYLE,
        full_screen=False,
        erase_when_done=True,
    )


def run_navigation(
    state: NavigationState,
    header: Optional[Callable[[], str]] = None,
) -> Optional[str]:
    """Run navigation until a key produces an action."""
    return build_application(state, header).run()
