"""
FILE: tasktree/repl/parser.py
PURPOSE: Parse user input into commands and arguments for the shell
EXPORTS:
  - ParseResult (dataclass for parsed commands)
  - parse_command(input_str) -> ParseResult
  - COMMAND_ALIASES (short name -> canonical command)
DEPENDENCIES:
  - shlex (for shell-like parsing with quotes)
  - dataclasses (for ParseResult)
  - typing (type hints)
NOTES:
  - Handles quoted strings: add "task with spaces"
  - Supports flags: --json, --days 7
  - Preserves argument order for positional args
  - Case-insensitive command names; aliases resolve to canonical names
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Union

# Short forms accepted in command mode
COMMAND_ALIASES = {
    "a": "add",
    "ac": "add-child",
    "c": "complete",
    "uc": "uncomplete",
    "e": "edit",
    "mv": "move",
    "d": "delete",
    "rm": "delete",
    "i": "show",
    "quit": "exit",
    "q": "exit",
}


@dataclass
class ParseResult:
    """
    Result of parsing a shell command.

    Attributes:
        command: Canonical command name (e.g., "add", "complete", "move")
        args: Positional arguments (e.g., ["task title", "123"])
        flags: Flag arguments as dict (e.g., {"days": "7", "json": True})
        raw_input: Original input string
    """
    command: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, Union[str, bool]] = field(default_factory=dict)
    raw_input: str = ""

    @property
    def text(self) -> str:
        """All positional args joined with spaces (titles, URLs)."""
        return " ".join(self.args)


def parse_command(input_str: str) -> ParseResult:
    """
    Parse shell input into command, args, and flags.

    Examples:
        >>> parse_command("a Buy milk")
        ParseResult(command="add", args=["Buy", "milk"], flags={})

        >>> parse_command('ac 3 "Task with spaces"')
        ParseResult(command="add-child", args=["3", "Task with spaces"], flags={})

        >>> parse_command("soon --days 7")
        ParseResult(command="soon", args=[], flags={"days": "7"})

    Args:
        input_str: Raw user input from the prompt

    Returns:
        ParseResult with command, args, and flags extracted

    Notes:
        - Command is always the first token (case-insensitive)
        - Flags start with -- (e.g., --days, --json)
        - Boolean flags don't need values (--json sets json=True)
        - Value flags take the next token as value (--days 7)
        - Quoted strings are treated as single args
        - Unbalanced quotes fall back to whitespace splitting
        - Empty input returns command="" with no args/flags
    """
    input_str = input_str.strip()
    if not input_str:
        return ParseResult(command="", args=[], flags={}, raw_input=input_str)

    try:
        tokens = shlex.split(input_str)
    except ValueError:
        # Unclosed quote (e.g. an apostrophe in a title)
        tokens = input_str.split()

    if not tokens:
        return ParseResult(command="", args=[], flags={}, raw_input=input_str)

    command = tokens[0].lower()
    command = COMMAND_ALIASES.get(command, command)

    args = []
    flags = {}
    i = 1

    while i < len(tokens):
        token = tokens[i]

        if token.startswith("--") and len(token) > 2:
            flag_name = token[2:]

            if i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
                flags[flag_name] = tokens[i + 1]
                i += 2
            else:
                flags[flag_name] = True
                i += 1
        else:
            args.append(token)
            i += 1

    return ParseResult(
        command=command,
        args=args,
        flags=flags,
        raw_input=input_str
    )
