"""
FILE: tasktree/__init__.py
PURPOSE: Terminal-native hierarchical task manager
EXPORTS:
  - __version__
NOTES:
  - Core model and manager live in tasktree.core
  - One-shot commands live in tasktree.cli, the interactive shell in tasktree.repl
"""

__version__ = "0.4.0"
