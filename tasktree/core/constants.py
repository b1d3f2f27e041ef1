"""
FILE: tasktree/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - DEFAULT_DUE_SOON_DAYS: Window used by due-soon queries
  - DATE_KEYWORDS_CLEAR / DATE_KEYWORD_TODAY / DATE_KEYWORD_TOMORROW
  - DATE_FORMATS_HELP: Human-readable list of accepted date formats
  - STATUS_*: Due-date classification labels used by the view layer
  - ROOT_KEYWORDS: Words that mean "no parent" in move commands
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Centralized constants to avoid magic strings
"""

# Scheduling
DEFAULT_DUE_SOON_DAYS = 3

# Date parsing keywords
DATE_KEYWORDS_CLEAR = ("none", "clear")
DATE_KEYWORD_TODAY = "today"
DATE_KEYWORD_TOMORROW = "tomorrow"
DATE_FORMATS_HELP = "YYYY-MM-DD, YYYYMMDD, MMDD, 'today', 'tomorrow', or 'none'"

# Due-date classification labels (most urgent first)
STATUS_OVERDUE = "overdue"
STATUS_DUE_TODAY = "due_today"
STATUS_DUE_SOON = "due_soon"
STATUS_SCHEDULED = "scheduled"

# move <id> root
ROOT_KEYWORDS = ("root", "none", "-")
