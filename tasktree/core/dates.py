"""
FILE: tasktree/core/dates.py
PURPOSE: Calendar provider and flexible due-date parsing
EXPORTS:
  - today() -> date
  - parse_date_string(text, today=None) -> Optional[date]
  - coerce_date(value) -> Optional[date]
DEPENDENCIES:
  - datetime (stdlib)
  - re (stdlib)
  - tasktree.core.constants (keywords, format help)
  - tasktree.core.exceptions (ValidationError)
NOTES:
  - Dates carry no time component
  - MMDD defaults to the current year and rolls to next year once the day
    has passed
  - Every classification in the app asks today() for "now", so tests can
    monkeypatch a single function
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from .constants import (
    DATE_FORMATS_HELP,
    DATE_KEYWORDS_CLEAR,
    DATE_KEYWORD_TODAY,
    DATE_KEYWORD_TOMORROW,
)
from .exceptions import ValidationError

_COMPACT_RE = re.compile(r"^\d{8}$")
_MONTH_DAY_RE = re.compile(r"^\d{4}$")
_ISO_RE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")

DateLike = Union[date, datetime, str, None]


def today() -> date:
    """Return the current local calendar date."""
    return date.today()


def _current_date() -> date:
    # parse_date_string's "today" argument shadows the module function
    return today()


def _invalid(text: str) -> ValidationError:
    return ValidationError(f"Invalid date '{text}'. Use {DATE_FORMATS_HELP}")


def _build(text: str, year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError:
        raise _invalid(text) from None


def parse_date_string(text: str, today: Optional[date] = None) -> Optional[date]:
    """
    Parse a user-supplied due date.

    Args:
        text: Raw input (e.g. "2025-12-31", "20251231", "1231", "tomorrow")
        today: Reference date (defaults to the current date)

    Returns:
        Parsed date, or None for "none"/"clear"

    Raises:
        ValidationError: If the input matches none of the accepted formats

    Examples:
        >>> parse_date_string("1231", today=date(2025, 6, 1))
        datetime.date(2025, 12, 31)
        >>> parse_date_string("0101", today=date(2025, 6, 1))
        datetime.date(2026, 1, 1)
    """
    if today is None:
        today = _current_date()

    raw = (text or "").strip()
    keyword = raw.lower()

    if keyword in DATE_KEYWORDS_CLEAR:
        return None
    if keyword == DATE_KEYWORD_TODAY:
        return today
    if keyword == DATE_KEYWORD_TOMORROW:
        return today + timedelta(days=1)

    if _COMPACT_RE.match(raw):
        return _build(raw, int(raw[0:4]), int(raw[4:6]), int(raw[6:8]))

    if _MONTH_DAY_RE.match(raw):
        month, day = int(raw[0:2]), int(raw[2:4])
        parsed = _build(raw, today.year, month, day)
        if parsed < today:
            # Already past this year, so the user means next year
            parsed = _build(raw, today.year + 1, month, day)
        return parsed

    match = _ISO_RE.match(raw)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _build(raw, year, month, day)

    raise _invalid(raw)


def coerce_date(value: DateLike) -> Optional[date]:
    """
    Convert a date-like value to a date.

    Accepts date, datetime (time is dropped), any string understood by
    parse_date_string(), or None (meaning "no due date").

    Raises:
        ValidationError: If the value cannot be interpreted as a date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date_string(value)
    raise ValidationError(f"Invalid date value: {value!r}")
