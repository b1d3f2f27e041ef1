"""
FILE: tasktree/config.py
PURPOSE: Application settings (database location, logging) from env / .env
EXPORTS:
  - APP_DIR, DB_PATH, LOG_DIR (defaults)
  - Settings (frozen dataclass)
  - load_settings() -> Settings
DEPENDENCIES:
  - python-dotenv (optional .env file in the working directory)
  - os, pathlib, dataclasses (stdlib)
NOTES:
  - Database stored at ~/.tasktree/tasks.db unless TASKTREE_DB is set
  - An explicit --db option on the command line wins over everything here
  - Environment variables:
      TASKTREE_DB         path to the SQLite file
      TASKTREE_LOG_DIR    directory for the rotating log file
      TASKTREE_LOG_LEVEL  console log level (default WARNING)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKTREE"

# Default locations (cross-platform)
APP_DIR = Path.home() / ".tasktree"
DB_PATH = APP_DIR / "tasks.db"
LOG_DIR = APP_DIR / "logs"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    db_path: Path
    log_dir: Path
    log_level: str = "WARNING"


def load_settings(db_path: Optional[str] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        db_path: Explicit database path (e.g. from --db); overrides TASKTREE_DB

    Returns:
        Settings with resolved paths
    """
    load_dotenv(override=False)

    if db_path:
        resolved_db = Path(db_path).expanduser()
    else:
        resolved_db = _env_path(_k("DB"), DB_PATH)

    return Settings(
        db_path=resolved_db,
        log_dir=_env_path(_k("LOG_DIR"), LOG_DIR),
        log_level=os.getenv(_k("LOG_LEVEL"), "WARNING").upper(),
    )
