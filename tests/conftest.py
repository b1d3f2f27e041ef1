"""Shared pytest configuration and fixtures for tests."""

import sys
import io
from datetime import date
from pathlib import Path

import pytest

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tasktree import config  # noqa: E402
from tasktree.core import dates  # noqa: E402
from tasktree.core.manager import TaskManager  # noqa: E402
from tasktree.core.repository import TaskStore  # noqa: E402

# Fixed "today" for date-sensitive tests
TODAY = date(2025, 6, 15)


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Point every default path at a temporary directory."""
    db_path = tmp_path / "test_tasktree.db"
    monkeypatch.setattr(config, "APP_DIR", tmp_path)
    monkeypatch.setattr(config, "DB_PATH", db_path)
    monkeypatch.setattr(config, "LOG_DIR", tmp_path / "logs")
    monkeypatch.delenv("TASKTREE_DB", raising=False)
    monkeypatch.setenv("TASKTREE_LOG_DIR", str(tmp_path / "logs"))
    return db_path


@pytest.fixture
def fixed_today(monkeypatch):
    """Freeze dates.today() at TODAY."""
    monkeypatch.setattr(dates, "today", lambda: TODAY)
    return TODAY


@pytest.fixture
def store(temp_db):
    store = TaskStore(temp_db)
    yield store
    store.close()


@pytest.fixture
def manager(temp_db):
    """Backed manager on the temporary database."""
    manager = TaskManager(db_path=temp_db)
    yield manager
    manager.close()


@pytest.fixture
def ephemeral():
    """Memory-only manager."""
    return TaskManager(use_database=False)


@pytest.fixture(params=["backed", "ephemeral"])
def any_manager(request, temp_db):
    """Run a test against both manager modes."""
    if request.param == "backed":
        manager = TaskManager(db_path=temp_db)
    else:
        manager = TaskManager(use_database=False)
    yield manager
    manager.close()

