"""
Tests for the one-shot CLI commands, run through Typer's CliRunner.
"""

import json
import logging
import logging.handlers

import pytest
from typer.testing import CliRunner

from tasktree import __version__, config
from tasktree.cli import main as cli_main
from tasktree.cli.main import app
from tasktree.core.manager import TaskManager
from tasktree.logging_setup import setup_logging

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep CLI runs from replacing pytest's logging handlers."""
    monkeypatch.setattr(cli_main, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli.db")


@pytest.fixture
def cli(db):
    """Invoke the app against the temporary database."""
    def invoke(*args):
        return runner.invoke(app, ["--db", db, *args])
    return invoke


def load(db):
    return TaskManager(db_path=db)


# --- add / ls ---

def test_add_then_ls(cli):
    result = cli("add", "Buy milk")
    assert result.exit_code == 0
    assert "Created task" in result.output
    assert "#1" in result.output

    result = cli("ls", "--raw")
    assert result.exit_code == 0
    assert "[ ] 1: Buy milk" in result.output


def test_add_with_parent_due_and_url(cli, db):
    cli("add", "Parent")
    result = cli("add", "Child", "--parent", "1", "--due", "2030-01-02", "--url", "https://x")
    assert result.exit_code == 0
    assert "under #1" in result.output

    with load(db) as manager:
        child = manager.find(2)
        assert child.parent.id == 1
        assert str(child.due_date) == "2030-01-02"
        assert child.reference_url == "https://x"


def test_add_json(cli):
    result = cli("add", "Json task", "--json")
    data = json.loads(result.stdout)
    assert data["id"] == 1
    assert data["title"] == "Json task"
    assert data["completed"] is False


def test_add_errors(cli, db):
    result = cli("add", "   ")
    assert result.exit_code == 1
    assert "Title cannot be empty" in result.output

    result = cli("add", "Orphan", "--parent", "99")
    assert result.exit_code == 1
    assert "Parent task not found: 99" in result.output

    result = cli("add", "Bad date", "--due", "someday")
    assert result.exit_code == 1
    assert "YYYY-MM-DD" in result.output

    with load(db) as manager:
        assert manager.tasks == []


def test_ls_empty(cli):
    result = cli("ls")
    assert result.exit_code == 0
    assert "No tasks yet" in result.output


def test_ls_raw_tree_is_indented(cli):
    cli("add", "Root")
    cli("add", "Child", "-p", "1")
    result = cli("ls", "--raw")
    assert result.output.splitlines() == ["[ ] 1: Root", "  [ ] 2: Child"]


def test_ls_filters(cli):
    cli("add", "Old", "--due", "2000-01-01")
    cli("add", "Later", "--due", "2999-01-01")
    cli("add", "Finished")
    cli("done", "3")

    overdue = json.loads(cli("ls", "--overdue", "--json").stdout)
    assert [t["title"] for t in overdue] == ["Old"]

    done = json.loads(cli("ls", "--done", "--json").stdout)
    assert [t["title"] for t in done] == ["Finished"]

    todo = json.loads(cli("ls", "--todo", "--json").stdout)
    assert [t["title"] for t in todo] == ["Old", "Later"]

    result = cli("ls", "--today")
    assert "No tasks found" in result.output


def test_ls_tree_shows_stats_line(cli):
    cli("add", "Root")
    result = cli("ls")
    assert result.exit_code == 0
    assert "Total: 1" in result.output


# --- show ---

def test_show(cli):
    cli("add", "Inspect me", "--url", "https://x")
    result = cli("show", "1")
    assert result.exit_code == 0
    assert "Inspect me" in result.output
    assert "https://x" in result.output

    data = json.loads(cli("show", "1", "--json").stdout)
    assert data["reference_url"] == "https://x"


def test_show_missing(cli):
    result = cli("show", "9")
    assert result.exit_code == 1
    assert "Task 9 not found" in result.output


# --- done / undone ---

def test_done_and_undone_multiple(cli, db):
    for title in ("A", "B", "C"):
        cli("add", title)

    result = cli("done", "1,3")
    assert result.exit_code == 0
    assert "Completed 2 task(s)" in result.output
    with load(db) as manager:
        assert [t.completed for t in manager.tasks] == [True, False, True]

    result = cli("undone", "3")
    assert result.exit_code == 0
    with load(db) as manager:
        assert manager.find(3).completed is False


def test_done_reports_missing_ids(cli, db):
    cli("add", "A")
    result = cli("done", "1,42")
    assert result.exit_code == 1
    assert "Task 42 not found" in result.output
    with load(db) as manager:
        assert manager.find(1).completed is True


def test_done_rejects_bad_id_list(cli):
    result = cli("done", "1,x")
    assert result.exit_code == 1
    assert "Invalid task ID list" in result.output


# --- edit / due / url ---

def test_edit(cli, db):
    cli("add", "Old")
    assert cli("edit", "1", "New").exit_code == 0
    assert cli("edit", "1", "  ").exit_code == 1
    assert cli("edit", "5", "Nope").exit_code == 1
    with load(db) as manager:
        assert manager.find(1).title == "New"


def test_due_set_and_clear(cli, db):
    cli("add", "Task")
    result = cli("due", "1", "20301231")
    assert result.exit_code == 0
    assert "2030-12-31" in result.output

    result = cli("due", "1", "none")
    assert result.exit_code == 0
    assert "cleared" in result.output
    with load(db) as manager:
        assert manager.find(1).due_date is None

    assert cli("due", "1", "soonish").exit_code == 1
    assert cli("due", "7", "today").exit_code == 1


def test_url_set_and_clear(cli, db):
    cli("add", "Task")
    assert cli("url", "1", "https://example.com").exit_code == 0
    with load(db) as manager:
        assert manager.find(1).reference_url == "https://example.com"

    result = cli("url", "1")
    assert result.exit_code == 0
    assert "cleared" in result.output
    with load(db) as manager:
        assert manager.find(1).reference_url is None


# --- mv / rm ---

def test_mv_and_back_to_root(cli, db):
    cli("add", "A")
    cli("add", "B")
    assert cli("mv", "2", "1").exit_code == 0
    with load(db) as manager:
        assert manager.find(2).parent.id == 1

    result = cli("mv", "2", "root")
    assert result.exit_code == 0
    assert "top level" in result.output
    with load(db) as manager:
        assert manager.find(2).is_root


def test_mv_rejects_cycle(cli, db):
    cli("add", "A")
    cli("add", "B", "-p", "1")
    result = cli("mv", "1", "2")
    assert result.exit_code == 1
    with load(db) as manager:
        assert manager.find(1).is_root


def test_mv_rejects_bad_parent(cli):
    cli("add", "A")
    result = cli("mv", "1", "upstairs")
    assert result.exit_code == 1
    assert "Invalid parent ID" in result.output


def test_rm_cascades(cli, db):
    cli("add", "Root")
    cli("add", "Child", "-p", "1")
    cli("add", "Other")
    result = cli("rm", "1")
    assert result.exit_code == 0
    with load(db) as manager:
        assert [t.title for t in manager.tasks] == ["Other"]


def test_rm_json_reports_missing(cli):
    cli("add", "A")
    result = cli("rm", "1,8", "--json")
    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert data == {"deleted": [1], "not_found": [8]}


# --- stats / export / version ---

def test_stats_json(cli):
    cli("add", "A")
    cli("add", "B", "-p", "1")
    cli("done", "2")
    data = json.loads(cli("stats", "--json").stdout)
    assert data["total"] == 2
    assert data["completed"] == 1
    assert data["root_tasks"] == 1
    assert data["completion_rate"] == 50.0
    assert data["depth"] == {"max": 1, "average": 0.5}


def test_stats_text(cli):
    cli("add", "A")
    result = cli("stats")
    assert result.exit_code == 0
    assert "0/1 tasks completed" in result.output


def test_export_stdout(cli):
    cli("add", "Ship it")
    result = cli("export")
    assert result.exit_code == 0
    assert "# Task List" in result.output
    assert "- [ ] Ship it" in result.output


def test_export_to_file_appends_extension(cli, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cli("add", "Ship it")
    result = cli("export", "--output", "weekly")
    assert result.exit_code == 0
    assert "Saved to weekly.md" in result.output
    assert "- [ ] Ship it" in (tmp_path / "weekly.md").read_text(encoding="utf-8")


def test_version(cli):
    result = cli("version")
    assert result.exit_code == 0
    assert f"tasktree v{__version__}" in result.output


def test_unopenable_database_exits_1(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    result = runner.invoke(app, ["--db", str(blocker / "tasks.db"), "ls"])
    assert result.exit_code == 1
    assert "Cannot open task database" in result.output


def test_env_database_is_used(monkeypatch, tmp_path):
    db_path = tmp_path / "from_env.db"
    monkeypatch.setenv("TASKTREE_DB", str(db_path))
    result = runner.invoke(app, ["add", "From env"])
    assert result.exit_code == 0
    assert db_path.exists()


# --- Configuration and logging ---

def test_load_settings_precedence(monkeypatch, tmp_path, temp_db):
    assert config.load_settings().db_path == temp_db

    monkeypatch.setenv("TASKTREE_DB", str(tmp_path / "env.db"))
    assert config.load_settings().db_path == tmp_path / "env.db"
    assert config.load_settings(str(tmp_path / "flag.db")).db_path == tmp_path / "flag.db"


def test_load_settings_log_level(monkeypatch):
    monkeypatch.setenv("TASKTREE_LOG_LEVEL", "debug")
    assert config.load_settings().log_level == "DEBUG"


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        setup_logging(tmp_path / "logs")
        added = [h for h in root.handlers if h not in saved_handlers]
        assert len(added) == 2
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in added)

        logging.getLogger("tasktree.test").info("hello log")
        for handler in added:
            handler.flush()
        assert "hello log" in (tmp_path / "logs" / "tasktree.log").read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            if handler not in saved_handlers:
                handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
