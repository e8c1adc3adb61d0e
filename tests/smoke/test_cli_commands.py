"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.
Each test gets its own SQLite file database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from wqn.db.models import ReviewSessionResult, ReviewSessionState
from wqn.review.models import SessionState

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

USER_ID = "3f6b2a1c-8d4e-4f5a-9b7c-0e1d2c3b4a05"
PROBLEM_SET_ID = "7a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c06"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'wqn.db'}"


def run_cli_command(command: list[str], database_url: str, timeout: int = 60) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        command: Arguments after 'python -m wqn.cli.main'
        database_url: DATABASE_URL for the subprocess
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    env = dict(os.environ, DATABASE_URL=database_url, COLUMNS="200", LOG_LEVEL="WARNING")
    result = subprocess.run(
        [sys.executable, "-m", "wqn.cli.main", *command],
        cwd=PROJECT_ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    return result.returncode, result.stdout, result.stderr


def seed_session(database_url: str) -> str:
    """Insert one active session with two answers; returns its id."""
    engine = create_engine(database_url)
    state = SessionState(
        problem_ids=("p-1", "p-2", "p-3"),
        completed_problem_ids=("p-1", "p-2"),
        initial_statuses={"p-1": "wrong", "p-2": "wrong", "p-3": "needs_review"},
        elapsed_ms=42000,
    )
    with Session(engine) as db:
        row = ReviewSessionState(
            user_id=USER_ID,
            problem_set_id=PROBLEM_SET_ID,
            is_active=True,
            session_state=state.to_dict(),
        )
        db.add(row)
        db.flush()
        db.add(ReviewSessionResult(session_state_id=row.id, problem_id="p-1", was_correct=True, was_skipped=False))
        db.add(ReviewSessionResult(session_state_id=row.id, problem_id="p-2", was_correct=False, was_skipped=False))
        db.commit()
        session_id = row.id
    engine.dispose()
    return session_id


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, database_url):
        code, stdout, stderr = run_cli_command(["--help"], database_url)

        assert code == 0, f"Help failed: {stderr}"
        assert "sessions" in stdout
        assert "serve" in stdout

    def test_sessions_help(self, database_url):
        code, stdout, stderr = run_cli_command(["sessions", "--help"], database_url)

        assert code == 0, f"Sessions help failed: {stderr}"
        assert "summary" in stdout

    def test_version(self, database_url):
        code, stdout, stderr = run_cli_command(["version"], database_url)

        assert code == 0, f"Version failed: {stderr}"
        assert "wrong-question-notebook" in stdout


class TestCLIDatabase:
    """Test database commands."""

    def test_db_init(self, database_url):
        code, stdout, stderr = run_cli_command(["db", "init"], database_url)

        assert code == 0, f"db init failed: {stderr}"
        assert "Database initialized" in stdout

    def test_db_init_is_idempotent(self, database_url):
        run_cli_command(["db", "init"], database_url)
        code, _, stderr = run_cli_command(["db", "init"], database_url)

        assert code == 0, f"Second db init failed: {stderr}"


class TestCLISessions:
    """Test session inspection commands."""

    def test_list_empty(self, database_url):
        run_cli_command(["db", "init"], database_url)
        code, stdout, stderr = run_cli_command(["sessions", "list", "--user", USER_ID], database_url)

        assert code == 0, f"sessions list failed: {stderr}"
        assert "No review sessions found" in stdout

    def test_list_and_summary(self, database_url):
        run_cli_command(["db", "init"], database_url)
        session_id = seed_session(database_url)

        code, stdout, stderr = run_cli_command(["sessions", "list", "--user", USER_ID], database_url)
        assert code == 0, f"sessions list failed: {stderr}"
        assert session_id[:8] in stdout
        assert "2/3" in stdout

        code, stdout, stderr = run_cli_command(
            ["sessions", "summary", session_id, "--user", USER_ID], database_url
        )
        assert code == 0, f"sessions summary failed: {stderr}"
        assert "Accuracy" in stdout
        assert "50%" in stdout

    def test_summary_for_other_user_fails(self, database_url):
        run_cli_command(["db", "init"], database_url)
        session_id = seed_session(database_url)

        code, stdout, _ = run_cli_command(
            ["sessions", "summary", session_id, "--user", "someone-else"], database_url
        )

        assert code == 1
        assert "Session not found" in stdout


class TestEntryPoint:
    """Test the uvicorn entry module."""

    def test_import_does_not_touch_sys_path(self, database_url):
        env = dict(os.environ, DATABASE_URL=database_url, LOG_LEVEL="WARNING")
        result = subprocess.run(
            [sys.executable, "-c", "import sys; before = list(sys.path); import main; assert sys.path == before"],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 0, f"import main failed: {result.stderr}"
