"""Shared test fixtures for Paint Quest tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- Standard test user/task/template data
- Event log builders for the state deriver

Usage:
    def test_something(pq_db, mock_user_id):
        # pq_db points paintquest.database at a throwaway sqlite file
        ...
"""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "paintquest"


# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Route structlog through stdlib at WARNING so tests stay quiet."""
    from paintquest.logging_config import setup_logging

    setup_logging(level="WARNING")


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def pq_db(temp_db: Path) -> Generator[Path, None, None]:
    """Point every Paint Quest tool at the temporary database.

    Yields:
        Path to the temporary database file
    """
    with patch("paintquest.database.DB_PATH", temp_db):
        from paintquest import database

        # Force table creation
        conn = database.get_connection()
        conn.close()

        yield temp_db


# ─────────────────────────────────────────────────────────────────────────────
# User Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_user_id() -> str:
    """Standard test user ID."""
    return "test_user_123"


@pytest.fixture
def other_user_id() -> str:
    """A second user, for ownership checks."""
    return "other_user_456"


# ─────────────────────────────────────────────────────────────────────────────
# Task / Template Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_task() -> dict:
    """Sample task data for testing.

    Returns:
        dict with task fields accepted by create_task
    """
    return {
        "title": "Paint 10 Space Marines",
        "game": "Warhammer 40k",
        "estimated_minutes_min": 30,
        "estimated_minutes_max": 60,
        "priority": 4,
        "required_tools_tags": ["round brush"],
        "skills_tags": ["basecoating", "layering"],
    }


@pytest.fixture
def sample_template() -> dict:
    """Sample attempt template row for the pure scorer.

    Returns:
        dict shaped like a quest_attempt_template row
    """
    return {
        "id": "tpl-1",
        "task_id": "task-1",
        "title": "Quest: Highlight push",
        "estimated_minutes_min": 30,
        "estimated_minutes_max": 75,
        "energy": "high",
        "required_tools_tags": ["highlight brush"],
        "focus_skills_tags": ["highlighting"],
    }


@pytest.fixture
def created_task(pq_db, mock_user_id, sample_task) -> dict:
    """A task persisted for ``mock_user_id``."""
    from paintquest.tasks.manager import create_task

    result = create_task(mock_user_id, **sample_task)
    assert result["success"] is True
    return result["data"]["task"]


# ─────────────────────────────────────────────────────────────────────────────
# Event Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_event():
    """Build an event dict for the state deriver.

    Usage:
        make_event("ATTEMPT_STARTED", "10:00")
    """

    def _make(event_type: str, clock: str, day: str = "2026-02-09", **extra) -> dict:
        return {"event_type": event_type, "timestamp": f"{day}T{clock}:00Z", **extra}

    return _make
