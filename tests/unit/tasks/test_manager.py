"""Tests for paintquest/tasks/manager.py

The task manager keeps the painting backlog. Key functionality:
- Create tasks with time estimates, priority and tag sets
- Filter and page through tasks, optionally hiding archived ones
- Partial updates where None means unchanged
- Archive instead of delete

These tests ensure reliable backlog management.
"""

import sqlite3
from unittest.mock import patch

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Setup: Patch DB_PATH to use temp database
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def task_manager_temp_db(temp_db):
    """Patch the database module to use a temporary file."""
    with patch("paintquest.database.DB_PATH", temp_db):
        from paintquest.tasks import manager

        yield manager


# ─────────────────────────────────────────────────────────────────────────────
# Task Creation Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCreateTask:
    """Tests for task creation."""

    def test_creates_basic_task(self, task_manager_temp_db, mock_user_id):
        """Should create a task with only a title."""
        result = task_manager_temp_db.create_task(mock_user_id, "Paint a dragon")

        assert result["success"] is True
        assert "task_id" in result["data"]
        task = result["data"]["task"]
        assert task["title"] == "Paint a dragon"
        assert task["priority"] == 3
        assert task["status"] == "backlog"
        assert task["skills_tags"] == []

    def test_creates_task_with_all_fields(self, task_manager_temp_db, mock_user_id, sample_task):
        """Should store every optional field."""
        result = task_manager_temp_db.create_task(mock_user_id, mfg="Games Workshop", **sample_task)

        task = result["data"]["task"]
        assert task["game"] == "Warhammer 40k"
        assert task["mfg"] == "Games Workshop"
        assert task["estimated_minutes_min"] == 30
        assert task["estimated_minutes_max"] == 60
        assert task["required_tools_tags"] == ["round brush"]

    def test_comma_separated_tags(self, task_manager_temp_db, mock_user_id):
        """Tag strings are split and trimmed."""
        result = task_manager_temp_db.create_task(mock_user_id, "Bases", skills_tags="basing, drybrushing ,")

        assert result["data"]["task"]["skills_tags"] == ["basing", "drybrushing"]

    def test_generates_unique_id(self, task_manager_temp_db, mock_user_id):
        """Should generate unique IDs for each task."""
        result1 = task_manager_temp_db.create_task(mock_user_id, "task 1")
        result2 = task_manager_temp_db.create_task(mock_user_id, "task 2")

        assert result1["data"]["task_id"] != result2["data"]["task_id"]

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_requires_title(self, task_manager_temp_db, mock_user_id, title):
        result = task_manager_temp_db.create_task(mock_user_id, title)

        assert result["success"] is False
        assert result["error"] == "Title is required"

    @pytest.mark.parametrize("priority", [0, 6, "high", True])
    def test_rejects_invalid_priority(self, task_manager_temp_db, mock_user_id, priority):
        result = task_manager_temp_db.create_task(mock_user_id, "x", priority=priority)

        assert result["success"] is False
        assert "priority" in result["error"]

    def test_rejects_inverted_range(self, task_manager_temp_db, mock_user_id):
        result = task_manager_temp_db.create_task(
            mock_user_id, "x", estimated_minutes_min=60, estimated_minutes_max=30
        )

        assert result["error"] == "estimated_minutes_min cannot exceed estimated_minutes_max"

    def test_rejects_invalid_status(self, task_manager_temp_db, mock_user_id):
        result = task_manager_temp_db.create_task(mock_user_id, "x", status="paused")

        assert result["success"] is False

    def test_none_status_defaults_to_backlog(self, task_manager_temp_db, mock_user_id):
        result = task_manager_temp_db.create_task(mock_user_id, "x", status=None, priority=None)

        assert result["success"] is True
        assert result["data"]["task"]["status"] == "backlog"
        assert result["data"]["task"]["priority"] == 3

    def test_requires_user(self, task_manager_temp_db):
        result = task_manager_temp_db.create_task("", "x")

        assert result["error_code"] == "unauthenticated"


# ─────────────────────────────────────────────────────────────────────────────
# Task Retrieval Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestGetTask:
    """Tests for task retrieval."""

    def test_gets_own_task(self, task_manager_temp_db, mock_user_id):
        task_id = task_manager_temp_db.create_task(mock_user_id, "mine")["data"]["task_id"]

        result = task_manager_temp_db.get_task(mock_user_id, task_id)

        assert result["success"] is True
        assert result["data"]["title"] == "mine"

    def test_other_users_task_not_found(self, task_manager_temp_db, mock_user_id, other_user_id):
        """Ownership mismatch reads as not found."""
        task_id = task_manager_temp_db.create_task(mock_user_id, "mine")["data"]["task_id"]

        result = task_manager_temp_db.get_task(other_user_id, task_id)

        assert result["error"] == "Task not found"
        assert result["error_code"] == "not_found"


class TestListTasks:
    """Tests for task listing."""

    def test_lists_only_own_tasks(self, task_manager_temp_db, mock_user_id, other_user_id):
        task_manager_temp_db.create_task(mock_user_id, "a")
        task_manager_temp_db.create_task(other_user_id, "b")

        result = task_manager_temp_db.list_tasks(mock_user_id)

        assert result["data"]["total"] == 1
        assert result["data"]["tasks"][0]["title"] == "a"

    def test_filters_by_status(self, task_manager_temp_db, mock_user_id):
        task_manager_temp_db.create_task(mock_user_id, "a")
        task_manager_temp_db.create_task(mock_user_id, "b", status="someday")

        result = task_manager_temp_db.list_tasks(mock_user_id, status="someday")

        assert [t["title"] for t in result["data"]["tasks"]] == ["b"]

    def test_hides_archived(self, task_manager_temp_db, mock_user_id):
        task_id = task_manager_temp_db.create_task(mock_user_id, "old")["data"]["task_id"]
        task_manager_temp_db.create_task(mock_user_id, "new")
        task_manager_temp_db.archive_task(mock_user_id, task_id)

        visible = task_manager_temp_db.list_tasks(mock_user_id, include_archived=False)
        everything = task_manager_temp_db.list_tasks(mock_user_id)

        assert [t["title"] for t in visible["data"]["tasks"]] == ["new"]
        assert everything["data"]["total"] == 2

    def test_pagination(self, task_manager_temp_db, mock_user_id):
        for i in range(5):
            task_manager_temp_db.create_task(mock_user_id, f"t{i}")

        result = task_manager_temp_db.list_tasks(mock_user_id, limit=2, offset=2)

        assert len(result["data"]["tasks"]) == 2
        assert result["data"]["total"] == 5

    def test_rejects_invalid_status_filter(self, task_manager_temp_db, mock_user_id):
        result = task_manager_temp_db.list_tasks(mock_user_id, status="paused")

        assert result["success"] is False


# ─────────────────────────────────────────────────────────────────────────────
# Task Update Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestUpdateTask:
    """Tests for partial updates."""

    def test_updates_given_fields_only(self, task_manager_temp_db, mock_user_id, sample_task):
        task_id = task_manager_temp_db.create_task(mock_user_id, **sample_task)["data"]["task_id"]

        result = task_manager_temp_db.update_task(mock_user_id, task_id, priority=5, skills_tags="glazing")

        task = result["data"]
        assert task["priority"] == 5
        assert task["skills_tags"] == ["glazing"]
        assert task["title"] == sample_task["title"]
        assert task["required_tools_tags"] == ["round brush"]

    def test_no_fields(self, task_manager_temp_db, mock_user_id):
        task_id = task_manager_temp_db.create_task(mock_user_id, "x")["data"]["task_id"]

        result = task_manager_temp_db.update_task(mock_user_id, task_id)

        assert result["error"] == "No fields to update"

    def test_range_checked_against_stored_value(self, task_manager_temp_db, mock_user_id, sample_task):
        """A new min above the stored max is rejected."""
        task_id = task_manager_temp_db.create_task(mock_user_id, **sample_task)["data"]["task_id"]

        result = task_manager_temp_db.update_task(mock_user_id, task_id, estimated_minutes_min=90)

        assert result["success"] is False

    def test_unknown_task(self, task_manager_temp_db, mock_user_id):
        result = task_manager_temp_db.update_task(mock_user_id, "missing", title="x")

        assert result["error"] == "Task not found"

    def test_archive(self, task_manager_temp_db, mock_user_id):
        task_id = task_manager_temp_db.create_task(mock_user_id, "x")["data"]["task_id"]

        result = task_manager_temp_db.archive_task(mock_user_id, task_id)

        assert result["data"]["status"] == "archived"


class TestSeedDefaultTasks:
    """Tests for the starter backlog."""

    def test_seeds_starter_backlog(self, task_manager_temp_db, mock_user_id):
        from paintquest.tasks import DEFAULT_TASKS

        result = task_manager_temp_db.seed_default_tasks(mock_user_id)

        assert len(result["data"]["tasks"]) == len(DEFAULT_TASKS)
        assert task_manager_temp_db.list_tasks(mock_user_id)["data"]["total"] == len(DEFAULT_TASKS)


# ─────────────────────────────────────────────────────────────────────────────
# Storage Failure Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestStorageFailure:
    """SQLite errors come back as storage failures."""

    @pytest.fixture
    def broken_db(self):
        with patch(
            "paintquest.database.get_connection",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            yield

    def test_create_reports_storage_error(self, task_manager_temp_db, broken_db, mock_user_id):
        result = task_manager_temp_db.create_task(mock_user_id, "Paint a dragon")

        assert result["success"] is False
        assert result["error"] == "Failed to create task"
        assert result["error_code"] == "storage"

    def test_list_reports_storage_error(self, task_manager_temp_db, broken_db, mock_user_id):
        assert task_manager_temp_db.list_tasks(mock_user_id)["error_code"] == "storage"

    def test_failed_update_rolls_back(self, task_manager_temp_db, mock_user_id):
        """A failing statement leaves the stored task unchanged."""
        task_id = task_manager_temp_db.create_task(mock_user_id, "x")["data"]["task_id"]

        with patch.object(
            task_manager_temp_db,
            "fetch_task",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            result = task_manager_temp_db.update_task(mock_user_id, task_id, title="y")

        assert result["error_code"] == "storage"
        assert task_manager_temp_db.get_task(mock_user_id, task_id)["data"]["title"] == "x"
