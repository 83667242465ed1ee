"""Tests for paintquest/cli.py"""

import json

import pytest

from paintquest.cli import build_parser, main


def _run(capsys, *argv):
    main(["--user", "test_user_123", *argv])
    return json.loads(capsys.readouterr().out)


class TestParser:
    """Argument parsing."""

    def test_user_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAINTQUEST_USER", "alice")

        assert build_parser().parse_args(["tasks"]).user == "alice"

    def test_rejects_unknown_event_type(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["event", "a1", "PAUSED"])

    def test_version(self, capsys):
        main(["--version"])

        assert "Paint Quest version" in capsys.readouterr().out


class TestCommands:
    """End-to-end through the store."""

    def test_quest_lifecycle(self, pq_db, capsys):
        """Add a task, start it, record progress, complete, review."""
        task = _run(capsys, "task-add", "Paint a dragon", "--min", "30", "--max", "60", "--skills", "glazing")
        task_id = task["data"]["task_id"]

        started = _run(capsys, "start", task_id)
        attempt_id = started["data"]["attempt"]["id"]
        assert started["data"]["derivedState"] == "IN_PROGRESS"

        suggested = _run(capsys, "suggest", task_id, "--minutes", "30")
        template_id = suggested["data"]["recommendations"][0]["template"]["id"]

        progress = _run(capsys, "event", attempt_id, "PROGRESS_RECORDED", "--template-id", template_id)
        assert progress["data"]["event"]["payload"] == {"template_id": template_id}

        done = _run(capsys, "event", attempt_id, "COMPLETED")
        assert done["data"]["derived"]["derivedState"] == "COMPLETED"

        shown = _run(capsys, "show", attempt_id)
        assert len(shown["data"]["events"]) == 3

        review = _run(capsys, "review")
        assert review["data"]["count"] == 1

    def test_recommend(self, pq_db, capsys):
        _run(capsys, "seed")

        result = _run(capsys, "recommend", "--minutes", "45")

        assert len(result["data"]["recommendations"]) == 5

    def test_failure_exits_nonzero(self, pq_db, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--user", "test_user_123", "show", "missing"])

        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out)["error"] == "Attempt not found"

    def test_bad_payload(self, pq_db, capsys):
        with pytest.raises(SystemExit):
            main(["--user", "test_user_123", "event", "a1", "PROGRESS_RECORDED", "--payload", "{oops"])

        assert json.loads(capsys.readouterr().out)["error"] == "--payload must be valid JSON"
