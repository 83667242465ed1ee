"""Tests for paintquest/attempts/review.py"""

from datetime import datetime, timezone

from paintquest import database
from paintquest.attempts import store
from paintquest.attempts.review import completed_within, weekly_review
from paintquest.models import EventType

NOW = datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc)


def _attempt_with_events(user_id, events):
    conn = database.get_connection()
    with database.write_transaction(conn) as cursor:
        attempt = store.insert_attempt(cursor, user_id)
        for event_type, timestamp in events:
            store.insert_event(cursor, attempt["id"], event_type, timestamp=timestamp)
    conn.close()
    return attempt


class TestCompletedWithin:
    """Tests for the pure selection."""

    def test_only_completed_inside_window(self):
        """In-window COMPLETED counts; old, abandoned and invalid logs do not."""
        attempts = [{"id": "recent"}, {"id": "old"}, {"id": "abandoned"}, {"id": "broken"}]
        events = {
            "recent": [
                {"event_type": "ATTEMPT_STARTED", "timestamp": "2026-02-14T10:00:00Z"},
                {"event_type": "COMPLETED", "timestamp": "2026-02-14T11:00:00Z"},
            ],
            "old": [
                {"event_type": "ATTEMPT_STARTED", "timestamp": "2026-01-01T10:00:00Z"},
                {"event_type": "COMPLETED", "timestamp": "2026-01-01T11:00:00Z"},
            ],
            "abandoned": [
                {"event_type": "ATTEMPT_STARTED", "timestamp": "2026-02-15T10:00:00Z"},
                {"event_type": "ABANDONED", "timestamp": "2026-02-15T11:00:00Z"},
            ],
            "broken": [
                {"event_type": "COMPLETED", "timestamp": "2026-02-15T11:00:00Z"},
            ],
        }

        completed = completed_within(attempts, events, datetime(2026, 2, 9, 12, 0, tzinfo=timezone.utc))

        assert [c["attempt_id"] for c in completed] == ["recent"]
        assert completed[0]["completed_at"] == "2026-02-14T11:00:00Z"


class TestWeeklyReview:
    """Tests for weekly_review against the store."""

    def test_counts_this_week(self, pq_db, mock_user_id):
        """Only attempts completed in the last 7 days are counted."""
        _attempt_with_events(mock_user_id, [
            (EventType.ATTEMPT_STARTED, "2026-02-15T10:00:00+00:00"),
            (EventType.COMPLETED, "2026-02-15T11:00:00+00:00"),
        ])
        _attempt_with_events(mock_user_id, [
            (EventType.ATTEMPT_STARTED, "2026-01-20T10:00:00+00:00"),
            (EventType.COMPLETED, "2026-01-20T11:00:00+00:00"),
        ])
        _attempt_with_events(mock_user_id, [
            (EventType.ATTEMPT_STARTED, "2026-02-16T09:00:00+00:00"),
        ])

        result = weekly_review(mock_user_id, now=NOW)

        assert result["success"] is True
        assert result["data"]["count"] == 1
        assert result["data"]["window_days"] == 7

    def test_custom_window(self, pq_db, mock_user_id):
        """A longer window picks up older completions."""
        _attempt_with_events(mock_user_id, [
            (EventType.ATTEMPT_STARTED, "2026-01-20T10:00:00+00:00"),
            (EventType.COMPLETED, "2026-01-20T11:00:00+00:00"),
        ])

        assert weekly_review(mock_user_id, days=30, now=NOW)["data"]["count"] == 1

    def test_requires_user(self, pq_db):
        assert weekly_review("")["error"] == "Not authenticated"
