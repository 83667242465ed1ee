"""
Tool: Weekly Review
Purpose: Count quests completed in the trailing review window

An attempt counts when its log derives COMPLETED and its latest COMPLETED
event falls inside the window (default 7 days, args/paintquest.yaml ->
review.window_days).

Usage:
    python -m paintquest.attempts.review --user alice
    python -m paintquest.attempts.review --user alice --days 14
"""

import argparse
import json
import sqlite3
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from paintquest import database
from paintquest.attempts import store
from paintquest.attempts.fsm import derive_attempt_state, parse_timestamp
from paintquest.config_models import load_config
from paintquest.errors import MSG_NOT_AUTHENTICATED, STORAGE, UNAUTHENTICATED, fail, ok
from paintquest.logging_config import get_logger
from paintquest.models import AttemptState, EventType

logger = get_logger(__name__)


def completed_within(
    attempts: list[dict[str, Any]],
    events_by_attempt: dict[str, list[dict[str, Any]]],
    since: datetime,
) -> list[dict[str, Any]]:
    """Pure part of the review: pick completed attempts whose last COMPLETED is at or after ``since``."""
    completed = []
    for attempt in attempts:
        events = events_by_attempt.get(attempt["id"], [])
        if derive_attempt_state(events).derived_state != AttemptState.COMPLETED:
            continue

        completed_events = [e for e in events if e.get("event_type") == EventType.COMPLETED.value]
        if not completed_events:
            continue
        last = max(completed_events, key=lambda e: parse_timestamp(e.get("timestamp")))
        completed_at = parse_timestamp(last.get("timestamp"))

        if completed_at >= since:
            completed.append({
                "attempt_id": attempt["id"],
                "task_id": attempt.get("task_id"),
                "completed_at": last["timestamp"],
            })
    return completed


def weekly_review(
    user_id: str,
    days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Completed-quest rollup for the trailing window.

    Args:
        user_id: Owner
        days: Window length; defaults to review.window_days from config
        now: Reference time (defaults to current UTC time)

    Returns:
        dict with count, window_days and the completed attempts
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    window = days if days is not None else load_config().review.window_days
    reference = now or datetime.now(timezone.utc)
    since = reference - timedelta(days=window)

    conn = None
    try:
        conn = database.get_connection()
        cursor = conn.cursor()
        attempts = store.list_attempts(cursor, user_id)
        grouped = store.events_by_attempt(cursor, [a["id"] for a in attempts])
    except sqlite3.Error as e:
        logger.error("storage_error", operation="weekly_review", error=str(e))
        return fail("Failed to load attempts", STORAGE)
    finally:
        if conn is not None:
            conn.close()

    completed = completed_within(attempts, grouped, since)
    return ok({
        "count": len(completed),
        "window_days": window,
        "completed": completed,
    })


def main():
    parser = argparse.ArgumentParser(description="Weekly Review - completed quests")
    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--days", type=int, help="Window length in days")

    args = parser.parse_args()
    result = weekly_review(args.user, days=args.days)

    print(json.dumps(result, indent=2, default=str))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
