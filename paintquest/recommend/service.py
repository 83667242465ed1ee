"""
Tool: Recommendation Service
Purpose: Load store snapshots and run the task and template scorers

Usage:
    python -m paintquest.recommend.service --action tasks --user alice --minutes 45
    python -m paintquest.recommend.service --action attempts --user alice --task-id abc123 --minutes 30 --energy low

Output:
    JSON result with recommendations and request metadata
"""

import argparse
import json
import sqlite3
import sys
from datetime import datetime
from typing import Any, Optional

from paintquest import database
from paintquest.arsenal.manager import available_tool_tags
from paintquest.attempts import store
from paintquest.config_models import load_config
from paintquest.database import write_transaction
from paintquest.errors import (
    MSG_MINUTES_REQUIRED,
    MSG_NOT_AUTHENTICATED,
    MSG_QUEST_NOT_FOUND,
    NOT_FOUND,
    STORAGE,
    UNAUTHENTICATED,
    fail,
    ok,
)
from paintquest.logging_config import bind_user, get_logger
from paintquest.models import ENERGY_TIERS, EventType, TaskStatus, parse_energy
from paintquest.profile.manager import effective_weights, fetch_profile, fetch_recommendation_config
from paintquest.quests.templates import ensure_task_templates
from paintquest.recommend.attempts import recommend_attempts
from paintquest.recommend.tasks import recommend_tasks
from paintquest.tags import normalize_tags
from paintquest.tasks.manager import fetch_task

logger = get_logger(__name__)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number == number else None


def used_template_ids(progress_events: list[dict[str, Any]]) -> list[str]:
    """``payload.template_id`` of PROGRESS_RECORDED events, in the given order, blanks dropped."""
    ids = []
    for event in progress_events:
        payload = event.get("payload")
        if isinstance(payload, dict) and payload.get("template_id"):
            ids.append(str(payload["template_id"]))
    return ids


# =============================================================================
# Task recommendations
# =============================================================================

def get_task_recommendations(
    user_id: str,
    minutes: Any,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Rank the user's non-archived tasks for a session of ``minutes``.

    Args:
        user_id: Owner
        minutes: Available minutes, must be positive
        now: Reference time for staleness

    Returns:
        dict with recommendations (task, score, reasons) and meta
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    available = _as_number(minutes)
    if available is None or available <= 0:
        return fail(MSG_MINUTES_REQUIRED)

    config = load_config()

    with bind_user(user_id):
        conn = None
        try:
            conn = database.get_connection()
            cursor = conn.cursor()

            cursor.execute(
                "SELECT * FROM task WHERE user_id = ? AND status != ? ORDER BY updated_at DESC",
                (user_id, TaskStatus.ARCHIVED.value),
            )
            tasks = [database.row_to_dict(row) for row in cursor.fetchall()]
            attempts = store.list_attempts(cursor, user_id)
            stored = fetch_recommendation_config(cursor, user_id)
            profile = fetch_profile(cursor, user_id)
            tool_tags = available_tool_tags(cursor, user_id)
        except sqlite3.Error as e:
            logger.error("storage_error", operation="get_task_recommendations", error=str(e))
            return fail("Failed to load tasks", STORAGE)
        finally:
            if conn is not None:
                conn.close()

        recommendations = recommend_tasks(
            tasks,
            attempts,
            available,
            config=effective_weights(stored),
            profile=profile,
            available_tool_tags=tool_tags,
            now=now,
            limit=config.recommendation.max_results,
        )
        logger.info("tasks_recommended", candidates=len(tasks), returned=len(recommendations))

    return ok({
        "recommendations": [rec.to_dict() for rec in recommendations],
        "meta": {"availableMinutes": available, "taskCount": len(tasks)},
    })


# =============================================================================
# Attempt template recommendations
# =============================================================================

def _attempt_recommendations(
    cursor: sqlite3.Cursor,
    user_id: str,
    task_id: str,
    available: int,
    energy: Optional[str],
) -> dict[str, Any]:
    settings = load_config()
    provisioning = settings.provisioning

    task = fetch_task(cursor, user_id, task_id)
    if task is None:
        return fail(MSG_QUEST_NOT_FOUND, NOT_FOUND)

    profile = fetch_profile(cursor, user_id) or {}
    if energy is None:
        preferred = parse_energy(profile.get("energy_preference"))
        energy = preferred.value if preferred else provisioning.default_energy

    attempt_ids = [attempt["id"] for attempt in store.list_attempts(cursor, user_id, task_id=task_id)]
    progress = store.list_events_for_attempts(
        cursor, attempt_ids, event_type=EventType.PROGRESS_RECORDED, newest_first=True
    )
    used = used_template_ids(progress)
    recent = used[: provisioning.recent_template_window]
    if provisioning.used_template_window is not None:
        used = used[: provisioning.used_template_window]
    used_set = set(used)

    templates = ensure_task_templates(
        cursor, user_id, task, used_set, min_unused=provisioning.min_unused_task_templates
    )
    unused = [template for template in templates if template["id"] not in used_set]

    recommendations = recommend_attempts(
        unused,
        available,
        energy,
        bottom_skills=normalize_tags(profile.get("focus_skills_bottom3")),
        available_tool_tags=available_tool_tags(cursor, user_id) or [],
        recent_template_ids=recent,
        limit=settings.recommendation.max_results,
    )
    logger.info("attempts_recommended", task_id=task_id, candidates=len(unused), returned=len(recommendations))

    return ok({
        "recommendations": [rec.to_dict() for rec in recommendations],
        "meta": {
            "questId": task_id,
            "availableMinutes": available,
            "energy": energy,
            "templateCount": len(unused),
        },
    })


def get_attempt_recommendations(
    user_id: str,
    task_id: str,
    minutes: Any = None,
    energy: Optional[str] = None,
) -> dict[str, Any]:
    """
    Suggest how to spend a session on one quest.

    Provisions templates first (which may insert rows), then scores the
    templates not yet used on this quest.

    Args:
        user_id: Owner
        task_id: Quest (task) ID
        minutes: Available minutes; defaults to 60, floored at 1
        energy: low, med or high; defaults to the profile preference, then med

    Returns:
        dict with recommendations (template, score, reasons, recommendedMinutes) and meta
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if minutes is None or minutes == "":
        available = load_config().provisioning.default_minutes
    else:
        number = _as_number(minutes)
        if number is None:
            return fail("minutes must be a number")
        available = int(number)
    available = max(1, available)

    requested = None
    if energy:
        parsed = parse_energy(energy)
        if parsed is None:
            return fail(f"Invalid energy. Must be one of: {ENERGY_TIERS}")
        requested = parsed.value

    with bind_user(user_id):
        conn = None
        try:
            conn = database.get_connection()
            with write_transaction(conn) as cursor:
                return _attempt_recommendations(cursor, user_id, task_id, available, requested)
        except sqlite3.Error as e:
            logger.error("storage_error", operation="get_attempt_recommendations", error=str(e))
            return fail("Failed to load templates", STORAGE)
        finally:
            if conn is not None:
                conn.close()


def main():
    parser = argparse.ArgumentParser(description="Recommendations - what to paint next")
    parser.add_argument("--action", required=True, choices=["tasks", "attempts"], help="Action to perform")
    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--task-id", help="Quest (task) ID for attempt recommendations")
    parser.add_argument("--minutes", type=float, help="Available minutes")
    parser.add_argument("--energy", choices=ENERGY_TIERS, help="Energy for this session")

    args = parser.parse_args()

    if args.action == "tasks":
        result = get_task_recommendations(args.user, args.minutes)
    else:
        if not args.task_id:
            print(json.dumps({"success": False, "error": "--task-id required for attempts"}))
            sys.exit(1)
        result = get_attempt_recommendations(args.user, args.task_id, minutes=args.minutes, energy=args.energy)

    print(json.dumps(result, indent=2, default=str))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
