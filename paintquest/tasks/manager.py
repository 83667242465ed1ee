"""
Tool: Task Manager
Purpose: CRUD operations for the painting backlog

Tasks are never deleted. "Delete" archives the task so attempt history
keeps pointing at a real row.

Usage:
    python -m paintquest.tasks.manager --action create --user alice --title "Paint 10 marines" --min 30 --max 60 --priority 4 --skills "basecoating, layering"
    python -m paintquest.tasks.manager --action list --user alice --status backlog
    python -m paintquest.tasks.manager --action get --user alice --task-id abc123
    python -m paintquest.tasks.manager --action update --user alice --task-id abc123 --status someday
    python -m paintquest.tasks.manager --action archive --user alice --task-id abc123
    python -m paintquest.tasks.manager --action seed --user alice

Dependencies:
    - sqlite3 (stdlib)

Output:
    JSON result with success status and data
"""

import argparse
import json
import sqlite3
import sys
from typing import Any, Optional

from paintquest.database import generate_id, row_to_dict, run_with_cursor, to_json, utc_now
from paintquest.errors import (
    MSG_NOT_AUTHENTICATED,
    MSG_TASK_NOT_FOUND,
    NOT_FOUND,
    UNAUTHENTICATED,
    fail,
    ok,
)
from paintquest.logging_config import get_logger
from paintquest.models import TASK_STATUSES, TaskStatus, parse_task_status
from paintquest.tags import normalize_tags
from paintquest.tasks import DEFAULT_PRIORITY, DEFAULT_TASKS, PRIORITY_MAX, PRIORITY_MIN

logger = get_logger(__name__)


def _validate_fields(
    priority: Optional[int] = None,
    status: Optional[str] = None,
    estimated_minutes_min: Optional[int] = None,
    estimated_minutes_max: Optional[int] = None,
) -> Optional[str]:
    """Return an error message for the first invalid field, else None."""
    if priority is not None:
        if isinstance(priority, bool) or not isinstance(priority, int) or not PRIORITY_MIN <= priority <= PRIORITY_MAX:
            return f"Invalid priority. Must be an integer {PRIORITY_MIN}-{PRIORITY_MAX}"

    if status is not None and parse_task_status(status) is None:
        return f"Invalid status. Must be one of: {TASK_STATUSES}"

    for value in (estimated_minutes_min, estimated_minutes_max):
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
            return "Estimated minutes must be non-negative integers"

    if (
        estimated_minutes_min is not None
        and estimated_minutes_max is not None
        and estimated_minutes_min > estimated_minutes_max
    ):
        return "estimated_minutes_min cannot exceed estimated_minutes_max"

    return None


def fetch_task(cursor: sqlite3.Cursor, user_id: str, task_id: str) -> Optional[dict[str, Any]]:
    """Load one task owned by ``user_id``; None on unknown id or ownership mismatch."""
    cursor.execute("SELECT * FROM task WHERE id = ? AND user_id = ?", (task_id, user_id))
    return row_to_dict(cursor.fetchone())


def set_task_status(cursor: sqlite3.Cursor, task_id: str, status: TaskStatus) -> None:
    cursor.execute(
        "UPDATE task SET status = ?, updated_at = ? WHERE id = ?",
        (status.value, utc_now(), task_id),
    )


def _insert_task(cursor: sqlite3.Cursor, user_id: str, fields: dict[str, Any]) -> str:
    task_id = generate_id()
    now = utc_now()
    cursor.execute(
        """
        INSERT INTO task (
            id, user_id, title, game, mfg, estimated_minutes_min, estimated_minutes_max,
            priority, required_tools_tags, skills_tags, status, created_at, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            task_id,
            user_id,
            fields["title"],
            fields.get("game"),
            fields.get("mfg"),
            fields.get("estimated_minutes_min"),
            fields.get("estimated_minutes_max"),
            fields.get("priority", DEFAULT_PRIORITY),
            to_json(normalize_tags(fields.get("required_tools_tags"))),
            to_json(normalize_tags(fields.get("skills_tags"))),
            fields.get("status", TaskStatus.BACKLOG.value),
            now,
            now,
        ),
    )
    return task_id


def _create(cursor: sqlite3.Cursor, user_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    task_id = _insert_task(cursor, user_id, fields)
    task = fetch_task(cursor, user_id, task_id)
    logger.info("task_created", task_id=task_id, priority=fields["priority"])
    return ok({"task_id": task_id, "task": task}, f"Task created with ID {task_id}")


def create_task(
    user_id: str,
    title: str,
    game: Optional[str] = None,
    mfg: Optional[str] = None,
    estimated_minutes_min: Optional[int] = None,
    estimated_minutes_max: Optional[int] = None,
    priority: int = DEFAULT_PRIORITY,
    required_tools_tags: Any = None,
    skills_tags: Any = None,
    status: str = TaskStatus.BACKLOG.value,
) -> dict[str, Any]:
    """
    Create a backlog task.

    Args:
        user_id: Owner
        title: What to paint
        game: Optional game label
        mfg: Optional manufacturer label
        estimated_minutes_min: Lower bound of the time estimate
        estimated_minutes_max: Upper bound of the time estimate
        priority: 1-5, higher = more important
        required_tools_tags: List or comma-separated string of tool tags
        skills_tags: List or comma-separated string of skill tags
        status: Initial status (default backlog)

    Returns:
        dict with success status and task data
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if not title or not str(title).strip():
        return fail("Title is required")

    if priority is None:
        priority = DEFAULT_PRIORITY
    if status is None:
        status = TaskStatus.BACKLOG.value

    error = _validate_fields(priority, status, estimated_minutes_min, estimated_minutes_max)
    if error:
        return fail(error)

    fields = {
        "title": str(title).strip(),
        "game": game,
        "mfg": mfg,
        "estimated_minutes_min": estimated_minutes_min,
        "estimated_minutes_max": estimated_minutes_max,
        "priority": priority,
        "required_tools_tags": required_tools_tags,
        "skills_tags": skills_tags,
        "status": parse_task_status(status).value,
    }
    return run_with_cursor(_create, "Failed to create task", user_id, fields, write=True)


def _get(cursor: sqlite3.Cursor, user_id: str, task_id: str) -> dict[str, Any]:
    task = fetch_task(cursor, user_id, task_id)
    if not task:
        return fail(MSG_TASK_NOT_FOUND, NOT_FOUND)
    return ok(task)


def get_task(user_id: str, task_id: str) -> dict[str, Any]:
    """Get one task owned by the user."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_get, "Failed to load task", user_id, task_id)


def _list(
    cursor: sqlite3.Cursor,
    where_clause: str,
    params: list[Any],
    limit: int,
    offset: int,
) -> dict[str, Any]:
    cursor.execute(f"""
        SELECT * FROM task
        WHERE {where_clause}
        ORDER BY updated_at DESC, created_at DESC
        LIMIT ? OFFSET ?
    """, params + [limit, offset])
    tasks = [row_to_dict(row) for row in cursor.fetchall()]

    cursor.execute(f"SELECT COUNT(*) as count FROM task WHERE {where_clause}", params)
    total = cursor.fetchone()["count"]

    return ok({"tasks": tasks, "total": total, "limit": limit, "offset": offset})


def list_tasks(
    user_id: str,
    status: Optional[str] = None,
    include_archived: bool = True,
    limit: int = 100,
    offset: int = 0,
) -> dict[str, Any]:
    """
    List a user's tasks, most recently updated first.

    Args:
        user_id: Owner
        status: Filter by status
        include_archived: When False, archived tasks are left out
        limit: Maximum results
        offset: Pagination offset

    Returns:
        dict with task list and total
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if status and parse_task_status(status) is None:
        return fail(f"Invalid status. Must be one of: {TASK_STATUSES}")

    conditions = ["user_id = ?"]
    params: list[Any] = [user_id]

    if status:
        conditions.append("status = ?")
        params.append(parse_task_status(status).value)
    elif not include_archived:
        conditions.append("status != ?")
        params.append(TaskStatus.ARCHIVED.value)

    where_clause = " AND ".join(conditions)
    return run_with_cursor(_list, "Failed to load tasks", where_clause, params, limit, offset)


def _update(cursor: sqlite3.Cursor, user_id: str, task_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    existing = fetch_task(cursor, user_id, task_id)
    if not existing:
        return fail(MSG_TASK_NOT_FOUND, NOT_FOUND)

    low = fields.get("estimated_minutes_min")
    high = fields.get("estimated_minutes_max")
    low = low if low is not None else existing["estimated_minutes_min"]
    high = high if high is not None else existing["estimated_minutes_max"]
    if low is not None and high is not None and low > high:
        return fail("estimated_minutes_min cannot exceed estimated_minutes_max")

    updates = []
    params: list[Any] = []

    if fields.get("title") is not None:
        if not fields["title"].strip():
            return fail("Title is required")
        updates.append("title = ?")
        params.append(fields["title"].strip())

    for column in ("game", "mfg", "estimated_minutes_min", "estimated_minutes_max", "priority"):
        if fields.get(column) is not None:
            updates.append(f"{column} = ?")
            params.append(fields[column])

    for column in ("required_tools_tags", "skills_tags"):
        if fields.get(column) is not None:
            updates.append(f"{column} = ?")
            params.append(to_json(normalize_tags(fields[column])))

    if fields.get("status") is not None:
        updates.append("status = ?")
        params.append(parse_task_status(fields["status"]).value)

    if not updates:
        return fail("No fields to update")

    updates.append("updated_at = ?")
    params.append(utc_now())
    params.extend([task_id, user_id])

    cursor.execute(f"UPDATE task SET {', '.join(updates)} WHERE id = ? AND user_id = ?", params)

    return ok(fetch_task(cursor, user_id, task_id), f"Task {task_id} updated")


def update_task(
    user_id: str,
    task_id: str,
    title: Optional[str] = None,
    game: Optional[str] = None,
    mfg: Optional[str] = None,
    estimated_minutes_min: Optional[int] = None,
    estimated_minutes_max: Optional[int] = None,
    priority: Optional[int] = None,
    required_tools_tags: Any = None,
    skills_tags: Any = None,
    status: Optional[str] = None,
) -> dict[str, Any]:
    """Update the given task fields; fields left as None are unchanged."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    error = _validate_fields(priority, status, estimated_minutes_min, estimated_minutes_max)
    if error:
        return fail(error)

    fields = {
        "title": title,
        "game": game,
        "mfg": mfg,
        "estimated_minutes_min": estimated_minutes_min,
        "estimated_minutes_max": estimated_minutes_max,
        "priority": priority,
        "required_tools_tags": required_tools_tags,
        "skills_tags": skills_tags,
        "status": status,
    }
    return run_with_cursor(_update, "Failed to update task", user_id, task_id, fields, write=True)


def archive_task(user_id: str, task_id: str) -> dict[str, Any]:
    """Archive a task. Tasks are never physically deleted."""
    return update_task(user_id, task_id, status=TaskStatus.ARCHIVED.value)


def _seed(cursor: sqlite3.Cursor, user_id: str) -> dict[str, Any]:
    task_ids = [_insert_task(cursor, user_id, dict(task)) for task in DEFAULT_TASKS]
    tasks = [fetch_task(cursor, user_id, task_id) for task_id in task_ids]
    logger.info("tasks_seeded", count=len(tasks))
    return ok({"tasks": tasks}, f"Seeded {len(tasks)} tasks")


def seed_default_tasks(user_id: str) -> dict[str, Any]:
    """Insert the starter backlog for a user."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_seed, "Failed to seed tasks", user_id, write=True)


def main():
    parser = argparse.ArgumentParser(description="Task Manager - painting backlog CRUD")
    parser.add_argument(
        "--action",
        required=True,
        choices=["create", "list", "get", "update", "archive", "seed"],
        help="Action to perform",
    )

    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--task-id", help="Task ID for operations")

    parser.add_argument("--title", help="Task title")
    parser.add_argument("--game", help="Game label")
    parser.add_argument("--mfg", help="Manufacturer label")
    parser.add_argument("--min", type=int, dest="minutes_min", help="Estimated minutes (lower bound)")
    parser.add_argument("--max", type=int, dest="minutes_max", help="Estimated minutes (upper bound)")
    parser.add_argument("--priority", type=int, help="Priority (1-5)")
    parser.add_argument("--tools", help="Comma-separated required tool tags")
    parser.add_argument("--skills", help="Comma-separated skill tags")
    parser.add_argument("--status", choices=TASK_STATUSES, help="Task status")

    parser.add_argument("--limit", type=int, default=100, help="Max results")
    parser.add_argument("--offset", type=int, default=0, help="Pagination offset")

    args = parser.parse_args()
    result = None

    if args.action == "create":
        if not args.title:
            print(json.dumps({"success": False, "error": "--title required for create"}))
            sys.exit(1)
        result = create_task(
            user_id=args.user,
            title=args.title,
            game=args.game,
            mfg=args.mfg,
            estimated_minutes_min=args.minutes_min,
            estimated_minutes_max=args.minutes_max,
            priority=args.priority or DEFAULT_PRIORITY,
            required_tools_tags=args.tools,
            skills_tags=args.skills,
            status=args.status or TaskStatus.BACKLOG.value,
        )

    elif args.action == "list":
        result = list_tasks(args.user, status=args.status, limit=args.limit, offset=args.offset)

    elif args.action in ("get", "update", "archive"):
        if not args.task_id:
            print(json.dumps({"success": False, "error": f"--task-id required for {args.action}"}))
            sys.exit(1)
        if args.action == "get":
            result = get_task(args.user, args.task_id)
        elif args.action == "update":
            result = update_task(
                args.user,
                args.task_id,
                title=args.title,
                game=args.game,
                mfg=args.mfg,
                estimated_minutes_min=args.minutes_min,
                estimated_minutes_max=args.minutes_max,
                priority=args.priority,
                required_tools_tags=args.tools,
                skills_tags=args.skills,
                status=args.status,
            )
        else:
            result = archive_task(args.user, args.task_id)

    elif args.action == "seed":
        result = seed_default_tasks(args.user)

    if result:
        print(json.dumps(result, indent=2, default=str))
        if not result.get("success"):
            sys.exit(1)


if __name__ == "__main__":
    main()
