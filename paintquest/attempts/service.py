"""
Tool: Attempt Command Service
Purpose: Validated commands against the attempt event log

Every command that writes runs inside one BEGIN IMMEDIATE transaction, so
"check no other attempt is in progress, then append ATTEMPT_STARTED" is
atomic with respect to any other writer on the same database file. A
rejected command writes nothing.

Usage:
    python -m paintquest.attempts.service --action create --user alice --auto-start
    python -m paintquest.attempts.service --action start-quest --user alice --task-id abc123
    python -m paintquest.attempts.service --action event --user alice --attempt-id a1 --event-type PROGRESS_RECORDED --payload '{"template_id": "t1"}'
    python -m paintquest.attempts.service --action entry --user alice --attempt-id a1 --entry-type note --content "Thinned the wash"
    python -m paintquest.attempts.service --action details --user alice --attempt-id a1
    python -m paintquest.attempts.service --action list --user alice
    python -m paintquest.attempts.service --action active --user alice

Output:
    JSON result with success status and data
"""

import argparse
import json
import sqlite3
import sys
from typing import Any, Callable, Optional

from paintquest import database
from paintquest.attempts import store
from paintquest.attempts.fsm import derive_attempt_state
from paintquest.database import write_transaction
from paintquest.errors import (
    CONFLICT,
    INVALID_TRANSITION,
    MSG_ACTION_NOT_ALLOWED,
    MSG_ATTEMPT_CONFLICT,
    MSG_ATTEMPT_NOT_FOUND,
    MSG_ENTRY_CONTENT_REQUIRED,
    MSG_ENTRY_TYPE_REQUIRED,
    MSG_EVENT_STORE_FAILED,
    MSG_INVALID_EVENT_TYPE,
    MSG_NOT_AUTHENTICATED,
    MSG_QUEST_NOT_FOUND,
    MSG_TASK_NOT_FOUND,
    NOT_ALLOWED,
    NOT_FOUND,
    STORAGE,
    UNAUTHENTICATED,
    fail,
    ok,
)
from paintquest.logging_config import bind_user, get_logger
from paintquest.models import (
    ENTRY_TYPES,
    EVENT_TYPES,
    TERMINAL_TASK_STATUS,
    AttemptState,
    EventType,
    TaskStatus,
    parse_entry_type,
    parse_event_type,
)
from paintquest.tasks.manager import fetch_task, set_task_status

logger = get_logger(__name__)

# Task statuses that "start quest" promotes to active
STARTABLE_TASK_STATUSES = frozenset({TaskStatus.BACKLOG.value, TaskStatus.SOMEDAY.value})


def _run(operation: Callable[..., dict[str, Any]], failure_message: str, *args: Any) -> dict[str, Any]:
    """Run ``operation(cursor, *args)`` in a write transaction, mapping sqlite errors to STORAGE."""
    conn = None
    try:
        conn = database.get_connection()
        with write_transaction(conn) as cursor:
            return operation(cursor, *args)
    except sqlite3.Error as e:
        logger.error("storage_error", operation=operation.__name__, error=str(e))
        return fail(failure_message, STORAGE)
    finally:
        if conn is not None:
            conn.close()


def _owned_attempt(cursor: sqlite3.Cursor, user_id: str, attempt_id: str) -> Optional[dict[str, Any]]:
    attempt = store.get_attempt(cursor, attempt_id) if attempt_id else None
    if attempt is None or attempt["user_id"] != user_id:
        return None
    return attempt


def _has_other_active_attempt(cursor: sqlite3.Cursor, user_id: str, exclude_attempt_id: Optional[str] = None) -> bool:
    active = store.get_active_attempt_ids(cursor, user_id, exclude_attempt_id=exclude_attempt_id)
    if active:
        logger.info("attempt_conflict", active_attempt_ids=active)
    return bool(active)


# =============================================================================
# Progress events
# =============================================================================

def _append_event(
    cursor: sqlite3.Cursor,
    user_id: str,
    attempt_id: str,
    event_type: EventType,
    payload: Any,
) -> dict[str, Any]:
    attempt = _owned_attempt(cursor, user_id, attempt_id)
    if attempt is None:
        return fail(MSG_ATTEMPT_NOT_FOUND, NOT_FOUND)

    events = store.list_events(cursor, attempt_id)
    derived = derive_attempt_state(events)

    if derived.derived_state == AttemptState.INVALID:
        logger.warning("invalid_event_log", attempt_id=attempt_id, reasoning=derived.reasoning)
        return fail(derived.reasoning, INVALID_TRANSITION)

    if not derived.allows(event_type):
        return fail(MSG_ACTION_NOT_ALLOWED.format(event_type=event_type.value), NOT_ALLOWED)

    if event_type == EventType.ATTEMPT_STARTED and _has_other_active_attempt(cursor, user_id, attempt_id):
        return fail(MSG_ATTEMPT_CONFLICT, CONFLICT)

    event = store.insert_event(cursor, attempt_id, event_type, payload)

    task_status = TERMINAL_TASK_STATUS.get(event_type)
    if task_status is not None and attempt["task_id"]:
        set_task_status(cursor, attempt["task_id"], task_status)

    after = derive_attempt_state(events + [event])
    logger.info("event_appended", attempt_id=attempt_id, event_type=event_type.value, state=after.derived_state.value)

    return ok({"event": event, "derived": after.to_dict()})


def add_progress_event(
    user_id: str,
    attempt_id: str,
    event_type: Any,
    payload: Any = None,
) -> dict[str, Any]:
    """
    Append a progress event if the attempt's derived state allows it.

    Order of checks: authentication, event vocabulary, attempt ownership,
    log validity, allowed action, single in-progress attempt (for
    ATTEMPT_STARTED only). A COMPLETED or ABANDONED event on an attempt
    tied to a task also moves the task to done / archived.

    Args:
        user_id: Acting user
        attempt_id: Attempt to append to
        event_type: One of ATTEMPT_STARTED, PROGRESS_RECORDED, COMPLETED, ABANDONED
        payload: Optional JSON-serializable payload (e.g. {"template_id": ...})

    Returns:
        dict with the stored event and the derived state after appending
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    parsed = parse_event_type(event_type)
    if parsed is None:
        return fail(MSG_INVALID_EVENT_TYPE)

    with bind_user(user_id):
        return _run(_append_event, MSG_EVENT_STORE_FAILED, user_id, attempt_id, parsed, payload)


# =============================================================================
# Attempt creation
# =============================================================================

def _create_attempt(
    cursor: sqlite3.Cursor,
    user_id: str,
    auto_start: bool,
    task_id: Optional[str],
) -> dict[str, Any]:
    if task_id and fetch_task(cursor, user_id, task_id) is None:
        return fail(MSG_TASK_NOT_FOUND, NOT_FOUND)

    if _has_other_active_attempt(cursor, user_id):
        return fail(MSG_ATTEMPT_CONFLICT, CONFLICT)

    attempt = store.insert_attempt(cursor, user_id, task_id)
    if auto_start:
        store.insert_event(cursor, attempt["id"], EventType.ATTEMPT_STARTED)

    state = AttemptState.IN_PROGRESS if auto_start else AttemptState.NONE
    logger.info("attempt_created", attempt_id=attempt["id"], task_id=task_id, auto_start=auto_start)
    return ok({"attempt": attempt, "derivedState": state.value})


def create_attempt(
    user_id: str,
    auto_start: bool = False,
    task_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Create a new attempt, optionally starting it straight away.

    Refused with a conflict while any other attempt of the user derives
    IN_PROGRESS, whether or not ``auto_start`` is set.
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    with bind_user(user_id):
        return _run(_create_attempt, "Failed to create attempt", user_id, bool(auto_start), task_id)


def _start_quest(cursor: sqlite3.Cursor, user_id: str, task_id: str) -> dict[str, Any]:
    task = fetch_task(cursor, user_id, task_id)
    if task is None:
        return fail(MSG_QUEST_NOT_FOUND, NOT_FOUND)

    result = _create_attempt(cursor, user_id, True, task_id)
    if not result["success"]:
        return result

    if task["status"] in STARTABLE_TASK_STATUSES:
        set_task_status(cursor, task_id, TaskStatus.ACTIVE)

    return result


def start_quest(user_id: str, task_id: str) -> dict[str, Any]:
    """Create and start an attempt against a task, promoting a backlog/someday task to active."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if not task_id:
        return fail("taskId is required")

    with bind_user(user_id):
        return _run(_start_quest, "Failed to create quest", user_id, task_id)


# =============================================================================
# Journal entries
# =============================================================================

def _add_entry(
    cursor: sqlite3.Cursor,
    user_id: str,
    attempt_id: str,
    entry_type: str,
    content: Any,
) -> dict[str, Any]:
    if _owned_attempt(cursor, user_id, attempt_id) is None:
        return fail(MSG_ATTEMPT_NOT_FOUND, NOT_FOUND)

    entry = store.insert_entry(cursor, attempt_id, user_id, entry_type, content)
    logger.info("entry_added", attempt_id=attempt_id, entry_type=entry_type)
    return ok({"entry": entry})


def add_attempt_entry(
    user_id: str,
    attempt_id: str,
    entry_type: Any,
    content: Any,
) -> dict[str, Any]:
    """Attach a journal entry (note, check, timer). Entries never change derived state."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if not entry_type:
        return fail(MSG_ENTRY_TYPE_REQUIRED)

    if content is None or content == "" or content == {}:
        return fail(MSG_ENTRY_CONTENT_REQUIRED)

    parsed = parse_entry_type(entry_type)
    if parsed is None:
        return fail(f"Invalid entry type. Must be one of: {ENTRY_TYPES}")

    with bind_user(user_id):
        return _run(_add_entry, "Failed to create entry", user_id, attempt_id, parsed.value, content)


# =============================================================================
# Reads
# =============================================================================

def _read(operation: Callable[..., dict[str, Any]], failure_message: str, *args: Any) -> dict[str, Any]:
    conn = None
    try:
        conn = database.get_connection()
        return operation(conn.cursor(), *args)
    except sqlite3.Error as e:
        logger.error("storage_error", operation=operation.__name__, error=str(e))
        return fail(failure_message, STORAGE)
    finally:
        if conn is not None:
            conn.close()


def _details(cursor: sqlite3.Cursor, user_id: str, attempt_id: str) -> dict[str, Any]:
    attempt = _owned_attempt(cursor, user_id, attempt_id)
    if attempt is None:
        return fail(MSG_ATTEMPT_NOT_FOUND, NOT_FOUND)

    events = store.list_events(cursor, attempt_id)
    entries = store.list_entries(cursor, attempt_id)

    return ok({
        "attempt": attempt,
        "events": events,
        "entries": entries,
        "derived": derive_attempt_state(events).to_dict(),
    })


def get_attempt_details(user_id: str, attempt_id: str) -> dict[str, Any]:
    """Attempt row, events (oldest first), entries (newest first) and derived state."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return _read(_details, "Failed to load events", user_id, attempt_id)


def _list(cursor: sqlite3.Cursor, user_id: str, task_id: Optional[str]) -> dict[str, Any]:
    attempts = store.list_attempts(cursor, user_id, task_id=task_id)
    grouped = store.events_by_attempt(cursor, [a["id"] for a in attempts])

    for attempt in attempts:
        derived = derive_attempt_state(grouped.get(attempt["id"], []))
        attempt["derived"] = derived.to_dict()

    return ok({"attempts": attempts, "total": len(attempts)})


def list_attempts(user_id: str, task_id: Optional[str] = None) -> dict[str, Any]:
    """The user's attempts, newest first, each with its derived state."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return _read(_list, "Failed to load attempts", user_id, task_id)


def _active(cursor: sqlite3.Cursor, user_id: str) -> dict[str, Any]:
    return ok({"attempt_ids": store.get_active_attempt_ids(cursor, user_id)})


def get_active_attempt_ids(user_id: str) -> dict[str, Any]:
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return _read(_active, "Failed to load attempts", user_id)


def main():
    parser = argparse.ArgumentParser(description="Attempt commands - record painting sessions")
    parser.add_argument(
        "--action",
        required=True,
        choices=["create", "start-quest", "event", "entry", "details", "list", "active"],
        help="Action to perform",
    )

    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--attempt-id", help="Attempt ID")
    parser.add_argument("--task-id", help="Task ID")
    parser.add_argument("--auto-start", action="store_true", help="Append ATTEMPT_STARTED on create")
    parser.add_argument("--event-type", choices=EVENT_TYPES, help="Progress event type")
    parser.add_argument("--payload", help="Event payload as JSON")
    parser.add_argument("--entry-type", help="Entry type (note, check, timer)")
    parser.add_argument("--content", help="Entry content (JSON or plain text)")

    args = parser.parse_args()
    result = None

    if args.action == "create":
        result = create_attempt(args.user, auto_start=args.auto_start, task_id=args.task_id)

    elif args.action == "start-quest":
        result = start_quest(args.user, args.task_id)

    elif args.action == "event":
        payload = None
        if args.payload:
            try:
                payload = json.loads(args.payload)
            except json.JSONDecodeError:
                print(json.dumps({"success": False, "error": "--payload must be valid JSON"}))
                sys.exit(1)
        result = add_progress_event(args.user, args.attempt_id, args.event_type, payload)

    elif args.action == "entry":
        content = args.content
        if content:
            try:
                content = json.loads(content)
            except json.JSONDecodeError:
                content = {"text": content}
        result = add_attempt_entry(args.user, args.attempt_id, args.entry_type, content)

    elif args.action == "details":
        result = get_attempt_details(args.user, args.attempt_id)

    elif args.action == "list":
        result = list_attempts(args.user, task_id=args.task_id)

    elif args.action == "active":
        result = get_active_attempt_ids(args.user)

    if result:
        print(json.dumps(result, indent=2, default=str))
        if not result.get("success"):
            sys.exit(1)


if __name__ == "__main__":
    main()
