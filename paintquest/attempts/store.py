"""
Event Log Store: sqlite persistence for attempts, progress events and
journal entries.

Functions take a cursor so the command service can compose several of
them inside one write transaction. Events are only ever inserted; there is
no update or delete path for ``progress_event``.
"""

import sqlite3
from typing import Any, Iterable, Optional

from paintquest.attempts.fsm import derive_attempt_state
from paintquest.database import generate_id, row_to_dict, to_json, utc_now
from paintquest.models import AttemptState, EventType


def insert_attempt(
    cursor: sqlite3.Cursor,
    user_id: str,
    task_id: Optional[str] = None,
) -> dict[str, Any]:
    attempt_id = generate_id()
    cursor.execute(
        "INSERT INTO attempt (id, user_id, task_id, created_at) VALUES (?, ?, ?, ?)",
        (attempt_id, user_id, task_id, utc_now()),
    )
    return get_attempt(cursor, attempt_id)


def get_attempt(cursor: sqlite3.Cursor, attempt_id: str) -> Optional[dict[str, Any]]:
    cursor.execute("SELECT * FROM attempt WHERE id = ?", (attempt_id,))
    return row_to_dict(cursor.fetchone())


def list_attempts(
    cursor: sqlite3.Cursor,
    user_id: str,
    task_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Attempts owned by ``user_id``, newest first."""
    if task_id:
        cursor.execute(
            "SELECT * FROM attempt WHERE user_id = ? AND task_id = ? ORDER BY created_at DESC",
            (user_id, task_id),
        )
    else:
        cursor.execute(
            "SELECT * FROM attempt WHERE user_id = ? ORDER BY created_at DESC",
            (user_id,),
        )
    return [row_to_dict(row) for row in cursor.fetchall()]


def list_events(cursor: sqlite3.Cursor, attempt_id: str) -> list[dict[str, Any]]:
    """All events of one attempt. Callers must not rely on this order."""
    cursor.execute(
        "SELECT * FROM progress_event WHERE attempt_id = ? ORDER BY timestamp, seq",
        (attempt_id,),
    )
    return [row_to_dict(row) for row in cursor.fetchall()]


def list_events_for_attempts(
    cursor: sqlite3.Cursor,
    attempt_ids: Iterable[str],
    event_type: Optional[EventType] = None,
    newest_first: bool = False,
) -> list[dict[str, Any]]:
    ids = list(attempt_ids)
    if not ids:
        return []

    placeholders = ", ".join("?" for _ in ids)
    conditions = [f"attempt_id IN ({placeholders})"]
    params: list[Any] = list(ids)
    if event_type is not None:
        conditions.append("event_type = ?")
        params.append(event_type.value)

    direction = "DESC" if newest_first else "ASC"
    cursor.execute(
        f"""
        SELECT * FROM progress_event
        WHERE {" AND ".join(conditions)}
        ORDER BY timestamp {direction}, seq {direction}
        """,
        params,
    )
    return [row_to_dict(row) for row in cursor.fetchall()]


def insert_event(
    cursor: sqlite3.Cursor,
    attempt_id: str,
    event_type: EventType,
    payload: Any = None,
    timestamp: Optional[str] = None,
) -> dict[str, Any]:
    event_id = generate_id()
    cursor.execute(
        """
        INSERT INTO progress_event (event_id, attempt_id, event_type, payload, timestamp)
        VALUES (?, ?, ?, ?, ?)
        """,
        (event_id, attempt_id, event_type.value, to_json(payload), timestamp or utc_now()),
    )
    cursor.execute("SELECT * FROM progress_event WHERE event_id = ?", (event_id,))
    return row_to_dict(cursor.fetchone())


def insert_entry(
    cursor: sqlite3.Cursor,
    attempt_id: str,
    user_id: str,
    entry_type: str,
    content: Any,
) -> dict[str, Any]:
    entry_id = generate_id()
    cursor.execute(
        """
        INSERT INTO attempt_entry (entry_id, attempt_id, user_id, entry_type, content, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (entry_id, attempt_id, user_id, entry_type, to_json(content), utc_now()),
    )
    cursor.execute("SELECT * FROM attempt_entry WHERE entry_id = ?", (entry_id,))
    return row_to_dict(cursor.fetchone())


def list_entries(cursor: sqlite3.Cursor, attempt_id: str) -> list[dict[str, Any]]:
    """Journal entries, newest first."""
    cursor.execute(
        "SELECT * FROM attempt_entry WHERE attempt_id = ? ORDER BY created_at DESC",
        (attempt_id,),
    )
    return [row_to_dict(row) for row in cursor.fetchall()]


def events_by_attempt(cursor: sqlite3.Cursor, attempt_ids: Iterable[str]) -> dict[str, list[dict[str, Any]]]:
    grouped: dict[str, list[dict[str, Any]]] = {}
    for event in list_events_for_attempts(cursor, attempt_ids):
        grouped.setdefault(event["attempt_id"], []).append(event)
    return grouped


def get_active_attempt_ids(
    cursor: sqlite3.Cursor,
    user_id: str,
    exclude_attempt_id: Optional[str] = None,
) -> list[str]:
    """IDs of the user's attempts whose log currently derives to IN_PROGRESS."""
    attempt_ids = [
        attempt["id"]
        for attempt in list_attempts(cursor, user_id)
        if attempt["id"] != exclude_attempt_id
    ]
    grouped = events_by_attempt(cursor, attempt_ids)

    return [
        attempt_id
        for attempt_id in attempt_ids
        if derive_attempt_state(grouped.get(attempt_id, [])).derived_state == AttemptState.IN_PROGRESS
    ]


__all__ = [
    "events_by_attempt",
    "get_active_attempt_ids",
    "get_attempt",
    "insert_attempt",
    "insert_entry",
    "insert_event",
    "list_attempts",
    "list_entries",
    "list_events",
    "list_events_for_attempts",
]
