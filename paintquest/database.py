"""
Paint Quest Database Module

Single SQLite file holding every Paint Quest table:
- attempt / progress_event / attempt_entry: session log (append-only events)
- task: the backlog
- quest_attempt_template: suggested units of work per task
- profile / recommendation_config: per-user singletons
- arsenal_item: owned tools and paints

Tag sets and payloads are stored as JSON text and decoded by row_to_dict.
"""

import json
import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from paintquest import DATA_DIR, PROJECT_ROOT
from paintquest.config_models import load_config
from paintquest.errors import STORAGE, fail
from paintquest.logging_config import get_logger

logger = get_logger(__name__)


def _resolve_db_path() -> Path:
    """PAINTQUEST_DB_PATH, then storage.db_path from config, then data/paintquest.db."""
    env_path = os.environ.get("PAINTQUEST_DB_PATH")
    if env_path:
        return Path(env_path)
    configured = load_config().storage.db_path
    if configured:
        path = Path(configured)
        return path if path.is_absolute() else PROJECT_ROOT / path
    return DATA_DIR / "paintquest.db"


DB_PATH = _resolve_db_path()

# Columns stored as JSON text
JSON_COLUMNS = frozenset({
    "payload",
    "content",
    "required_tools_tags",
    "skills_tags",
    "focus_skills_tags",
    "tags",
    "media",
    "focus_skills_top3",
    "focus_skills_bottom3",
    "constraints",
    "focus_skills",
})

BOOL_COLUMNS = frozenset({"available", "is_system_generated"})


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS attempt (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        task_id TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS progress_event (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id TEXT NOT NULL UNIQUE,
        attempt_id TEXT NOT NULL,
        event_type TEXT NOT NULL CHECK(event_type IN ('ATTEMPT_STARTED', 'PROGRESS_RECORDED', 'COMPLETED', 'ABANDONED')),
        payload TEXT,
        timestamp TEXT NOT NULL,
        FOREIGN KEY(attempt_id) REFERENCES attempt(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS attempt_entry (
        entry_id TEXT PRIMARY KEY,
        attempt_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        entry_type TEXT NOT NULL,
        content TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY(attempt_id) REFERENCES attempt(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS task (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        game TEXT,
        mfg TEXT,
        estimated_minutes_min INTEGER,
        estimated_minutes_max INTEGER,
        priority INTEGER NOT NULL DEFAULT 3 CHECK(priority BETWEEN 1 AND 5),
        required_tools_tags TEXT,
        skills_tags TEXT,
        status TEXT NOT NULL DEFAULT 'backlog' CHECK(status IN ('backlog', 'active', 'done', 'someday', 'archived')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS quest_attempt_template (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        task_id TEXT,
        title TEXT NOT NULL,
        description TEXT,
        estimated_minutes_min INTEGER NOT NULL,
        estimated_minutes_max INTEGER NOT NULL,
        energy TEXT NOT NULL CHECK(energy IN ('low', 'med', 'high')),
        required_tools_tags TEXT,
        focus_skills_tags TEXT,
        progress_value TEXT,
        is_system_generated INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profile (
        user_id TEXT PRIMARY KEY,
        media TEXT,
        focus_skills_top3 TEXT,
        focus_skills_bottom3 TEXT,
        default_time_bucket INTEGER,
        constraints TEXT,
        energy_preference TEXT CHECK(energy_preference IN ('low', 'med', 'high') OR energy_preference IS NULL),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS recommendation_config (
        user_id TEXT PRIMARY KEY,
        weight_priority REAL,
        weight_time_fit REAL,
        weight_skill_match REAL,
        weight_stale REAL,
        weight_recency_penalty REAL,
        stale_days_threshold REAL,
        recent_days_threshold REAL,
        focus_skills TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS arsenal_item (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        category TEXT NOT NULL,
        name TEXT NOT NULL,
        tags TEXT,
        available INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_attempt_user ON attempt(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_attempt_task ON attempt(task_id)",
    "CREATE INDEX IF NOT EXISTS idx_event_attempt ON progress_event(attempt_id)",
    "CREATE INDEX IF NOT EXISTS idx_entry_attempt ON attempt_entry(attempt_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_user ON task(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_status ON task(status)",
    "CREATE INDEX IF NOT EXISTS idx_template_user_task ON quest_attempt_template(user_id, task_id)",
    "CREATE INDEX IF NOT EXISTS idx_arsenal_user ON arsenal_item(user_id)",
]


def get_connection() -> sqlite3.Connection:
    """Get database connection, creating tables if needed."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH), timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    cursor = conn.cursor()
    for statement in SCHEMA:
        cursor.execute(statement)
    for statement in INDEXES:
        cursor.execute(statement)

    conn.commit()
    return conn


@contextmanager
def write_transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Cursor]:
    """
    Run a block under BEGIN IMMEDIATE.

    The write lock is taken before the first read, so a check-then-write
    sequence inside the block cannot interleave with another writer.
    Commits on success, rolls back on any exception.
    """
    cursor = conn.cursor()
    cursor.execute("BEGIN IMMEDIATE")
    try:
        yield cursor
    except BaseException:
        conn.rollback()
        raise
    conn.commit()


def run_with_cursor(
    operation: Callable[..., dict[str, Any]],
    failure_message: str,
    *args: Any,
    write: bool = False,
) -> dict[str, Any]:
    """
    Run ``operation(cursor, *args)`` on a fresh connection.

    With ``write`` the call runs inside ``write_transaction``. Any
    ``sqlite3.Error`` is logged and returned as a STORAGE failure; the
    connection is always closed.
    """
    conn = None
    try:
        conn = get_connection()
        if write:
            with write_transaction(conn) as cursor:
                return operation(cursor, *args)
        return operation(conn.cursor(), *args)
    except sqlite3.Error as e:
        logger.error("storage_error", operation=operation.__name__, error=str(e))
        return fail(failure_message, STORAGE)
    finally:
        if conn is not None:
            conn.close()


def generate_id() -> str:
    """Generate a unique ID."""
    return uuid.uuid4().hex


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def to_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value)


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[dict[str, Any]]:
    """Convert sqlite3.Row to dictionary, decoding JSON and boolean columns."""
    if row is None:
        return None
    data = dict(row)
    for key, value in data.items():
        if key in JSON_COLUMNS and isinstance(value, str):
            try:
                data[key] = json.loads(value)
            except json.JSONDecodeError:
                data[key] = value
        elif key in BOOL_COLUMNS and value is not None:
            data[key] = bool(value)
    return data


__all__ = [
    "DB_PATH",
    "get_connection",
    "write_transaction",
    "run_with_cursor",
    "generate_id",
    "utc_now",
    "to_json",
    "row_to_dict",
]
