"""Attempt Lifecycle - append-only session log with a derived status

Philosophy:
    An attempt never stores its status. The progress event log is the
    only source of truth and the status is recomputed on every read, so
    a cached column can never drift from the history.

Components:
    fsm.py: pure state deriver (events -> state, reasoning, allowed actions)
    store.py: sqlite persistence for attempts, events and journal entries
    service.py: validated commands (append event, create attempt, start quest)
    review.py: weekly rollup of completed quests

Usage:
    from paintquest.attempts.service import create_attempt, add_progress_event

    result = create_attempt(user_id="alice", auto_start=True)
    attempt_id = result["data"]["attempt"]["id"]
    add_progress_event("alice", attempt_id, "PROGRESS_RECORDED", {"template_id": "t1"})
    add_progress_event("alice", attempt_id, "COMPLETED")
"""

from paintquest.models import ENTRY_TYPES, EVENT_TYPES

__all__ = [
    "ENTRY_TYPES",
    "EVENT_TYPES",
]
