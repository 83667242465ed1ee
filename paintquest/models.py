"""Closed vocabularies shared across Paint Quest.

Every persisted status-like string maps onto one of these enums. Values
outside a set are rejected at the boundary with ``parse_*`` helpers rather
than flowing into the state machine or the scorers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Progress event types in an attempt's append-only log."""

    ATTEMPT_STARTED = "ATTEMPT_STARTED"
    PROGRESS_RECORDED = "PROGRESS_RECORDED"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


class AttemptState(str, Enum):
    """Derived lifecycle state of an attempt."""

    NONE = "NONE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"
    INVALID = "INVALID"


class TaskStatus(str, Enum):
    """Backlog task status."""

    BACKLOG = "backlog"
    ACTIVE = "active"
    DONE = "done"
    SOMEDAY = "someday"
    ARCHIVED = "archived"


class EnergyTier(str, Enum):
    """Energy tier for templates and profile preference."""

    LOW = "low"
    MED = "med"
    HIGH = "high"


class EntryType(str, Enum):
    """Journal entry kinds attached to an attempt."""

    NOTE = "note"
    CHECK = "check"
    TIMER = "timer"


TERMINAL_STATES = frozenset({AttemptState.COMPLETED, AttemptState.ABANDONED})

# Task side effect applied when an attempt reaches a terminal event
TERMINAL_TASK_STATUS = {
    EventType.COMPLETED: TaskStatus.DONE,
    EventType.ABANDONED: TaskStatus.ARCHIVED,
}


def _parse(enum_cls: type[Enum], value: Any) -> Enum | None:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip())
    except ValueError:
        return None


def parse_event_type(value: Any) -> EventType | None:
    """Return the EventType for ``value`` or None if it is not in the vocabulary."""
    return _parse(EventType, value)


def parse_task_status(value: Any) -> TaskStatus | None:
    return _parse(TaskStatus, value)


def parse_energy(value: Any) -> EnergyTier | None:
    if isinstance(value, str):
        value = value.strip().lower()
    return _parse(EnergyTier, value)


def parse_entry_type(value: Any) -> EntryType | None:
    if isinstance(value, str):
        value = value.strip().lower()
    return _parse(EntryType, value)


EVENT_TYPES = tuple(e.value for e in EventType)
TASK_STATUSES = tuple(s.value for s in TaskStatus)
ENERGY_TIERS = tuple(t.value for t in EnergyTier)
ENTRY_TYPES = tuple(t.value for t in EntryType)

__all__ = [
    "EventType",
    "AttemptState",
    "TaskStatus",
    "EnergyTier",
    "EntryType",
    "TERMINAL_STATES",
    "TERMINAL_TASK_STATUS",
    "EVENT_TYPES",
    "TASK_STATUSES",
    "ENERGY_TIERS",
    "ENTRY_TYPES",
    "parse_event_type",
    "parse_task_status",
    "parse_energy",
    "parse_entry_type",
]
