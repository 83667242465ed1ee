"""
Tool: Attempt State Deriver
Purpose: Derive an attempt's lifecycle state from its progress event log

Status is never stored. Every read folds the full event log through the
transition table below:

    NONE         --ATTEMPT_STARTED-->    IN_PROGRESS
    IN_PROGRESS  --PROGRESS_RECORDED-->  IN_PROGRESS
    IN_PROGRESS  --COMPLETED-->          COMPLETED
    IN_PROGRESS  --ABANDONED-->          ABANDONED

Any other (state, event) pair makes the whole log INVALID. The fold stops
at the first bad transition; nothing before or after it rescues the log.

Usage:
    from paintquest.attempts.fsm import derive_attempt_state

    derived = derive_attempt_state([
        {"event_type": "ATTEMPT_STARTED", "timestamp": "2026-02-09T10:00:00Z"},
    ])
    derived.derived_state    # AttemptState.IN_PROGRESS
    derived.allowed_actions  # [PROGRESS_RECORDED, COMPLETED, ABANDONED]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

from paintquest.models import AttemptState, EventType, parse_event_type

TRANSITIONS: dict[AttemptState, dict[EventType, AttemptState]] = {
    AttemptState.NONE: {
        EventType.ATTEMPT_STARTED: AttemptState.IN_PROGRESS,
    },
    AttemptState.IN_PROGRESS: {
        EventType.PROGRESS_RECORDED: AttemptState.IN_PROGRESS,
        EventType.COMPLETED: AttemptState.COMPLETED,
        EventType.ABANDONED: AttemptState.ABANDONED,
    },
    AttemptState.COMPLETED: {},
    AttemptState.ABANDONED: {},
    AttemptState.INVALID: {},
}


@dataclass(frozen=True)
class DerivedAttemptState:
    """Result of folding an attempt's event log."""

    derived_state: AttemptState
    reasoning: str
    allowed_actions: list[EventType] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.derived_state in (AttemptState.COMPLETED, AttemptState.ABANDONED)

    def allows(self, event_type: EventType | str) -> bool:
        parsed = parse_event_type(event_type)
        return parsed is not None and parsed in self.allowed_actions

    def to_dict(self) -> dict[str, Any]:
        return {
            "derivedState": self.derived_state.value,
            "reasoning": self.reasoning,
            "allowedActions": [action.value for action in self.allowed_actions],
        }


def allowed_actions_for(state: AttemptState) -> list[EventType]:
    """Event types with a defined transition out of ``state``, in table order."""
    return list(TRANSITIONS.get(state, {}).keys())


def next_state(state: AttemptState, event_type: EventType) -> AttemptState | None:
    """Look up a single transition; None when the table has no entry."""
    return TRANSITIONS.get(state, {}).get(event_type)


def _field(event: Any, name: str) -> Any:
    if isinstance(event, dict):
        return event.get(name)
    return getattr(event, name, None)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _invalid(reasoning: str) -> DerivedAttemptState:
    return DerivedAttemptState(
        derived_state=AttemptState.INVALID,
        reasoning=reasoning,
        allowed_actions=[],
    )


def derive_attempt_state(events: Iterable[Any]) -> DerivedAttemptState:
    """
    Derive current state, reasoning and allowed actions from an event log.

    Events are sorted by timestamp ascending before folding. Events with
    identical timestamps are ordered by their ``seq`` (insertion sequence)
    when present, otherwise by their position in ``events``.

    Never raises for bad data: malformed timestamps and unknown event
    types are reported as INVALID so callers can show why.

    Args:
        events: dicts or objects with ``event_type`` and ``timestamp``
            (and optionally ``seq``), in any order

    Returns:
        DerivedAttemptState
    """
    keyed = []
    for position, event in enumerate(events):
        raw_timestamp = _field(event, "timestamp")
        timestamp = parse_timestamp(raw_timestamp)
        if timestamp is None:
            return _invalid(f"Invalid timestamp: {raw_timestamp!r}")
        seq = _field(event, "seq")
        keyed.append((timestamp, seq if isinstance(seq, int) else position, position, event))

    ordered = [item[3] for item in sorted(keyed, key=lambda item: item[:3])]

    state = AttemptState.NONE
    for event in ordered:
        raw_type = _field(event, "event_type")
        event_type = parse_event_type(raw_type)
        nxt = next_state(state, event_type) if event_type is not None else None
        if nxt is None:
            shown = event_type.value if event_type is not None else raw_type
            return _invalid(f"Invalid transition: {state.value} -> {shown}")
        state = nxt

    if not ordered:
        reasoning = "No events yet. Awaiting ATTEMPT_STARTED."
    else:
        reasoning = f"Derived from {len(ordered)} event(s)."

    return DerivedAttemptState(
        derived_state=state,
        reasoning=reasoning,
        allowed_actions=allowed_actions_for(state),
    )


__all__ = [
    "TRANSITIONS",
    "DerivedAttemptState",
    "allowed_actions_for",
    "derive_attempt_state",
    "next_state",
    "parse_timestamp",
]
