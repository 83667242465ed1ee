"""
Factor functions shared by the task and attempt-template scorers.

All functions here are pure and never raise on missing data: an absent
range, empty tag set or unparseable timestamp degrades to a neutral value.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from paintquest.attempts.fsm import parse_timestamp
from paintquest.models import EnergyTier
from paintquest.recommend import ENERGY_BUCKETS
from paintquest.tags import normalize_tags

SECONDS_PER_DAY = 60 * 60 * 24


def time_fit_score(
    minutes_min: Optional[float],
    minutes_max: Optional[float],
    available: float,
) -> float:
    """
    How well ``available`` minutes fits a [min, max] estimate.

    1.0 inside the range. Outside it the score decays linearly to 0, using
    the nearer bound (floored at 1) as the denominator. A task with no
    range at all scores a neutral 0.5.
    """
    if minutes_min is None and minutes_max is None:
        return 0.5

    lower = minutes_min if minutes_min is not None else 0
    upper = minutes_max if minutes_max is not None else lower

    if lower <= available <= upper:
        return 1.0
    if available < lower:
        return max(0.0, 1 - (lower - available) / max(lower, 1))
    return max(0.0, 1 - (available - upper) / max(upper, 1))


def priority_score(priority: Any) -> float:
    """priority / 5 clamped to [0, 1]."""
    try:
        value = float(priority)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(1.0, value / 5))


def skill_match_score(task_skills: list[str], focus_skills: list[str]) -> float:
    """Fraction of ``task_skills`` found in ``focus_skills`` (case-insensitive)."""
    if not task_skills or not focus_skills:
        return 0.0
    focus = {skill.lower() for skill in focus_skills}
    matches = [skill for skill in task_skills if skill.lower() in focus]
    return len(matches) / max(len(task_skills), 1)


def missing_tags(required: list[str], available: set[str]) -> list[str]:
    """Required tags (as spelled) absent from a lower-cased ``available`` set."""
    return [tag for tag in required if tag.lower() not in available]


def days_since(value: Any, now: Optional[datetime] = None) -> Optional[float]:
    """Fractional days between ``value`` and ``now``; None if ``value`` is unparseable."""
    then = parse_timestamp(value)
    if then is None:
        return None
    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    return (reference - then).total_seconds() / SECONDS_PER_DAY


def energy_for_minutes(minutes: float) -> EnergyTier:
    """Bucket an available-minutes budget: <=30 low, 31-60 med, >60 high."""
    for ceiling, tier in ENERGY_BUCKETS:
        if minutes <= ceiling:
            return EnergyTier(tier)
    return EnergyTier.HIGH


def excluded_tools(constraints: Any) -> list[str]:
    """
    Excluded tool tags from a profile's ``constraints``.

    Accepts ``{"excluded_tools": [...]}`` or a bare list/comma string.
    """
    if isinstance(constraints, dict):
        return normalize_tags(constraints.get("excluded_tools"))
    return normalize_tags(constraints)


__all__ = [
    "days_since",
    "energy_for_minutes",
    "excluded_tools",
    "missing_tags",
    "priority_score",
    "skill_match_score",
    "time_fit_score",
]
