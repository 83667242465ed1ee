"""
Tool: Task Recommendation Scorer
Purpose: Rank backlog tasks for the time a user has right now

Factors (weighted ones multiply by their configured weight, default 1.0):
    priority        weighted    priority / 5
    time fit        weighted    1.0 inside [min, max], linear decay outside, 0.5 if no range
    skill match     weighted    share of task skills in the focus set
    tool match      unweighted  +0.5 all present, -0.5 missing or no arsenal data
    constraints     unweighted  -1.0 when a required tool is excluded by the profile
    energy fit      unweighted  +1.0 when the minutes bucket matches the profile preference
    stale boost     weighted    +0.5 never attempted, or last attempt >= stale threshold
    recency penalty weighted    -0.5 last attempt <= recent threshold

Pure: no I/O, no clock reads unless ``now`` is omitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel

from paintquest.attempts.fsm import parse_timestamp
from paintquest.config_models import RecommendationWeights, StoredRecommendationConfig
from paintquest.models import parse_energy
from paintquest.recommend import MAX_RECOMMENDATIONS
from paintquest.recommend.scoring import (
    days_since,
    energy_for_minutes,
    excluded_tools,
    missing_tags,
    priority_score,
    skill_match_score,
    time_fit_score,
)
from paintquest.tags import normalize_tags, tag_key_set

TOOLS_READY_BONUS = 0.5
TOOLS_MISSING_PENALTY = 0.5
CONSTRAINT_PENALTY = 1.0
ENERGY_FIT_BONUS = 1.0
STALE_BOOST = 0.5
RECENCY_PENALTY = 0.5


@dataclass
class TaskRecommendation:
    task: dict[str, Any]
    score: float
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "score": self.score,
            "reasons": list(self.reasons),
        }


def resolve_weights(config: Union[None, dict[str, Any], BaseModel]) -> RecommendationWeights:
    """Accept a stored config row, a weights model or None; unset fields use defaults."""
    if config is None:
        return RecommendationWeights()
    if isinstance(config, RecommendationWeights):
        return config
    if isinstance(config, BaseModel):
        return StoredRecommendationConfig.model_validate(config.model_dump())
    return StoredRecommendationConfig.model_validate(dict(config))


def _last_attempt_at(attempts: list[dict[str, Any]], task_id: Any) -> Optional[str]:
    created = [
        attempt.get("created_at")
        for attempt in attempts
        if attempt.get("task_id") == task_id and attempt.get("created_at")
    ]
    if not created:
        return None
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return max(created, key=lambda value: parse_timestamp(value) or epoch)


def score_task(
    task: dict[str, Any],
    attempts: list[dict[str, Any]],
    available_minutes: float,
    weights: RecommendationWeights,
    focus_skills: list[str],
    profile: Optional[dict[str, Any]],
    available_tools: Optional[set[str]],
    now: datetime,
) -> TaskRecommendation:
    reasons: list[str] = []
    score = 0.0

    priority = task.get("priority")
    score += priority_score(priority) * weights.weight_priority
    reasons.append(f"priority {priority}")

    fit = time_fit_score(task.get("estimated_minutes_min"), task.get("estimated_minutes_max"), available_minutes)
    score += fit * weights.weight_time_fit
    reasons.append(f"time fit {fit:.2f}")

    skills = normalize_tags(task.get("skills_tags"))
    match = skill_match_score(skills, focus_skills)
    if skills and focus_skills:
        reasons.append(f"skill match {match:.2f}")
    score += match * weights.weight_skill_match

    required = normalize_tags(task.get("required_tools_tags"))
    if required:
        if available_tools is None:
            score -= TOOLS_MISSING_PENALTY
            reasons.append("no arsenal data for required tools")
        else:
            missing = missing_tags(required, available_tools)
            if missing:
                score -= TOOLS_MISSING_PENALTY
                reasons.append(f"missing tools: {', '.join(missing)}")
            else:
                score += TOOLS_READY_BONUS
                reasons.append("tools ready")

        excluded = tag_key_set(excluded_tools((profile or {}).get("constraints")))
        if excluded and any(tag.lower() in excluded for tag in required):
            score -= CONSTRAINT_PENALTY
            reasons.append("blocked by constraints")

    preferred = parse_energy((profile or {}).get("energy_preference"))
    if preferred is not None and preferred == energy_for_minutes(available_minutes):
        score += ENERGY_FIT_BONUS
        reasons.append(f"energy fit {preferred.value}")

    last_attempt = _last_attempt_at(attempts, task.get("id"))
    if last_attempt is None:
        score += STALE_BOOST * weights.weight_stale
        reasons.append("stale boost (never attempted)")
    else:
        days = days_since(last_attempt, now)
        if days is not None:
            if days >= weights.stale_days_threshold:
                score += STALE_BOOST * weights.weight_stale
                reasons.append(f"stale boost ({days:.1f} days)")
            if days <= weights.recent_days_threshold:
                score -= RECENCY_PENALTY * weights.weight_recency_penalty
                reasons.append(f"recency penalty ({days:.1f} days)")

    return TaskRecommendation(task=task, score=score, reasons=reasons)


def recommend_tasks(
    tasks: list[dict[str, Any]],
    attempts: list[dict[str, Any]],
    available_minutes: float,
    config: Union[None, dict[str, Any], BaseModel] = None,
    profile: Optional[dict[str, Any]] = None,
    available_tool_tags: Optional[list[str]] = None,
    now: Optional[datetime] = None,
    limit: int = MAX_RECOMMENDATIONS,
) -> list[TaskRecommendation]:
    """
    Score and rank tasks.

    Args:
        tasks: Non-archived task rows
        attempts: The user's attempts (only ``task_id`` and ``created_at`` are read)
        available_minutes: Time budget for this session
        config: Stored weighting row or weights model; None uses defaults
        profile: Profile row (focus_skills_top3, constraints, energy_preference)
        available_tool_tags: Tags of available arsenal items; None means no arsenal data
        now: Reference time for staleness (defaults to current UTC time)
        limit: Result cap, never above 5

    Returns:
        At most 5 TaskRecommendation, highest score first; equal scores keep input order
    """
    weights = resolve_weights(config)
    focus_skills = normalize_tags(weights.focus_skills) or normalize_tags((profile or {}).get("focus_skills_top3"))
    available_tools = tag_key_set(available_tool_tags) if available_tool_tags is not None else None
    reference = now or datetime.now(timezone.utc)

    scored = [
        score_task(task, attempts, available_minutes, weights, focus_skills, profile, available_tools, reference)
        for task in tasks
    ]
    ranked = sorted(scored, key=lambda rec: rec.score, reverse=True)
    return ranked[: max(0, min(limit, MAX_RECOMMENDATIONS))]


__all__ = [
    "TaskRecommendation",
    "recommend_tasks",
    "resolve_weights",
    "score_task",
]
