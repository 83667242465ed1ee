"""
Tool: Attempt Template Scorer
Purpose: Pick how to spend one session on a quest

Scores start at 1.0 and every term is unweighted:
    time fit           + time_fit_score(min, max, available)
    energy             +0.5 exact match, -0.2 otherwise
    bottom skills      +0.5 when the template practises one of the user's weakest skills
    tools              +0.3 all present, -0.4 any missing (no term if none required)
    recently used      -0.3

Scores are floored at 0. Unlike the task scorer this one rewards the
user's *bottom* skills, so sessions nudge toward practice.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from paintquest.models import parse_energy
from paintquest.recommend import MAX_RECOMMENDATIONS
from paintquest.recommend.scoring import missing_tags, time_fit_score
from paintquest.tags import normalize_tags, tag_key_set

BASE_SCORE = 1.0
ENERGY_MATCH_BONUS = 0.5
ENERGY_MISMATCH_PENALTY = 0.2
SKILL_TARGET_BONUS = 0.5
TOOLS_READY_BONUS = 0.3
TOOLS_MISSING_PENALTY = 0.4
RECENTLY_USED_PENALTY = 0.3


@dataclass
class AttemptRecommendation:
    template: dict[str, Any]
    score: float
    reasons: list[str] = field(default_factory=list)
    recommended_minutes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template,
            "score": self.score,
            "reasons": list(self.reasons),
            "recommendedMinutes": self.recommended_minutes,
        }


def recommended_minutes(minutes_min: int, minutes_max: int, available: int) -> int:
    """Clamp the available budget into the template's [min, max]."""
    return min(minutes_max, max(minutes_min, available))


def score_template(
    template: dict[str, Any],
    available_minutes: int,
    energy: Optional[str],
    bottom_skills: set[str],
    available_tools: set[str],
    recent_ids: set[str],
) -> AttemptRecommendation:
    reasons: list[str] = []
    score = BASE_SCORE

    minutes_min = template["estimated_minutes_min"]
    minutes_max = template["estimated_minutes_max"]

    fit = time_fit_score(minutes_min, minutes_max, available_minutes)
    score += fit
    reasons.append(f"time fit {fit:.2f}")

    template_energy = template.get("energy")
    if template_energy == energy:
        score += ENERGY_MATCH_BONUS
        reasons.append(f"energy fit {energy}")
    else:
        score -= ENERGY_MISMATCH_PENALTY
        reasons.append(f"energy mismatch {template_energy}")

    targeted = [
        skill.lower()
        for skill in normalize_tags(template.get("focus_skills_tags"))
        if skill.lower() in bottom_skills
    ]
    if targeted:
        score += SKILL_TARGET_BONUS
        reasons.append(f"targets skill: {', '.join(targeted)}")

    required = normalize_tags(template.get("required_tools_tags"))
    if required:
        missing = missing_tags(required, available_tools)
        if missing:
            score -= TOOLS_MISSING_PENALTY
            reasons.append(f"missing tools: {', '.join(missing)}")
        else:
            score += TOOLS_READY_BONUS
            reasons.append("tools ready")

    if template.get("id") in recent_ids:
        score -= RECENTLY_USED_PENALTY
        reasons.append("recently used")

    return AttemptRecommendation(
        template=template,
        score=max(0.0, score),
        reasons=reasons,
        recommended_minutes=recommended_minutes(minutes_min, minutes_max, available_minutes),
    )


def recommend_attempts(
    templates: list[dict[str, Any]],
    available_minutes: int,
    energy: Any,
    bottom_skills: Any = None,
    available_tool_tags: Any = None,
    recent_template_ids: Optional[Iterable[str]] = None,
    limit: int = MAX_RECOMMENDATIONS,
) -> list[AttemptRecommendation]:
    """
    Score and rank attempt templates for one quest.

    Args:
        templates: Templates in scope, already filtered to exclude used ones
        available_minutes: Session budget
        energy: Requested energy tier (low, med, high)
        bottom_skills: The user's bottom-3 focus skills
        available_tool_tags: Tags of available arsenal items
        recent_template_ids: Ids of recently used templates
        limit: Result cap, never above 5

    Returns:
        At most 5 AttemptRecommendation, highest score first
    """
    parsed = parse_energy(energy)
    energy_value = parsed.value if parsed is not None else energy
    bottom = tag_key_set(bottom_skills)
    tools = tag_key_set(available_tool_tags)
    recent = set(recent_template_ids or [])

    scored = [
        score_template(template, available_minutes, energy_value, bottom, tools, recent)
        for template in templates
    ]
    ranked = sorted(scored, key=lambda rec: rec.score, reverse=True)
    return ranked[: max(0, min(limit, MAX_RECOMMENDATIONS))]


__all__ = [
    "AttemptRecommendation",
    "recommend_attempts",
    "recommended_minutes",
    "score_template",
]
