"""Profile - per-user painting preferences and recommendation weighting

Components:
    manager.py: profile get/upsert (wholesale), recommendation config get/upsert

Key Insight:
    Both records are optional singletons keyed by user_id. Scorers treat a
    missing record, or a missing field, as "use the default".
"""

PROFILE_FIELDS = (
    "media",
    "focus_skills_top3",
    "focus_skills_bottom3",
    "default_time_bucket",
    "constraints",
    "energy_preference",
)

RECOMMENDATION_CONFIG_FIELDS = (
    "weight_priority",
    "weight_time_fit",
    "weight_skill_match",
    "weight_stale",
    "weight_recency_penalty",
    "stale_days_threshold",
    "recent_days_threshold",
    "focus_skills",
)

# focus_skills_top3 / focus_skills_bottom3
MAX_FOCUS_SKILLS = 3

__all__ = [
    "PROFILE_FIELDS",
    "RECOMMENDATION_CONFIG_FIELDS",
    "MAX_FOCUS_SKILLS",
]
