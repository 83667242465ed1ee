"""Quest Templates - suggested units of work for a quest

Components:
    templates.py: template CRUD scoped to (user, task), default builders,
        lazy provisioning before attempt recommendations

Key Insight:
    A quest should never show an empty suggestion list. When too few
    unused templates remain, quest-specific ones are generated from a
    fixed set of painting-workflow archetypes.
"""

# Quest-specific archetypes; titles are prefixed with "<quest title>: "
QUEST_TEMPLATE_ARCHETYPES = (
    {
        "title": "Prep + Basecoat pass",
        "description": "Block in base colors for the next chunk of models.",
        "estimated_minutes_min": 25,
        "estimated_minutes_max": 45,
        "energy": "low",
        "required_tools_tags": ["round brush"],
        "focus_skills_tags": ["basecoating"],
        "progress_value": "Base layers complete on 2-3 models",
    },
    {
        "title": "Shade + Cleanup",
        "description": "Apply washes and cleanup transitions on key panels.",
        "estimated_minutes_min": 30,
        "estimated_minutes_max": 60,
        "energy": "med",
        "required_tools_tags": ["round brush", "detail brush"],
        "focus_skills_tags": ["washing", "layering"],
        "progress_value": "Shadows and cleanup done for one unit section",
    },
    {
        "title": "Highlight push",
        "description": "Edge highlight focal details to push finish quality.",
        "estimated_minutes_min": 30,
        "estimated_minutes_max": 75,
        "energy": "high",
        "required_tools_tags": ["highlight brush", "detail brush"],
        "focus_skills_tags": ["highlighting", "blending"],
        "progress_value": "Visible finish upgrade on key models",
    },
    {
        "title": "Detail cleanup",
        "description": "Sharpen panel lines and tidy spillover from earlier layers.",
        "estimated_minutes_min": 20,
        "estimated_minutes_max": 40,
        "energy": "low",
        "required_tools_tags": ["detail brush"],
        "focus_skills_tags": ["basecoating", "layering"],
        "progress_value": "Cleaner details across one model group",
    },
    {
        "title": "Basing progress pass",
        "description": "Advance base texture and tones for a subset of models.",
        "estimated_minutes_min": 25,
        "estimated_minutes_max": 50,
        "energy": "med",
        "required_tools_tags": ["drybrush"],
        "focus_skills_tags": ["basing", "drybrushing"],
        "progress_value": "Bases advanced for 2-3 models",
    },
    {
        "title": "Glaze refinement",
        "description": "Smooth rough transitions and unify target color zones.",
        "estimated_minutes_min": 30,
        "estimated_minutes_max": 55,
        "energy": "high",
        "required_tools_tags": ["round brush"],
        "focus_skills_tags": ["glazing", "blending"],
        "progress_value": "Smoother transitions on key surfaces",
    },
)

# Cross-quest skill drills (task_id NULL), only seeded into an empty scope
GENERIC_SKILL_TEMPLATES = (
    {
        "title": "5 model highlighting practice",
        "description": "Practice controlled highlights on five small areas.",
        "estimated_minutes_min": 20,
        "estimated_minutes_max": 45,
        "energy": "med",
        "required_tools_tags": ["highlight brush"],
        "focus_skills_tags": ["highlighting"],
        "progress_value": "Improved highlight consistency",
    },
    {
        "title": "Layering transition drill",
        "description": "Build smooth transitions on armor panels.",
        "estimated_minutes_min": 25,
        "estimated_minutes_max": 50,
        "energy": "med",
        "required_tools_tags": ["round brush"],
        "focus_skills_tags": ["layering", "glazing"],
        "progress_value": "Smoother transitions across test area",
    },
)

__all__ = [
    "QUEST_TEMPLATE_ARCHETYPES",
    "GENERIC_SKILL_TEMPLATES",
]
