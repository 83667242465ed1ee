"""Task Backlog - the painting projects a user intends to work on

Components:
    manager.py: Task CRUD, archive (tasks are never physically deleted),
        starter backlog seeding

Key Insight:
    Task status is edited directly, and also flipped as a side effect when
    an attempt against the task completes (done) or is abandoned (archived).
"""

from paintquest.models import TASK_STATUSES

PRIORITY_MIN = 1
PRIORITY_MAX = 5
DEFAULT_PRIORITY = 3

# Starter backlog for a fresh account
DEFAULT_TASKS = (
    {
        "title": "Assemble and prime a starter squad",
        "estimated_minutes_min": 30,
        "estimated_minutes_max": 60,
        "priority": 4,
        "required_tools_tags": [],
        "skills_tags": ["basecoating"],
    },
    {
        "title": "Basecoat the squad",
        "estimated_minutes_min": 45,
        "estimated_minutes_max": 90,
        "priority": 4,
        "required_tools_tags": ["round brush"],
        "skills_tags": ["basecoating"],
    },
    {
        "title": "Wash and recess shade",
        "estimated_minutes_min": 20,
        "estimated_minutes_max": 40,
        "priority": 3,
        "required_tools_tags": ["round brush"],
        "skills_tags": ["washing"],
    },
    {
        "title": "Edge highlight armour panels",
        "estimated_minutes_min": 45,
        "estimated_minutes_max": 120,
        "priority": 3,
        "required_tools_tags": ["highlight brush", "detail brush"],
        "skills_tags": ["highlighting", "layering"],
    },
    {
        "title": "Texture and drybrush bases",
        "estimated_minutes_min": 20,
        "estimated_minutes_max": 45,
        "priority": 2,
        "required_tools_tags": ["drybrush"],
        "skills_tags": ["basing", "drybrushing"],
    },
)

__all__ = [
    "TASK_STATUSES",
    "PRIORITY_MIN",
    "PRIORITY_MAX",
    "DEFAULT_PRIORITY",
    "DEFAULT_TASKS",
]
