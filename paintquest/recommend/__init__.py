"""Recommendations - what to paint next, and how to spend this session

Philosophy:
    Every score is a plain sum of small, explainable terms. Each term that
    contributes appends a human-readable reason, so a user can always see
    why a task or template came out on top.

Components:
    scoring.py: shared factor functions (time fit, priority, skill match, day math)
    tasks.py: pure backlog task scorer
    attempts.py: pure attempt-template scorer
    service.py: loads store snapshots and feeds the scorers

Usage:
    from paintquest.recommend.service import get_task_recommendations

    result = get_task_recommendations("alice", minutes=45)
    for rec in result["data"]["recommendations"]:
        print(rec["task"]["title"], rec["score"], rec["reasons"])
"""

# Recommending more than this many results is out of contract
MAX_RECOMMENDATIONS = 5

# Available-minutes bucket -> energy tier used by the task energy-fit bonus
ENERGY_BUCKETS = (
    (30, "low"),
    (60, "med"),
)

__all__ = [
    "MAX_RECOMMENDATIONS",
    "ENERGY_BUCKETS",
]
