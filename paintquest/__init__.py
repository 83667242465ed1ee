"""Paint Quest - plan and record miniature painting sessions

Philosophy:
    A backlog is only useful if it tells you what to pick up next.
    Sessions ("quests") are recorded as an append-only event log and the
    current status is always re-derived from that log, never stored.

Components:
    attempts/: lifecycle state machine, event log store, command service
    recommend/: task and attempt-template scorers
    quests/: attempt template store and default provisioning
    tasks/: backlog CRUD
    profile/: profile and recommendation weighting config
    arsenal/: owned tools and paints, tagged for matching

Usage:
    from paintquest.attempts.service import start_quest, add_progress_event
    from paintquest.recommend.service import get_task_recommendations

    quest = start_quest(user_id="alice", task_id="abc123")
    add_progress_event("alice", quest["data"]["attempt"]["id"], "COMPLETED")
    print(get_task_recommendations("alice", minutes=45))
"""

from pathlib import Path

__version__ = "0.3.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "paintquest.yaml"

__all__ = [
    "__version__",
    "PROJECT_ROOT",
    "DATA_DIR",
    "ARGS_DIR",
    "CONFIG_PATH",
]
