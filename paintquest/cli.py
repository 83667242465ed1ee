#!/usr/bin/env python3
"""
Paint Quest Command Line Interface

Main entry point for the `paintquest` command. Every subcommand prints the
tool's JSON result and exits 1 when the result is a failure.

Usage:
    paintquest seed                              # Starter backlog
    paintquest tasks --status backlog            # List tasks
    paintquest recommend --minutes 45            # What to paint next
    paintquest start <task_id>                   # Start a quest
    paintquest suggest <task_id> --minutes 30    # How to spend this session
    paintquest event <attempt_id> PROGRESS_RECORDED --template-id <id>
    paintquest event <attempt_id> COMPLETED
    paintquest review                            # Completed this week
    paintquest --version

The acting user comes from --user or PAINTQUEST_USER.
"""

import argparse
import json
import os
import sys

from paintquest.logging_config import setup_logging


def _emit(result: dict) -> int:
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


def cmd_version(args):
    """Show version information."""
    from paintquest import __version__

    print(f"Paint Quest version {__version__}")


def cmd_tasks(args):
    from paintquest.tasks.manager import list_tasks

    return _emit(list_tasks(args.user, status=args.status, include_archived=args.all))


def cmd_task_add(args):
    from paintquest.tasks.manager import create_task

    return _emit(create_task(
        args.user,
        title=args.title,
        game=args.game,
        estimated_minutes_min=args.minutes_min,
        estimated_minutes_max=args.minutes_max,
        priority=args.priority,
        required_tools_tags=args.tools,
        skills_tags=args.skills,
    ))


def cmd_seed(args):
    from paintquest.tasks.manager import seed_default_tasks

    return _emit(seed_default_tasks(args.user))


def cmd_start(args):
    from paintquest.attempts.service import start_quest

    return _emit(start_quest(args.user, args.task_id))


def cmd_new(args):
    from paintquest.attempts.service import create_attempt

    return _emit(create_attempt(args.user, auto_start=args.auto_start))


def cmd_event(args):
    from paintquest.attempts.service import add_progress_event

    payload = None
    if args.payload:
        try:
            payload = json.loads(args.payload)
        except json.JSONDecodeError:
            return _emit({"success": False, "error": "--payload must be valid JSON"})
    if args.template_id:
        payload = {**(payload if isinstance(payload, dict) else {}), "template_id": args.template_id}

    return _emit(add_progress_event(args.user, args.attempt_id, args.event_type, payload))


def cmd_note(args):
    from paintquest.attempts.service import add_attempt_entry

    return _emit(add_attempt_entry(args.user, args.attempt_id, args.entry_type, {"text": args.text}))


def cmd_show(args):
    from paintquest.attempts.service import get_attempt_details

    return _emit(get_attempt_details(args.user, args.attempt_id))


def cmd_attempts(args):
    from paintquest.attempts.service import list_attempts

    return _emit(list_attempts(args.user, task_id=args.task_id))


def cmd_recommend(args):
    from paintquest.recommend.service import get_task_recommendations

    return _emit(get_task_recommendations(args.user, args.minutes))


def cmd_suggest(args):
    from paintquest.recommend.service import get_attempt_recommendations

    return _emit(get_attempt_recommendations(args.user, args.task_id, minutes=args.minutes, energy=args.energy))


def cmd_review(args):
    from paintquest.attempts.review import weekly_review

    return _emit(weekly_review(args.user, days=args.days))


def build_parser() -> argparse.ArgumentParser:
    from paintquest.models import ENERGY_TIERS, ENTRY_TYPES, EVENT_TYPES, TASK_STATUSES

    parser = argparse.ArgumentParser(
        prog="paintquest",
        description="Paint Quest - plan and record miniature painting sessions",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--user", default=os.environ.get("PAINTQUEST_USER"), help="Acting user (default: $PAINTQUEST_USER)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Backlog
    tasks_parser = subparsers.add_parser("tasks", help="List tasks")
    tasks_parser.add_argument("--status", choices=TASK_STATUSES, help="Filter by status")
    tasks_parser.add_argument("--all", action="store_true", help="Include archived tasks")
    tasks_parser.set_defaults(func=cmd_tasks)

    add_parser = subparsers.add_parser("task-add", help="Add a task to the backlog")
    add_parser.add_argument("title", help="Task title")
    add_parser.add_argument("--game", help="Game label")
    add_parser.add_argument("--min", type=int, dest="minutes_min", help="Estimated minutes (lower bound)")
    add_parser.add_argument("--max", type=int, dest="minutes_max", help="Estimated minutes (upper bound)")
    add_parser.add_argument("--priority", type=int, default=3, help="Priority 1-5 (default: 3)")
    add_parser.add_argument("--tools", help="Comma-separated required tool tags")
    add_parser.add_argument("--skills", help="Comma-separated skill tags")
    add_parser.set_defaults(func=cmd_task_add)

    seed_parser = subparsers.add_parser("seed", help="Insert the starter backlog")
    seed_parser.set_defaults(func=cmd_seed)

    # Attempts
    start_parser = subparsers.add_parser("start", help="Start a quest on a task")
    start_parser.add_argument("task_id", help="Task ID")
    start_parser.set_defaults(func=cmd_start)

    new_parser = subparsers.add_parser("new", help="Create a free-standing attempt")
    new_parser.add_argument("--auto-start", action="store_true", help="Start it immediately")
    new_parser.set_defaults(func=cmd_new)

    event_parser = subparsers.add_parser("event", help="Record a progress event")
    event_parser.add_argument("attempt_id", help="Attempt ID")
    event_parser.add_argument("event_type", choices=EVENT_TYPES, help="Event type")
    event_parser.add_argument("--template-id", help="Template worked on (PROGRESS_RECORDED)")
    event_parser.add_argument("--payload", help="Event payload as JSON")
    event_parser.set_defaults(func=cmd_event)

    note_parser = subparsers.add_parser("note", help="Add a journal entry to an attempt")
    note_parser.add_argument("attempt_id", help="Attempt ID")
    note_parser.add_argument("text", help="Entry text")
    note_parser.add_argument("--type", dest="entry_type", choices=ENTRY_TYPES, default="note", help="Entry type")
    note_parser.set_defaults(func=cmd_note)

    show_parser = subparsers.add_parser("show", help="Show an attempt with its derived state")
    show_parser.add_argument("attempt_id", help="Attempt ID")
    show_parser.set_defaults(func=cmd_show)

    attempts_parser = subparsers.add_parser("attempts", help="List attempts")
    attempts_parser.add_argument("--task-id", help="Only attempts on this task")
    attempts_parser.set_defaults(func=cmd_attempts)

    # Recommendations
    recommend_parser = subparsers.add_parser("recommend", help="Rank tasks for the time available")
    recommend_parser.add_argument("--minutes", type=float, required=True, help="Available minutes")
    recommend_parser.set_defaults(func=cmd_recommend)

    suggest_parser = subparsers.add_parser("suggest", help="Suggest attempt templates for a quest")
    suggest_parser.add_argument("task_id", help="Task ID")
    suggest_parser.add_argument("--minutes", type=float, help="Available minutes (default: 60)")
    suggest_parser.add_argument("--energy", choices=ENERGY_TIERS, help="Energy for this session")
    suggest_parser.set_defaults(func=cmd_suggest)

    review_parser = subparsers.add_parser("review", help="Quests completed in the last week")
    review_parser.add_argument("--days", type=int, help="Window length in days")
    review_parser.set_defaults(func=cmd_review)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return

    # Commands may return an exit code
    result = args.func(args)
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
