"""
Tool: Quest Template Store
Purpose: Attempt template CRUD and lazy default provisioning

Templates are scoped to a (user, task) pair; generic skill drills have no
task and are visible from every quest of the user.

Usage:
    python -m paintquest.quests.templates --action list --user alice --task-id abc123
    python -m paintquest.quests.templates --action create --user alice --task-id abc123 --title "Eyes" --min 10 --max 20 --energy high
    python -m paintquest.quests.templates --action update --user alice --task-id abc123 --template-id t1 --energy low
    python -m paintquest.quests.templates --action delete --user alice --task-id abc123 --template-id t1
    python -m paintquest.quests.templates --action provision --user alice --task-id abc123

Output:
    JSON result with success status and data
"""

import argparse
import json
import sqlite3
import sys
from typing import Any, Iterable, Optional

from paintquest.config_models import load_config
from paintquest.database import generate_id, row_to_dict, run_with_cursor, to_json, utc_now
from paintquest.errors import (
    MSG_NOT_AUTHENTICATED,
    MSG_QUEST_NOT_FOUND,
    MSG_TEMPLATE_NOT_FOUND,
    NOT_FOUND,
    UNAUTHENTICATED,
    fail,
    ok,
)
from paintquest.logging_config import get_logger
from paintquest.models import ENERGY_TIERS, parse_energy
from paintquest.quests import GENERIC_SKILL_TEMPLATES, QUEST_TEMPLATE_ARCHETYPES
from paintquest.tags import normalize_tags
from paintquest.tasks.manager import fetch_task

logger = get_logger(__name__)

TEMPLATE_COLUMNS = (
    "title",
    "description",
    "estimated_minutes_min",
    "estimated_minutes_max",
    "energy",
    "required_tools_tags",
    "focus_skills_tags",
    "progress_value",
)


# =============================================================================
# Default builders
# =============================================================================

def build_quest_specific_templates(user_id: str, task_id: str, quest_title: str) -> list[dict[str, Any]]:
    """The six archetypes, titled for this quest."""
    return [
        {
            **archetype,
            "title": f"{quest_title}: {archetype['title']}",
            "user_id": user_id,
            "task_id": task_id,
            "is_system_generated": True,
        }
        for archetype in QUEST_TEMPLATE_ARCHETYPES
    ]


def build_generic_skill_templates(user_id: str) -> list[dict[str, Any]]:
    return [
        {**drill, "user_id": user_id, "task_id": None, "is_system_generated": True}
        for drill in GENERIC_SKILL_TEMPLATES
    ]


def build_default_templates(user_id: str, task_id: str, quest_title: str) -> list[dict[str, Any]]:
    """Quest-specific archetypes followed by the generic skill drills."""
    return build_quest_specific_templates(user_id, task_id, quest_title) + build_generic_skill_templates(user_id)


# =============================================================================
# Cursor-level helpers
# =============================================================================

def insert_template(cursor: sqlite3.Cursor, template: dict[str, Any]) -> str:
    template_id = generate_id()
    now = utc_now()
    cursor.execute(
        """
        INSERT INTO quest_attempt_template (
            id, user_id, task_id, title, description, estimated_minutes_min,
            estimated_minutes_max, energy, required_tools_tags, focus_skills_tags,
            progress_value, is_system_generated, created_at, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            template_id,
            template["user_id"],
            template.get("task_id"),
            template["title"],
            template.get("description"),
            template["estimated_minutes_min"],
            template["estimated_minutes_max"],
            template["energy"],
            to_json(normalize_tags(template.get("required_tools_tags"))),
            to_json(normalize_tags(template.get("focus_skills_tags"))),
            template.get("progress_value"),
            1 if template.get("is_system_generated") else 0,
            now,
            now,
        ),
    )
    return template_id


def fetch_template(cursor: sqlite3.Cursor, user_id: str, task_id: str, template_id: str) -> Optional[dict[str, Any]]:
    cursor.execute(
        "SELECT * FROM quest_attempt_template WHERE id = ? AND task_id = ? AND user_id = ?",
        (template_id, task_id, user_id),
    )
    return row_to_dict(cursor.fetchone())


def task_templates(cursor: sqlite3.Cursor, user_id: str, task_id: str) -> list[dict[str, Any]]:
    """Templates attached to this task only, newest first."""
    cursor.execute(
        """
        SELECT * FROM quest_attempt_template
        WHERE user_id = ? AND task_id = ?
        ORDER BY created_at DESC
        """,
        (user_id, task_id),
    )
    return [row_to_dict(row) for row in cursor.fetchall()]


def templates_in_scope(cursor: sqlite3.Cursor, user_id: str, task_id: str) -> list[dict[str, Any]]:
    """Templates of this task plus the user's generic (task-less) templates, oldest first."""
    cursor.execute(
        """
        SELECT * FROM quest_attempt_template
        WHERE user_id = ? AND (task_id = ? OR task_id IS NULL)
        ORDER BY created_at ASC, rowid ASC
        """,
        (user_id, task_id),
    )
    return [row_to_dict(row) for row in cursor.fetchall()]


def ensure_task_templates(
    cursor: sqlite3.Cursor,
    user_id: str,
    task: dict[str, Any],
    used_template_ids: Iterable[str] = (),
    min_unused: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Make sure a quest has templates to recommend.

    1. Fewer than ``min_unused`` unused task-specific templates: insert
       quest-specific archetypes whose title is not already taken, up to
       the shortfall.
    2. Still no template in scope (task or generic): seed the full default
       set, archetypes plus generic skill drills.

    Runs on the caller's cursor so it shares the caller's transaction.

    Returns:
        Every template in scope after provisioning
    """
    if min_unused is None:
        min_unused = load_config().provisioning.min_unused_task_templates

    used = set(used_template_ids)
    existing = task_templates(cursor, user_id, task["id"])
    unused_count = sum(1 for template in existing if template["id"] not in used)

    if unused_count < min_unused:
        titles = {template["title"] for template in existing}
        candidates = [
            template
            for template in build_quest_specific_templates(user_id, task["id"], task["title"])
            if template["title"] not in titles
        ][: min_unused - unused_count]
        for template in candidates:
            insert_template(cursor, template)
        if candidates:
            logger.info("templates_topped_up", task_id=task["id"], created=len(candidates))

    templates = templates_in_scope(cursor, user_id, task["id"])
    if not templates:
        defaults = build_default_templates(user_id, task["id"], task["title"])
        for template in defaults:
            insert_template(cursor, template)
        logger.info("templates_seeded", task_id=task["id"], created=len(defaults))
        templates = templates_in_scope(cursor, user_id, task["id"])

    return templates


# =============================================================================
# CRUD
# =============================================================================

def _validate_template(fields: dict[str, Any], partial: bool = False) -> Optional[str]:
    if not partial or "title" in fields:
        if not fields.get("title") or not str(fields["title"]).strip():
            return "Title is required"

    for key in ("estimated_minutes_min", "estimated_minutes_max"):
        if not partial or key in fields:
            value = fields.get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                return f"{key} is required and must be a non-negative integer"

    low = fields.get("estimated_minutes_min")
    high = fields.get("estimated_minutes_max")
    if isinstance(low, int) and isinstance(high, int) and low > high:
        return "estimated_minutes_min cannot exceed estimated_minutes_max"

    if (not partial or "energy" in fields) and parse_energy(fields.get("energy")) is None:
        return f"Invalid energy. Must be one of: {ENERGY_TIERS}"

    return None


def _list(cursor: sqlite3.Cursor, user_id: str, task_id: str) -> dict[str, Any]:
    if fetch_task(cursor, user_id, task_id) is None:
        return fail(MSG_QUEST_NOT_FOUND, NOT_FOUND)
    return ok({"templates": task_templates(cursor, user_id, task_id)})


def list_templates(user_id: str, task_id: str) -> dict[str, Any]:
    """Templates attached to one quest, newest first."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_list, "Failed to load templates", user_id, task_id)


def _create(cursor: sqlite3.Cursor, user_id: str, task_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    if fetch_task(cursor, user_id, task_id) is None:
        return fail(MSG_QUEST_NOT_FOUND, NOT_FOUND)

    template_id = insert_template(cursor, {
        **fields,
        "user_id": user_id,
        "task_id": task_id,
        "is_system_generated": False,
    })
    logger.info("template_created", task_id=task_id, template_id=template_id)
    return ok({"template": fetch_template(cursor, user_id, task_id, template_id)})


def create_template(
    user_id: str,
    task_id: str,
    title: str,
    estimated_minutes_min: int,
    estimated_minutes_max: int,
    energy: str,
    description: Optional[str] = None,
    required_tools_tags: Any = None,
    focus_skills_tags: Any = None,
    progress_value: Optional[str] = None,
) -> dict[str, Any]:
    """
    Create a user-authored template for a quest.

    Args:
        user_id: Owner
        task_id: Quest the template belongs to
        title: Template title
        estimated_minutes_min: Required lower bound
        estimated_minutes_max: Required upper bound
        energy: low, med or high
        description: Optional description
        required_tools_tags: List or comma-separated string
        focus_skills_tags: List or comma-separated string
        progress_value: What finishing the template achieves

    Returns:
        dict with success status and the stored template
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    fields = {
        "title": title,
        "description": description,
        "estimated_minutes_min": estimated_minutes_min,
        "estimated_minutes_max": estimated_minutes_max,
        "energy": energy,
        "required_tools_tags": required_tools_tags,
        "focus_skills_tags": focus_skills_tags,
        "progress_value": progress_value,
    }
    error = _validate_template(fields)
    if error:
        return fail(error)

    fields["title"] = str(title).strip()
    fields["energy"] = parse_energy(energy).value
    return run_with_cursor(_create, "Failed to create template", user_id, task_id, fields, write=True)


def _update(
    cursor: sqlite3.Cursor,
    user_id: str,
    task_id: str,
    template_id: str,
    fields: dict[str, Any],
) -> dict[str, Any]:
    existing = fetch_template(cursor, user_id, task_id, template_id)
    if existing is None:
        return fail(MSG_TEMPLATE_NOT_FOUND, NOT_FOUND)

    merged = {**existing, **fields}
    if merged["estimated_minutes_min"] > merged["estimated_minutes_max"]:
        return fail("estimated_minutes_min cannot exceed estimated_minutes_max")

    updates = []
    params: list[Any] = []
    for column, value in fields.items():
        if column in ("required_tools_tags", "focus_skills_tags"):
            value = to_json(normalize_tags(value))
        elif column == "energy":
            value = parse_energy(value).value
        updates.append(f"{column} = ?")
        params.append(value)

    updates.append("updated_at = ?")
    params.append(utc_now())
    params.extend([template_id, user_id])

    cursor.execute(
        f"UPDATE quest_attempt_template SET {', '.join(updates)} WHERE id = ? AND user_id = ?",
        params,
    )
    return ok({"template": fetch_template(cursor, user_id, task_id, template_id)})


def update_template(user_id: str, task_id: str, template_id: str, **fields: Any) -> dict[str, Any]:
    """Update the given template fields (any of TEMPLATE_COLUMNS)."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    unknown = set(fields) - set(TEMPLATE_COLUMNS)
    if unknown:
        return fail(f"Unknown template fields: {sorted(unknown)}")

    if not fields:
        return fail("No fields to update")

    error = _validate_template(fields, partial=True)
    if error:
        return fail(error)

    return run_with_cursor(_update, "Failed to update template", user_id, task_id, template_id, fields, write=True)


def _delete(cursor: sqlite3.Cursor, user_id: str, task_id: str, template_id: str) -> dict[str, Any]:
    existing = fetch_template(cursor, user_id, task_id, template_id)
    if existing is None:
        return fail(MSG_TEMPLATE_NOT_FOUND, NOT_FOUND)

    cursor.execute("DELETE FROM quest_attempt_template WHERE id = ?", (template_id,))
    return ok({"template": existing})


def delete_template(user_id: str, task_id: str, template_id: str) -> dict[str, Any]:
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_delete, "Failed to delete template", user_id, task_id, template_id, write=True)


def _provision(cursor: sqlite3.Cursor, user_id: str, task_id: str) -> dict[str, Any]:
    task = fetch_task(cursor, user_id, task_id)
    if task is None:
        return fail(MSG_QUEST_NOT_FOUND, NOT_FOUND)
    templates = ensure_task_templates(cursor, user_id, task)
    return ok({"templates": templates})


def provision_templates(user_id: str, task_id: str) -> dict[str, Any]:
    """Run provisioning for a quest, ignoring usage history."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_provision, "Failed to create template", user_id, task_id, write=True)


def main():
    parser = argparse.ArgumentParser(description="Quest Template Store")
    parser.add_argument(
        "--action",
        required=True,
        choices=["list", "create", "update", "delete", "provision"],
        help="Action to perform",
    )

    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--task-id", required=True, help="Quest (task) ID")
    parser.add_argument("--template-id", help="Template ID")
    parser.add_argument("--title", help="Template title")
    parser.add_argument("--description", help="Template description")
    parser.add_argument("--min", type=int, dest="minutes_min", help="Estimated minutes (lower bound)")
    parser.add_argument("--max", type=int, dest="minutes_max", help="Estimated minutes (upper bound)")
    parser.add_argument("--energy", choices=ENERGY_TIERS, help="Energy tier")
    parser.add_argument("--tools", help="Comma-separated required tool tags")
    parser.add_argument("--skills", help="Comma-separated focus skill tags")
    parser.add_argument("--progress-value", help="What finishing the template achieves")

    args = parser.parse_args()
    result = None

    if args.action == "list":
        result = list_templates(args.user, args.task_id)

    elif args.action == "create":
        result = create_template(
            args.user,
            args.task_id,
            title=args.title,
            estimated_minutes_min=args.minutes_min,
            estimated_minutes_max=args.minutes_max,
            energy=args.energy,
            description=args.description,
            required_tools_tags=args.tools,
            focus_skills_tags=args.skills,
            progress_value=args.progress_value,
        )

    elif args.action in ("update", "delete"):
        if not args.template_id:
            print(json.dumps({"success": False, "error": f"--template-id required for {args.action}"}))
            sys.exit(1)
        if args.action == "delete":
            result = delete_template(args.user, args.task_id, args.template_id)
        else:
            candidates = {
                "title": args.title,
                "description": args.description,
                "estimated_minutes_min": args.minutes_min,
                "estimated_minutes_max": args.minutes_max,
                "energy": args.energy,
                "required_tools_tags": args.tools,
                "focus_skills_tags": args.skills,
                "progress_value": args.progress_value,
            }
            fields = {k: v for k, v in candidates.items() if v is not None}
            result = update_template(args.user, args.task_id, args.template_id, **fields)

    elif args.action == "provision":
        result = provision_templates(args.user, args.task_id)

    if result:
        print(json.dumps(result, indent=2, default=str))
        if not result.get("success"):
            sys.exit(1)


if __name__ == "__main__":
    main()
