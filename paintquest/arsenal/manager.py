"""
Tool: Arsenal Manager
Purpose: CRUD for owned tools and paints, plus bulk paint import

Usage:
    python -m paintquest.arsenal.manager --action list --user alice
    python -m paintquest.arsenal.manager --action create --user alice --category brush --name "Size 0 detail" --tags "detail brush"
    python -m paintquest.arsenal.manager --action update --user alice --item-id i1 --unavailable
    python -m paintquest.arsenal.manager --action delete --user alice --item-id i1
    python -m paintquest.arsenal.manager --action import-paints --user alice --rows '[{"color": "Mephiston Red", "brand": "Citadel", "medium": "Acrylic"}]'
    python -m paintquest.arsenal.manager --action tool-tags --user alice

Output:
    JSON result with success status and data
"""

import argparse
import json
import sqlite3
import sys
from typing import Any, Optional

from paintquest.arsenal import ARSENAL_CATEGORIES
from paintquest.database import generate_id, row_to_dict, run_with_cursor, to_json, utc_now
from paintquest.errors import (
    MSG_ARSENAL_ITEM_NOT_FOUND,
    MSG_NOT_AUTHENTICATED,
    NOT_FOUND,
    UNAUTHENTICATED,
    fail,
    ok,
)
from paintquest.logging_config import get_logger
from paintquest.tags import normalize_tags

logger = get_logger(__name__)


def _insert_item(
    cursor: sqlite3.Cursor,
    user_id: str,
    category: str,
    name: str,
    tags: list[str],
    available: bool,
) -> str:
    item_id = generate_id()
    now = utc_now()
    cursor.execute(
        """
        INSERT INTO arsenal_item (id, user_id, category, name, tags, available, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (item_id, user_id, category, name, to_json(tags), 1 if available else 0, now, now),
    )
    return item_id


def fetch_item(cursor: sqlite3.Cursor, user_id: str, item_id: str) -> Optional[dict[str, Any]]:
    cursor.execute("SELECT * FROM arsenal_item WHERE id = ? AND user_id = ?", (item_id, user_id))
    return row_to_dict(cursor.fetchone())


def available_tool_tags(cursor: sqlite3.Cursor, user_id: str) -> Optional[list[str]]:
    """
    Flattened tags of the user's available items.

    Returns None when the user has no arsenal items at all, so scorers can
    tell "no data" apart from "nothing matching".
    """
    cursor.execute("SELECT tags, available FROM arsenal_item WHERE user_id = ?", (user_id,))
    rows = [row_to_dict(row) for row in cursor.fetchall()]
    if not rows:
        return None

    tags: list[str] = []
    for row in rows:
        if row["available"]:
            tags.extend(normalize_tags(row["tags"]))
    return tags


def _list(cursor: sqlite3.Cursor, user_id: str, category: Optional[str]) -> dict[str, Any]:
    if category:
        cursor.execute(
            "SELECT * FROM arsenal_item WHERE user_id = ? AND category = ? ORDER BY updated_at DESC",
            (user_id, category),
        )
    else:
        cursor.execute(
            "SELECT * FROM arsenal_item WHERE user_id = ? ORDER BY updated_at DESC",
            (user_id,),
        )
    items = [row_to_dict(row) for row in cursor.fetchall()]
    return ok({"items": items, "total": len(items)})


def list_items(user_id: str, category: Optional[str] = None) -> dict[str, Any]:
    """List arsenal items, most recently updated first."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_list, "Failed to load arsenal", user_id, category)


def _create(
    cursor: sqlite3.Cursor,
    user_id: str,
    category: str,
    name: str,
    tags: list[str],
    available: bool,
) -> dict[str, Any]:
    item_id = _insert_item(cursor, user_id, category, name, tags, available)
    logger.info("arsenal_item_created", item_id=item_id, category=category)
    return ok({"item": fetch_item(cursor, user_id, item_id)})


def create_item(
    user_id: str,
    category: str,
    name: str,
    tags: Any = None,
    available: bool = True,
) -> dict[str, Any]:
    """
    Add one item to the arsenal.

    Args:
        user_id: Owner
        category: paint, tool, brush or other
        name: Display name
        tags: List or comma-separated string (e.g. "detail brush")
        available: Whether the item currently counts for recommendations

    Returns:
        dict with success status and the stored item
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if category not in ARSENAL_CATEGORIES:
        return fail(f"Invalid category. Must be one of: {ARSENAL_CATEGORIES}")

    if not name or not str(name).strip():
        return fail("Name is required")

    return run_with_cursor(
        _create,
        "Failed to create arsenal item",
        user_id,
        category,
        str(name).strip(),
        normalize_tags(tags),
        bool(available),
        write=True,
    )


def _update(
    cursor: sqlite3.Cursor,
    user_id: str,
    item_id: str,
    updates: list[str],
    params: list[Any],
) -> dict[str, Any]:
    if fetch_item(cursor, user_id, item_id) is None:
        return fail(MSG_ARSENAL_ITEM_NOT_FOUND, NOT_FOUND)

    cursor.execute(
        f"UPDATE arsenal_item SET {', '.join(updates)}, updated_at = ? WHERE id = ? AND user_id = ?",
        params + [utc_now(), item_id, user_id],
    )
    return ok({"item": fetch_item(cursor, user_id, item_id)})


def update_item(
    user_id: str,
    item_id: str,
    category: Optional[str] = None,
    name: Optional[str] = None,
    tags: Any = None,
    available: Optional[bool] = None,
) -> dict[str, Any]:
    """Update the given fields of an item; None leaves a field unchanged."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if category is not None and category not in ARSENAL_CATEGORIES:
        return fail(f"Invalid category. Must be one of: {ARSENAL_CATEGORIES}")

    updates = []
    params: list[Any] = []

    if category is not None:
        updates.append("category = ?")
        params.append(category)

    if name is not None:
        if not name.strip():
            return fail("Name is required")
        updates.append("name = ?")
        params.append(name.strip())

    if tags is not None:
        updates.append("tags = ?")
        params.append(to_json(normalize_tags(tags)))

    if available is not None:
        updates.append("available = ?")
        params.append(1 if available else 0)

    if not updates:
        return fail("No fields to update")

    return run_with_cursor(_update, "Failed to update arsenal item", user_id, item_id, updates, params, write=True)


def _delete(cursor: sqlite3.Cursor, user_id: str, item_id: str) -> dict[str, Any]:
    item = fetch_item(cursor, user_id, item_id)
    if item is None:
        return fail(MSG_ARSENAL_ITEM_NOT_FOUND, NOT_FOUND)

    cursor.execute("DELETE FROM arsenal_item WHERE id = ? AND user_id = ?", (item_id, user_id))
    return ok({"item": item})


def delete_item(user_id: str, item_id: str) -> dict[str, Any]:
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_delete, "Failed to delete arsenal item", user_id, item_id, write=True)


def _import(cursor: sqlite3.Cursor, user_id: str, prepared: list[tuple[str, list[str], bool]]) -> dict[str, Any]:
    item_ids = [_insert_item(cursor, user_id, "paint", color, tags, available) for color, tags, available in prepared]
    items = [fetch_item(cursor, user_id, item_id) for item_id in item_ids]
    return ok({"items": items, "inserted": len(items)})


def import_paints(user_id: str, rows: Any) -> dict[str, Any]:
    """
    Bulk-insert paints from already-parsed rows.

    Each row is {"color": ..., "brand": ..., "medium": ..., "available": ...};
    brand and medium become the item's tags. Rows with a blank color are
    skipped. All rows go in one transaction.

    Returns:
        dict with the inserted items and their count
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    if not isinstance(rows, list):
        rows = []

    prepared = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        color = str(row.get("color") or "").strip()
        if not color:
            continue
        tags = [str(row[key]).strip() for key in ("brand", "medium") if row.get(key) and str(row[key]).strip()]
        available = row.get("available")
        prepared.append((color, tags, True if available is None else bool(available)))

    if not prepared:
        return ok({"items": [], "inserted": 0})

    result = run_with_cursor(_import, "Failed to import paints", user_id, prepared, write=True)
    if result["success"]:
        logger.info("paints_imported", inserted=len(prepared), skipped=len(rows) - len(prepared))
    return result


def _tool_tags(cursor: sqlite3.Cursor, user_id: str) -> dict[str, Any]:
    return ok({"tags": available_tool_tags(cursor, user_id)})


def get_available_tool_tags(user_id: str) -> dict[str, Any]:
    """Tags of available items; ``tags`` is None when the arsenal is empty."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)
    return run_with_cursor(_tool_tags, "Failed to load arsenal", user_id)


def main():
    parser = argparse.ArgumentParser(description="Arsenal Manager - owned tools and paints")
    parser.add_argument(
        "--action",
        required=True,
        choices=["list", "create", "update", "delete", "import-paints", "tool-tags"],
        help="Action to perform",
    )

    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--item-id", help="Arsenal item ID")
    parser.add_argument("--category", choices=ARSENAL_CATEGORIES, help="Item category")
    parser.add_argument("--name", help="Item name")
    parser.add_argument("--tags", help="Comma-separated tags")
    parser.add_argument("--unavailable", action="store_true", help="Mark the item unavailable")
    parser.add_argument("--available", action="store_true", help="Mark the item available")
    parser.add_argument("--rows", help="Paint rows as a JSON list")

    args = parser.parse_args()
    result = None

    if args.action == "list":
        result = list_items(args.user, category=args.category)

    elif args.action == "create":
        result = create_item(
            args.user,
            category=args.category or "tool",
            name=args.name,
            tags=args.tags,
            available=not args.unavailable,
        )

    elif args.action in ("update", "delete"):
        if not args.item_id:
            print(json.dumps({"success": False, "error": f"--item-id required for {args.action}"}))
            sys.exit(1)
        if args.action == "delete":
            result = delete_item(args.user, args.item_id)
        else:
            available = None
            if args.available:
                available = True
            elif args.unavailable:
                available = False
            result = update_item(
                args.user,
                args.item_id,
                category=args.category,
                name=args.name,
                tags=args.tags,
                available=available,
            )

    elif args.action == "import-paints":
        try:
            rows = json.loads(args.rows or "[]")
        except json.JSONDecodeError:
            print(json.dumps({"success": False, "error": "--rows must be valid JSON"}))
            sys.exit(1)
        result = import_paints(args.user, rows)

    elif args.action == "tool-tags":
        result = get_available_tool_tags(args.user)

    if result:
        print(json.dumps(result, indent=2, default=str))
        if not result.get("success"):
            sys.exit(1)


if __name__ == "__main__":
    main()
