"""
Tool: Profile Manager
Purpose: Painting profile and recommendation weighting, one row each per user

The profile is upserted wholesale: every field not supplied is reset to
NULL. The recommendation config is upserted the same way; NULL columns
fall back to the defaults in args/paintquest.yaml.

Usage:
    python -m paintquest.profile.manager --action get --user alice
    python -m paintquest.profile.manager --action set --user alice --bottom "glazing, blending" --energy low
    python -m paintquest.profile.manager --action get-config --user alice
    python -m paintquest.profile.manager --action set-config --user alice --config '{"weight_priority": 2}'

Output:
    JSON result with success status and data
"""

import argparse
import json
import sys
from typing import Any, Optional

from pydantic import ValidationError

from paintquest.config_models import StoredRecommendationConfig, load_config
from paintquest.database import row_to_dict, run_with_cursor, to_json, utc_now
from paintquest.errors import MSG_NOT_AUTHENTICATED, UNAUTHENTICATED, fail, ok
from paintquest.logging_config import get_logger
from paintquest.models import ENERGY_TIERS, parse_energy
from paintquest.profile import MAX_FOCUS_SKILLS, RECOMMENDATION_CONFIG_FIELDS
from paintquest.tags import normalize_tags

logger = get_logger(__name__)


def fetch_profile(cursor, user_id: str) -> Optional[dict[str, Any]]:
    cursor.execute("SELECT * FROM profile WHERE user_id = ?", (user_id,))
    return row_to_dict(cursor.fetchone())


def fetch_recommendation_config(cursor, user_id: str) -> Optional[dict[str, Any]]:
    cursor.execute("SELECT * FROM recommendation_config WHERE user_id = ?", (user_id,))
    return row_to_dict(cursor.fetchone())


def _get_profile(cursor, user_id: str) -> dict[str, Any]:
    return ok(fetch_profile(cursor, user_id))


def get_profile(user_id: str) -> dict[str, Any]:
    """Get the user's profile; data is None when none has been saved."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    return run_with_cursor(_get_profile, "Failed to load profile", user_id)


def _normalize_constraints(constraints: Any) -> Any:
    if constraints is None:
        return None
    if isinstance(constraints, dict):
        normalized = dict(constraints)
        if "excluded_tools" in normalized:
            normalized["excluded_tools"] = normalize_tags(normalized["excluded_tools"])
        return normalized
    return {"excluded_tools": normalize_tags(constraints)}


def _save_profile(cursor, values: tuple) -> dict[str, Any]:
    now = utc_now()
    cursor.execute(
        """
        INSERT INTO profile (
            user_id, media, focus_skills_top3, focus_skills_bottom3,
            default_time_bucket, constraints, energy_preference, created_at, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            media = excluded.media,
            focus_skills_top3 = excluded.focus_skills_top3,
            focus_skills_bottom3 = excluded.focus_skills_bottom3,
            default_time_bucket = excluded.default_time_bucket,
            constraints = excluded.constraints,
            energy_preference = excluded.energy_preference,
            updated_at = excluded.updated_at
    """,
        (*values, now, now),
    )
    logger.info("profile_saved")
    return ok(fetch_profile(cursor, values[0]), "Profile saved")


def upsert_profile(
    user_id: str,
    media: Any = None,
    focus_skills_top3: Any = None,
    focus_skills_bottom3: Any = None,
    default_time_bucket: Optional[int] = None,
    constraints: Any = None,
    energy_preference: Optional[str] = None,
) -> dict[str, Any]:
    """
    Create or replace the user's profile.

    Args:
        user_id: Owner
        media: Paint media the user works in (list or comma string)
        focus_skills_top3: Skills the user wants tasks to lean on
        focus_skills_bottom3: Skills the user wants to practise
        default_time_bucket: Usual session length in minutes
        constraints: {"excluded_tools": [...]} or a bare list of tool tags
        energy_preference: low, med or high

    Returns:
        dict with success status and the stored profile
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    top3 = normalize_tags(focus_skills_top3)
    bottom3 = normalize_tags(focus_skills_bottom3)
    for label, skills in (("focus_skills_top3", top3), ("focus_skills_bottom3", bottom3)):
        if len(skills) > MAX_FOCUS_SKILLS:
            return fail(f"{label} accepts at most {MAX_FOCUS_SKILLS} skills")

    energy = None
    if energy_preference is not None:
        energy = parse_energy(energy_preference)
        if energy is None:
            return fail(f"Invalid energy preference. Must be one of: {ENERGY_TIERS}")

    if default_time_bucket is not None:
        if isinstance(default_time_bucket, bool) or not isinstance(default_time_bucket, int) or default_time_bucket <= 0:
            return fail("default_time_bucket must be a positive integer")

    values = (
        user_id,
        to_json(normalize_tags(media)),
        to_json(top3),
        to_json(bottom3),
        default_time_bucket,
        to_json(_normalize_constraints(constraints)),
        energy.value if energy else None,
    )
    return run_with_cursor(_save_profile, "Failed to save profile", values, write=True)


def _get_config(cursor, user_id: str) -> dict[str, Any]:
    stored = fetch_recommendation_config(cursor, user_id)
    return ok({"config": stored, "effective": effective_weights(stored).model_dump()})


def get_recommendation_config(user_id: str) -> dict[str, Any]:
    """
    Get the stored weighting row and the effective weights.

    Effective weights layer the stored row over the configured defaults.
    """
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    return run_with_cursor(_get_config, "Failed to load recommendation config", user_id)


def effective_weights(stored: Optional[dict[str, Any]]) -> StoredRecommendationConfig:
    """Defaults from args/paintquest.yaml overlaid with the non-null stored columns."""
    defaults = load_config().recommendation.defaults.model_dump()
    overrides = {k: v for k, v in (stored or {}).items() if k in RECOMMENDATION_CONFIG_FIELDS and v is not None}
    return StoredRecommendationConfig.model_validate({**defaults, **overrides})


def _save_config(cursor, user_id: str, values: list[Any]) -> dict[str, Any]:
    now = utc_now()
    columns = ", ".join(RECOMMENDATION_CONFIG_FIELDS)
    placeholders = ", ".join("?" for _ in RECOMMENDATION_CONFIG_FIELDS)
    assignments = ",\n            ".join(f"{name} = excluded.{name}" for name in RECOMMENDATION_CONFIG_FIELDS)

    cursor.execute(
        f"""
        INSERT INTO recommendation_config (user_id, {columns}, created_at, updated_at)
        VALUES (?, {placeholders}, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            {assignments},
            updated_at = excluded.updated_at
    """,
        [user_id, *values, now, now],
    )

    stored = fetch_recommendation_config(cursor, user_id)
    return ok({"config": stored, "effective": effective_weights(stored).model_dump()}, "Recommendation config saved")


def upsert_recommendation_config(user_id: str, **fields: Any) -> dict[str, Any]:
    """Create or replace the user's weighting row. Unsupplied columns are stored as NULL."""
    if not user_id:
        return fail(MSG_NOT_AUTHENTICATED, UNAUTHENTICATED)

    unknown = set(fields) - set(RECOMMENDATION_CONFIG_FIELDS)
    if unknown:
        return fail(f"Unknown config fields: {sorted(unknown)}")

    if fields.get("focus_skills") is not None:
        fields["focus_skills"] = normalize_tags(fields["focus_skills"])

    try:
        StoredRecommendationConfig.model_validate(fields)
    except ValidationError as e:
        return fail(f"Invalid recommendation config: {e.errors()[0]['msg']}")

    values = [fields.get(name) for name in RECOMMENDATION_CONFIG_FIELDS]
    values[-1] = to_json(values[-1])

    return run_with_cursor(_save_config, "Failed to save recommendation config", user_id, values, write=True)


def main():
    parser = argparse.ArgumentParser(description="Profile Manager")
    parser.add_argument(
        "--action",
        required=True,
        choices=["get", "set", "get-config", "set-config"],
        help="Action to perform",
    )

    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--media", help="Comma-separated paint media")
    parser.add_argument("--top", help="Comma-separated top-3 focus skills")
    parser.add_argument("--bottom", help="Comma-separated bottom-3 focus skills")
    parser.add_argument("--time-bucket", type=int, help="Usual session length in minutes")
    parser.add_argument("--exclude-tools", help="Comma-separated tool tags to avoid")
    parser.add_argument("--energy", choices=ENERGY_TIERS, help="Energy preference")
    parser.add_argument("--config", help="Recommendation config as JSON")

    args = parser.parse_args()
    result = None

    if args.action == "get":
        result = get_profile(args.user)

    elif args.action == "set":
        result = upsert_profile(
            args.user,
            media=args.media,
            focus_skills_top3=args.top,
            focus_skills_bottom3=args.bottom,
            default_time_bucket=args.time_bucket,
            constraints={"excluded_tools": args.exclude_tools} if args.exclude_tools else None,
            energy_preference=args.energy,
        )

    elif args.action == "get-config":
        result = get_recommendation_config(args.user)

    elif args.action == "set-config":
        try:
            fields = json.loads(args.config or "{}")
        except json.JSONDecodeError:
            print(json.dumps({"success": False, "error": "--config must be valid JSON"}))
            sys.exit(1)
        result = upsert_recommendation_config(args.user, **fields)

    if result:
        print(json.dumps(result, indent=2, default=str))
        if not result.get("success"):
            sys.exit(1)


if __name__ == "__main__":
    main()
