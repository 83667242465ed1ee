"""Tag vocabularies and the one tag-normalization routine.

Tasks, templates, arsenal items and profiles all store tag sets. At the
boundary a tag set may arrive as a comma-separated string or as a list;
``normalize_tags`` is the only place that turns either into a list of
strings.
"""

from typing import Any

TOOL_TAGS = (
    "round brush",
    "flat brush",
    "highlight brush",
    "detail brush",
    "drybrush",
    "airbrush",
)

SKILL_TAGS = (
    "airbrushing",
    "basecoating",
    "washing",
    "basing",
    "highlighting",
    "layering",
    "speedpainting",
    "glazing",
    "blending",
    "feathering",
    "drybrushing",
    "weathering",
    "effects",
    "object source lighting",
    "non metallic metal",
)

PAINT_BRAND_TAGS = (
    "AK",
    "Army Painter",
    "Citadel",
    "Pro Acryl",
    "Vallejo",
    "P3",
    "Scale75",
    "Two Thin Coats",
    "CuttleFish Colors",
    "Golden",
    "Mindwork",
    "Daler-Rowney FW",
    "Windsor and Newton",
    "Castle",
)

PAINT_MEDIUM_TAGS = (
    "Artist Acrylic",
    "Acrylic",
    "Oil",
    "Speed/Contrast",
    "Wash",
    "Ink",
    "Glaze",
    "Texture",
)


def normalize_tags(value: Any) -> list[str]:
    """
    Normalize a tag set from the boundary.

    Args:
        value: None, a comma-separated string, or a list/tuple/set of values

    Returns:
        list of non-empty, stripped tag strings (order preserved)
    """
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set, frozenset)):
        tags = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                tags.append(text)
        return tags
    return []


def tag_key_set(tags: Any) -> set[str]:
    """Lower-cased lookup set for case-insensitive tag matching."""
    return {tag.lower() for tag in normalize_tags(tags)}


__all__ = [
    "TOOL_TAGS",
    "SKILL_TAGS",
    "PAINT_BRAND_TAGS",
    "PAINT_MEDIUM_TAGS",
    "normalize_tags",
    "tag_key_set",
]
