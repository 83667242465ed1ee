"""Arsenal - the tools and paints a user owns

Components:
    manager.py: item CRUD, bulk paint import, available tool tags

Key Insight:
    Only items marked available contribute tags to recommendations. A
    user with no arsenal items at all is treated as "no arsenal data",
    which scores differently from "owns things, but not this tool".
"""

ARSENAL_CATEGORIES = ("paint", "tool", "brush", "other")

__all__ = [
    "ARSENAL_CATEGORIES",
]
