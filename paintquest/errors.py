"""
Error categories and stable messages for Paint Quest commands.

Every tool function returns a result dict in the same shape:

    {"success": True, "data": {...}}
    {"success": False, "error": "Attempt not found", "error_code": "not_found"}

Messages are stable; callers and tests compare them verbatim. The HTTP
layer (external) maps ``error_code`` onto a status via ``ERROR_STATUS``.
"""

from typing import Any

# Error categories
VALIDATION = "validation"
INVALID_TRANSITION = "invalid_transition"
NOT_ALLOWED = "not_allowed"
UNAUTHENTICATED = "unauthenticated"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
STORAGE = "storage"

ERROR_STATUS = {
    VALIDATION: 400,
    INVALID_TRANSITION: 400,
    NOT_ALLOWED: 400,
    UNAUTHENTICATED: 401,
    NOT_FOUND: 404,
    CONFLICT: 409,
    STORAGE: 500,
}

# Stable user-facing messages
MSG_NOT_AUTHENTICATED = "Not authenticated"
MSG_ATTEMPT_NOT_FOUND = "Attempt not found"
MSG_TASK_NOT_FOUND = "Task not found"
MSG_QUEST_NOT_FOUND = "Quest not found"
MSG_TEMPLATE_NOT_FOUND = "Template not found"
MSG_ARSENAL_ITEM_NOT_FOUND = "Arsenal item not found"
MSG_INVALID_EVENT_TYPE = "Invalid event type"
MSG_ACTION_NOT_ALLOWED = "Action not allowed: {event_type}"
MSG_ATTEMPT_CONFLICT = "Another attempt is already in progress"
MSG_EVENT_STORE_FAILED = "Failed to record event"
MSG_MINUTES_REQUIRED = "minutes is required"
MSG_ENTRY_TYPE_REQUIRED = "Entry type is required"
MSG_ENTRY_CONTENT_REQUIRED = "Entry content is required"


def ok(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Build a success result."""
    result: dict[str, Any] = {"success": True, "data": data}
    if message:
        result["message"] = message
    return result


def fail(error: str, error_code: str = VALIDATION) -> dict[str, Any]:
    """Build a failure result with a stable message and category."""
    return {"success": False, "error": error, "error_code": error_code}


def http_status(result: dict[str, Any]) -> int:
    """Map a result dict onto the HTTP status the web boundary should use."""
    if result.get("success"):
        return 200
    return ERROR_STATUS.get(result.get("error_code", VALIDATION), 400)


__all__ = [
    "VALIDATION",
    "INVALID_TRANSITION",
    "NOT_ALLOWED",
    "UNAUTHENTICATED",
    "NOT_FOUND",
    "CONFLICT",
    "STORAGE",
    "ERROR_STATUS",
    "ok",
    "fail",
    "http_status",
]
