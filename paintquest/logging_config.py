"""
Structured logging for Paint Quest, structlog over stdlib logging.

Events are snake_case names with key/value context:
- event_appended, attempt_created, entry_added: session log writes
- attempt_conflict, invalid_event_log: rejected transitions and unreadable history
- templates_topped_up, templates_seeded: quest template provisioning
- tasks_recommended, attempts_recommended: recommender runs with candidate counts
- storage_error: any sqlite3 failure, logged before it is returned as a storage error

Console output is human-readable by default; PAINTQUEST_LOG_FORMAT=json
writes one JSON object per line. Commands bind the acting user with
``bind_user`` so every event inside a command carries ``user_id``.

Usage:
    from paintquest.logging_config import get_logger, setup_logging
    setup_logging()
    logger = get_logger(__name__)
    logger.info("event_appended", attempt_id="a1", event_type="COMPLETED")
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator, TextIO

import structlog


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    if level is None:
        level = os.environ.get("PAINTQUEST_LOG_LEVEL", "WARNING")

    if json_output is None:
        json_output = os.environ.get("PAINTQUEST_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # stderr keeps CLI JSON results on stdout clean
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def bind_user(user_id: str | None) -> Iterator[None]:
    """Attach ``user_id`` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(user_id=user_id):
        yield


__all__ = ["bind_user", "get_logger", "setup_logging"]
