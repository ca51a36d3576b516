"""Structured logging for the LFS compliance harness.

Events are emitted through structlog with dotted names and key-value context
(object ids, batch sizes, test names, durations). A run binds its endpoint and
fixture mode once with ``bind_run_context`` so every later event carries them.

Stdout belongs to the test runner, whose status lines are rewritten in place
with a carriage return, so all log output goes to stderr.

Examples:
    Configure once, at startup::

        configure_logging(level="INFO", json_output=True)
        bind_run_context(endpoint="https://lfs.example.com/info/lfs", mode="upload")

    Emit an event::

        logger = get_logger(__name__)
        logger.info("fixtures.upload.finished", objects=50, total_bytes=7421)

    Output (JSON)::

        {
            "endpoint": "https://lfs.example.com/info/lfs",
            "mode": "upload",
            "objects": 50,
            "total_bytes": 7421,
            "event": "fixtures.upload.finished",
            "level": "info",
            "timestamp": "2024-01-01T00:00:00.000000Z"
        }
"""

import logging
import sys
from typing import Any

import structlog


def _renderer(json_output: bool) -> Any:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
) -> None:
    """Route structlog and stdlib logging to stderr at ``level``.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit one JSON object per event instead of console lines

    Examples:
        >>> configure_logging(level="DEBUG", json_output=True)
    """
    numeric_level = logging.getLevelName(level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            _renderer(json_output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_run_context(**context: Any) -> None:
    """Attach ``context`` to every event logged for the rest of the run."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**context)


def get_logger(name: str) -> Any:
    """Get a structured logger named after the calling module.

    Examples:
        >>> logger = get_logger(__name__)
        >>> logger.debug("repo.created", root="/tmp/lfs-compliance-x")
    """
    return structlog.get_logger(name)
