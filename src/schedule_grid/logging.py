"""structlog setup for the schedule grid.

Events are short snake_case names with key/value context
(log.info("bulk_create_finished", created=3, failed=2)). The team and the
displayed week are bound once per board through contextvars, so every event
raised while that board works carries them.
"""

import logging
import sys
from typing import TextIO

import structlog

# Chatty HTTP libraries, kept at WARNING unless the package runs at DEBUG
_NOISY_LOGGERS = ("urllib3", "requests")


def setup_logging(
    json_output: bool = False,
    log_level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and route stdlib logging to the same stream.

    Args:
        json_output: One JSON object per line instead of the console renderer.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        stream: Where log lines go. Defaults to stderr so stdout stays
            free for the grid table and --json output.
    """
    stream = stream or sys.stderr
    level = getattr(logging, log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=stream.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(stream)]
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        noisy_level = level if level == logging.DEBUG else max(level, logging.WARNING)
        logging.getLogger(name).setLevel(noisy_level)


def bind_board_context(team_id: str, week_start: str | None = None) -> None:
    """Attach team_id (and week_start, when known) to subsequent events."""
    context = {"team_id": team_id}
    if week_start is not None:
        context["week_start"] = week_start
    structlog.contextvars.bind_contextvars(**context)


def clear_board_context() -> None:
    structlog.contextvars.unbind_contextvars("team_id", "week_start")


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
