"""structlog configuration and per-message log context."""

from __future__ import annotations

import logging
import sys

import structlog

# Libraries that log every request at INFO through the stdlib logger.
_NOISY_LOGGERS = ("httpx", "httpcore", "anthropic")


def build_processors(json_output: bool = False) -> list:
    """Processor chain shared by both output formats; only the renderer differs."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        *([structlog.processors.format_exc_info] if json_output else []),
        renderer,
    ]


def setup_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Send structlog events to stderr as console lines or JSON objects."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    # Third-party libraries still use stdlib logging
    logging.basicConfig(level=numeric, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))

    structlog.configure(
        processors=build_processors(json_output=fmt == "json"),
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_message_context(chat_id: str, message_id: str, command: str = "") -> None:
    """Tag every log line of the current task with the message being handled."""
    structlog.contextvars.clear_contextvars()
    context = {"chat_id": chat_id, "message_id": message_id}
    if command:
        context["command"] = command
    structlog.contextvars.bind_contextvars(**context)


def clear_message_context() -> None:
    structlog.contextvars.clear_contextvars()
