"""
Structured logging built on structlog wrapping the stdlib `logging` module.

Console rendering in development, JSON lines when LOG_FORMAT=json so that
Railway / Render log drains can index the key/value pairs.

Usage:
    from habitpulse.core.logging import get_logger, setup_logging
    setup_logging()
    log = get_logger(__name__)
    log.info("habit_progress_refreshed", habit_id=3, day="2026-02-21")
"""
from __future__ import annotations

import logging
import sys

import structlog

from habitpulse.core.config import settings


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    if level is None:
        level = settings.LOG_LEVEL
    if json_output is None:
        json_output = settings.log_json

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

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

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
