"""
Structured logging configuration for dealgraph.

Uses structlog with plain console output for development and JSON
output for production. Logs go to stderr so command output on stdout
stays machine-readable.
"""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger, Processor

from dealgraph.config import get_settings


def _stderr_logger_factory(*args) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(
    json_output: bool | None = None,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, output JSON logs. Defaults to settings.json_logs.
        log_level: Override log level (defaults to settings.log_level)
    """
    settings = get_settings()
    if json_output is None:
        json_output = settings.json_logs
    level = log_level or settings.log_level
    level_num = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
