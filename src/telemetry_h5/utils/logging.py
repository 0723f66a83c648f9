"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structlog for a conversion run.

    Events are printed to stderr; stdout only carries the CLI summary.
    Filtering happens in the bound logger, the stdlib logging tree is not used.

    Args:
        level: One of LOG_LEVELS.
        json_output: If True, emit one JSON object per event.
    """
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a logger; the module name is attached to every event as `logger`."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger=name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind values to every event logged inside the block.

    Example:
        with log_context(namespace=0):
            log.info("Writing dataset", name="s3p.activity")
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
