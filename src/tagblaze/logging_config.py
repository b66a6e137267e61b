"""Structured logging setup.

Configures structlog with a processor chain that merges contextvars
(request_id is bound by RequestIdMiddleware), stamps level and ISO time,
and renders either JSON (production/log aggregation) or colored console
output (development).
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        fmt: "json" for machine-readable output, anything else for console.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
