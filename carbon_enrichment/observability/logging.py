"""Structured logging with correlation ID propagation.

Configures structlog with:
- Automatic correlation ID (batch run id) injection into all log entries
- JSON or console output

Usage:
    import structlog

    from carbon_enrichment.observability.logging import configure_logging

    configure_logging(level="INFO")

    logger = structlog.get_logger()
    logger.info("request_started", url="...")
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from carbon_enrichment.observability.context import get_correlation_id


def add_correlation_id_processor(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds correlation_id to log entries.

    If no correlation ID is set, uses "none".
    """
    corr_id = get_correlation_id()
    event_dict["correlation_id"] = corr_id if corr_id else "none"
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON. If False, use console format.
        add_timestamp: If True, add ISO timestamp to each log entry.

    Example:
        # Production (JSON for log aggregation)
        configure_logging(level="INFO", json_output=True)

        # Development (readable console output)
        configure_logging(level="DEBUG", json_output=False)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_correlation_id_processor,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
