"""Structured logging with correlation IDs.

This module configures structlog for structured JSON logging with
correlation ID tracking for request tracing.
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from docgate.core.config import Settings, get_settings


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add correlation ID to log entry if present in context.

    Args:
        logger: Logger instance (unused).
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with correlation_id.
    """
    # Bound by the request middleware; standalone entries get a throwaway one
    if "correlation_id" not in event_dict:
        event_dict["correlation_id"] = f"cid_{uuid.uuid4().hex[:12]}"
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log entry.

    Args:
        logger: Logger instance.
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with logger name.
    """
    event_dict["logger"] = logger.name if hasattr(logger, "name") else "docgate"
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' field to 'message' for compatibility."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON formatting for production and
    console formatting for development.

    Args:
        settings: Optional settings instance. If not provided, will load from environment.
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_id,
    ]

    if settings.is_development or settings.log_format == "console":
        renderer: Processor = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
        cache_logger = False
    else:
        shared_processors.append(rename_message_field)
        renderer = structlog.processors.JSONRenderer()
        cache_logger = True

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=cache_logger,
    )

    # Standard logging for third-party libraries (uvicorn, sqlalchemy)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logging.getLogger(logger_name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If not provided, uses 'docgate'.

    Returns:
        BoundLogger: Configured structured logger instance.
    """
    return structlog.get_logger(name or "docgate")


def bind_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current logging context.

    Args:
        correlation_id: The correlation ID to bind to the context.
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Clear all context variables from the current logging context.

    Called at the end of a request so context doesn't leak between requests.
    """
    structlog.contextvars.clear_contextvars()
