"""Structured JSON logging configuration using structlog."""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from url_manager.config import settings


def component_processor(component: str) -> Processor:
    """Stamp every event with the process that emitted it.

    The API, the visit worker and the maintenance scripts share one log
    stream, so events such as ``redirect_target_dangling`` need to say where
    they came from.
    """

    def add_component(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", settings.app_name)
        event_dict.setdefault("component", component)
        return event_dict

    return add_component


def setup_logging(component: str = "api", log_level: str | None = None) -> None:
    """Configure structured logging for the application.

    Uses JSON format in production, colored console output in development.
    ``component`` is "api", "visit-worker" or the script name.
    """
    # Shared processors for all environments
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        # Production: JSON format for log aggregation, tagged per process
        processors: list[Processor] = [
            *shared_processors,
            component_processor(component),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # Development: Colored console output
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    # Configure structlog
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level or settings.log_level),
    )

    # Silence noisy loggers: the catch-all route makes uvicorn's access log
    # one line per page view
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if settings.database_echo else logging.WARNING
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Usage:
        from url_manager.core.logging import get_logger

        logger = get_logger(__name__)
        logger.info("redirect_created", slug="old", redirect_to="new", code=301)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent log messages.

    Useful for request-scoped context like request_id, or the url_id a
    visit worker is currently counting.

    Usage:
        bind_context(request_id=request_id)
        logger.warning("redirect_target_dangling", slug=slug)  # Includes request_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables.

    Call at the end of request processing.
    """
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    """Remove specific keys from context."""
    structlog.contextvars.unbind_contextvars(*keys)
