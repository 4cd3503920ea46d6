"""
Structured Logging Configuration
================================

structlog setup shared by the API, the extraction chain and the
recommendation services. Request-scoped fields (request id, session id)
are carried through contextvars so every log line of a request can be
correlated without passing loggers around.
"""

import logging
import sys
from typing import Any

import structlog

from catalog_advisor.config.settings import get_settings


def configure_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    JSON lines are emitted when ``LOG_FORMAT=json`` or when running in
    production; otherwise a colored console renderer is used.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    # httpx logs every request at INFO, which drowns the extraction events
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json" or settings.is_production:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)


def bind_request_context(**fields: Any) -> None:
    """
    Attach fields to every log line emitted by the current request.

    Args:
        **fields: Context such as ``request_id`` or ``session_id``;
            ``None`` values are skipped.
    """
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in fields.items() if value is not None}
    )


def clear_request_context() -> None:
    """Drop all request-scoped log fields."""
    structlog.contextvars.clear_contextvars()
