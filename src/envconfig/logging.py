"""
Structured logging for envconfig.

The engine itself only emits debug events (``record_compiled``,
``field_fallback``...).  Applications that want envconfig's output in the
same shape as the rest of their services call :func:`configure_logging` once
at startup; without arguments it reads :class:`~envconfig.settings.EnvConfigSettings`.
Until then events go to stdlib loggers named after the envconfig modules and
follow whatever the host application does with stdlib logging.

Examples:
    >>> from envconfig.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.debug("record_compiled", record="ServerConfig", fields=3)

Tags:
    logging, structlog, observability, envconfig
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from contextvars import Token
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from envconfig.settings import get_settings

# Store service name for metadata
_SERVICE_NAME = "envconfig"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to ``ENVCONFIG_LOG_LEVEL``
        json_format: True for JSON, False for console, None for the
            ``ENVCONFIG_LOG_FORMAT`` setting (``auto`` means JSON if not a tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    settings = get_settings()
    level = (level or settings.log_level).upper()
    _SERVICE_NAME = service or settings.service_name

    if json_format is None:
        json_format = settings.json_logs
    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually called with ``__name__``).

    The logger always sits on top of the stdlib logger of the same name, so
    until the application configures logging, envconfig's debug events are
    dropped by the stdlib level check instead of printed.
    """
    return structlog.wrap_logger(logging.getLogger(name))


class LogContext:
    """Context manager for scoped logging context.

    Binds its keys as structlog contextvars on entry and restores whatever
    those keys held before on exit.  ``RecordParser.parse`` uses it to tag
    every event of one parse with the record name.

    Example:
        with LogContext(record="ServerConfig"):
            outcome = parser.parse(cfg)
            outcome.log()
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._tokens: Mapping[str, Token[Any]] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)


__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
]
