"""structlog wiring and the diagnostic events emitted by the package."""

from __future__ import annotations

import logging
import sys
from typing import Literal, Protocol

import structlog

from http_connectivity.status import ConnectionStatus

LOGGER_NAME = "http_connectivity"
_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

EventLevel = Literal["info", "warning"]


class StructuredLogger(Protocol):
    """Logger accepting an event name plus keyword fields."""

    def info(self, event: str, **kwargs: object) -> None: ...

    def warning(self, event: str, **kwargs: object) -> None: ...


AnyLogger = (
    StructuredLogger | logging.Logger | logging.LoggerAdapter[logging.Logger]
)

_STATUS_EVENTS: dict[ConnectionStatus, tuple[EventLevel, str]] = {
    ConnectionStatus.CONNECTED: ("info", "connectivity.status.connected"),
    ConnectionStatus.DISCONNECTED: ("warning", "connectivity.status.disconnected"),
    ConnectionStatus.UNKNOWN: ("info", "connectivity.status.unknown"),
}


def get_log_level_value(level: str) -> int:
    """Return the stdlib level constant for a level name."""
    normalized = level.strip().upper()
    if normalized not in _LEVEL_NAMES:
        raise ValueError(f"log_level must be one of: {', '.join(sorted(_LEVEL_NAMES))}")
    return logging.getLevelName(normalized)


def get_logger(name: str = LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def log_event(
    logger: AnyLogger, level: EventLevel, event: str, **fields: object
) -> None:
    """Emit one event on a structlog logger or a stdlib logger.

    Stdlib loggers receive the fields as ``extra`` record attributes.
    """
    method = getattr(logger, level)
    if isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        method(event, extra=fields)
    else:
        method(event, **fields)


def log_status_report(logger: AnyLogger, status: ConnectionStatus) -> None:
    """Emit the event for one reported status; disconnects log at warning."""
    level, event = _STATUS_EVENTS[status]
    log_event(logger, level, event, status=str(status))


def _select_renderer() -> structlog.types.Processor:
    if sys.stderr.isatty():
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_structlog(*, log_level: str) -> structlog.stdlib.BoundLogger:
    """Route structlog and stdlib records through one stderr handler.

    Host applications that already configure logging should skip this and
    only make sure the ``http_connectivity`` logger is enabled.
    """
    level_value = get_log_level_value(log_level)
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        timestamper,
    ]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _select_renderer(),
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logging.basicConfig(
        format="%(message)s",
        handlers=[handler],
        level=level_value,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return get_logger()
