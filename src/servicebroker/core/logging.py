"""Structured logging for the broker built on top of :mod:`structlog`."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars
from structlog.typing import Processor

from .settings import get_settings

# Every record carries these keys, ``None`` when not bound.
_BROKER_FIELDS: tuple[str, ...] = (
    "request_id",
    "path",
    "method",
    "status_code",
    "duration_ms",
    "component",
    "operation",
    "service_instance_id",
)

_configured_level: int | None = None


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if isinstance(value, int):
        return value
    raise ValueError(f"Invalid log level: {level!r}")


def _add_broker_fields(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for field in _BROKER_FIELDS:
        event_dict.setdefault(field, None)
    return event_dict


def _processors() -> list[Processor]:
    return [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.EventRenamer("message"),
        _add_broker_fields,
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(level: str | int | None = None) -> None:
    """Configure JSON logging at ``level`` (default: ``LOG_LEVEL``).

    Repeated calls with the level already in effect are no-ops; a different
    level reconfigures structlog and the root logger.
    """

    global _configured_level
    level_value = _resolve_level(level or get_settings().log_level)
    if level_value == _configured_level:
        return

    logging.basicConfig(format="%(message)s", level=level_value, stream=sys.stdout, force=True)
    structlog.configure(
        cache_logger_on_first_use=False,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        processors=_processors(),
    )
    _configured_level = level_value


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger bound to ``name``."""

    if _configured_level is None:
        configure_logging()
    return structlog.get_logger(name)


def bind_operation_context(operation: str, service_instance_id: str | None) -> None:
    """Attach the broker operation being served to every log record of the request."""

    bind_contextvars(operation=operation, service_instance_id=service_instance_id)


request_logger = get_logger("servicebroker.request")

__all__ = [
    "bind_operation_context",
    "configure_logging",
    "get_logger",
    "request_logger",
]
