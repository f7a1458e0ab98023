"""Structured logging for the mapping layer.

Key Responsibilities:
    - Route the mappers' structlog events through the ``tracker_query``
      stdlib logger as single line JSON
    - Redact configured fields before rendering
    - Carry a request correlation identifier into every event and span

Collaborators:
    - Upstream: Host entry-points call :func:`configure_logging` once at
      startup and bind a correlation ID per request
    - Downstream: ``tracker_query.mapping`` obtains loggers through
      :func:`get_logger` and reads :func:`get_correlation_id` for span
      attributes

Side Effects:
    - Configures structlog globally and attaches a stdout handler to the
      ``tracker_query`` logger
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from contextvars import ContextVar, Token
from typing import Any, Callable

import structlog

from tracker_query.config.settings import LoggingSettings, get_settings

PACKAGE_LOGGER = "tracker_query"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def _scrubber(
    scrub_fields: Iterable[str],
) -> Callable[[Any, str, dict[str, Any]], dict[str, Any]]:
    """Create a processor replacing the values of ``scrub_fields`` with ``***``."""
    lower_fields = {field.lower() for field in scrub_fields}

    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key in list(event_dict):
            if key.lower() in lower_fields:
                event_dict[key] = "***"
        return event_dict

    return processor


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Configure structlog and the package logger.

    Args:
        settings: Logging settings; defaults to ``get_settings().logging`` so
            ``TQ_ENV`` presets apply.
    """
    settings = settings or get_settings().logging
    level = getattr(logging, settings.level.upper(), logging.INFO)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _scrubber(settings.scrub_fields),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def bind_correlation_id(value: str) -> Token[str | None]:
    """Bind a correlation identifier to the current execution context.

    Returns:
        Context variable token used to restore the previous value.
    """
    token = _correlation_id.set(value)
    structlog.contextvars.bind_contextvars(correlation_id=value)
    return token


def reset_correlation_id(token: Token[str | None] | None) -> None:
    if token is not None:
        _correlation_id.reset(token)
    structlog.contextvars.unbind_contextvars("correlation_id")


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def get_logger(name: str) -> Any:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


__all__ = [
    "PACKAGE_LOGGER",
    "bind_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "reset_correlation_id",
]
