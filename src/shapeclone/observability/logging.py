"""
Logging setup for the ``shapeclone`` logger tree.

structlog events from the registry and plain ``logging`` records share one
handler. Both pass through the same processor chain (level, logger name, UTC
timestamp) and are rendered by ``structlog.stdlib.ProcessorFormatter``: one
JSON object per line for ``log_format = "json"``, a console line for
``"text"``.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Mapping
from typing import IO, Any, Final

import structlog

_ROOT_LOGGER: Final[str] = "shapeclone"

_lock = threading.Lock()
_installed: logging.Handler | None = None


def _shared_processors() -> list[Any]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]


def _build_formatter(log_format: str) -> logging.Formatter:
    renderer: Any
    if log_format == "text":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    stream: IO[str] | None = None,
    logger_name: str = _ROOT_LOGGER,
) -> logging.Logger:
    """Install the handler described by an ``[observability]`` mapping.

    Calling it again replaces the previous handler. ``stream`` defaults to
    ``sys.stderr`` so stdout stays free for command output.
    """

    settings = dict(observability_config or {})
    level = _level_number(settings.get("log_level", "INFO"))

    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(_build_formatter(str(settings.get("log_format", "json"))))

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    global _installed
    with _lock:
        previous, _installed = _installed, handler
        if previous is not None:
            logger.removeHandler(previous)
            previous.close()
        logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return logger


def shutdown_logging(logger_name: str = _ROOT_LOGGER) -> None:
    """Remove the handler installed by ``setup_logging`` and reset structlog."""

    global _installed
    with _lock:
        handler, _installed = _installed, None
    if handler is None:
        return
    logging.getLogger(logger_name).removeHandler(handler)
    handler.close()
    structlog.reset_defaults()


def _level_number(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    name = str(value).strip().upper()
    number = logging.getLevelNamesMapping().get(name)
    if number is None:
        raise ValueError(f"unsupported logging level {value!r}")
    return number


__all__ = ["setup_logging", "shutdown_logging"]
