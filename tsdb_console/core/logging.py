"""
Logging setup for the console controller.

Every module takes its logger from ``get_logger(__name__)``. Controller and
API events are written through ``log_event`` so each line starts with an
``EventType`` and the view, endpoint or config key it concerns::

    LOAD_FAILED - cluster: HTTP 503: Service Unavailable [seq=4]
"""

from __future__ import annotations

import logging
import sys
from types import TracebackType
from typing import Any

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "logger": "%(name)s", '
    '"level": "%(levelname)s", "message": "%(message)s"}'
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library loggers and the level they are held at
QUIET_LOGGERS: dict[str, int] = {
    "urllib3": logging.ERROR,
    "requests": logging.WARNING,
    # Request lines are logged by ConsoleAccessLogMiddleware
    "uvicorn.access": logging.WARNING,
}

_configured: bool = False


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: int | str = logging.INFO,
    verbose: bool = False,
    json_format: bool = False,
) -> None:
    """Configure the root logger once at startup.

    Args:
        level: Level as a number or a name such as "WARNING". Unknown
            names fall back to INFO.
        verbose: Force DEBUG regardless of ``level``.
        json_format: Emit one JSON object per line.
    """
    global _configured

    logging.basicConfig(
        level=logging.DEBUG if verbose else _resolve_level(level),
        format=JSON_FORMAT if json_format else TEXT_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name, library_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(library_level)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a named logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


class LogContext:
    """Temporarily run one or more loggers at a different level.

    Usage:
        with LogContext(logging.DEBUG, "tsdb_console.api", "tsdb_console.controller"):
            await controller.switch_section("cluster")

    With no names the root logger is adjusted.
    """

    def __init__(self, level: int | str, *logger_names: str) -> None:
        self.level = _resolve_level(level)
        self.logger_names = logger_names or ("",)
        self._saved: dict[str, int] = {}

    def __enter__(self) -> LogContext:
        for name in self.logger_names:
            logger = logging.getLogger(name or None)
            self._saved[name] = logger.level
            logger.setLevel(self.level)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        for name, saved_level in self._saved.items():
            logging.getLogger(name or None).setLevel(saved_level)
        self._saved.clear()


def log_event(
    logger: logging.Logger,
    level: int,
    event_type: str,
    scope: str,
    message: str,
    **kwargs: Any,
) -> None:
    """Write one structured event line.

    Args:
        logger: Logger to write to.
        level: Logging level.
        event_type: One of the ``EventType`` names.
        scope: View, endpoint or config key the event concerns.
        message: Human-readable detail.
        **kwargs: Extra fields appended as ``[key=value ...]``.
    """
    if not logger.isEnabledFor(level):
        return
    line = f"{event_type} - {scope}: {message}"
    if kwargs:
        line += " [" + " ".join(f"{k}={v}" for k, v in kwargs.items()) + "]"
    logger.log(level, line)


class EventType:
    """Event names used with ``log_event``."""

    # Navigation
    SECTION_SWITCHED = "SECTION_SWITCHED"
    SECTION_UNKNOWN = "SECTION_UNKNOWN"
    TAB_SWITCHED = "TAB_SWITCHED"

    # View loads
    LOAD_STARTED = "LOAD_STARTED"
    LOAD_COMPLETE = "LOAD_COMPLETE"
    LOAD_FAILED = "LOAD_FAILED"
    LOAD_DISCARDED = "LOAD_DISCARDED"

    # Writes
    CONFIG_SAVED = "CONFIG_SAVED"
    CONFIG_SAVE_FAILED = "CONFIG_SAVE_FAILED"
    INSTANCE_ACTION = "INSTANCE_ACTION"
    INSTANCE_ACTION_FAILED = "INSTANCE_ACTION_FAILED"

    # Transport
    API_CALL_FAILED = "API_CALL_FAILED"

    # Web front
    REQUEST = "REQUEST"

    NOTIFICATION = "NOTIFICATION"
