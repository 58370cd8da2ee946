"""
Transient, severity-tagged user notifications.

At most one notification is visible. A new one supersedes the current one
immediately, and each removes itself after a fixed interval (3 seconds by
default) unless superseded first. Removal is scheduled on the running
event loop; outside a loop the interval is enforced lazily when
``current`` is read.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tsdb_console.core.config import NotificationConfig, get_config
from tsdb_console.core.constants import NotificationSeverity
from tsdb_console.core.logging import EventType, get_logger, log_event

logger = get_logger(__name__)

NotificationListener = Callable[[str, "Notification"], None]

EVENT_SHOWN = "shown"
EVENT_DISMISSED = "dismissed"

_LOG_LEVELS = {
    NotificationSeverity.INFO: logging.INFO,
    NotificationSeverity.SUCCESS: logging.INFO,
    NotificationSeverity.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notification:
    """A single user-facing message."""

    message: str
    severity: NotificationSeverity
    created_at: datetime = field(default_factory=datetime.now)
    sequence: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "created_at": self.created_at.isoformat(),
            "sequence": self.sequence,
        }


class NotificationChannel:
    """Single-slot notification display with auto-dismissal."""

    def __init__(
        self,
        config: NotificationConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or get_config().notifications
        self._clock = clock
        self._current: Notification | None = None
        self._shown_at: float | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._listeners: list[NotificationListener] = []
        self._history: deque[Notification] = deque(maxlen=max(1, self._config.history_size))
        self._sequence = 0

    @property
    def dismiss_after_seconds(self) -> float:
        return self._config.dismiss_after_seconds

    @property
    def current(self) -> Notification | None:
        """The visible notification, if any."""
        if self._current is not None and self._shown_at is not None:
            if self._clock() - self._shown_at >= self._config.dismiss_after_seconds:
                self._clear()
        return self._current

    @property
    def history(self) -> list[Notification]:
        """Recently emitted notifications, oldest first."""
        return list(self._history)

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        """Register a listener called with (event, notification).

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self,
        message: str,
        severity: NotificationSeverity | str = NotificationSeverity.INFO,
    ) -> Notification:
        """Show a message, replacing whatever is currently displayed."""
        severity = NotificationSeverity(severity)

        if self._current is not None:
            self._clear()

        self._sequence += 1
        notification = Notification(message=message, severity=severity, sequence=self._sequence)
        self._current = notification
        self._shown_at = self._clock()
        self._history.append(notification)

        log_event(logger, _LOG_LEVELS[severity], EventType.NOTIFICATION, severity.value, message)
        self._emit(EVENT_SHOWN, notification)
        self._schedule_dismissal(notification)
        return notification

    def dismiss(self) -> bool:
        """Remove the visible notification. Returns False if none was shown."""
        if self._current is None:
            return False
        self._clear()
        return True

    def _schedule_dismissal(self, notification: Notification) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.call_later(
            self._config.dismiss_after_seconds, self._expire, notification
        )

    def _expire(self, notification: Notification) -> None:
        if self._current is notification:
            self._clear()

    def _clear(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        previous = self._current
        self._current = None
        self._shown_at = None
        if previous is not None:
            self._emit(EVENT_DISMISSED, previous)

    def _emit(self, event: str, notification: Notification) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, notification)
            except Exception:
                logger.exception(f"Notification listener failed on {event}")
