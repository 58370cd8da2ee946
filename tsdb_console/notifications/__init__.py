"""
Notifications module - transient user messages with auto-dismissal.
"""

from tsdb_console.notifications.channel import (
    EVENT_DISMISSED,
    EVENT_SHOWN,
    Notification,
    NotificationChannel,
)

__all__ = [
    "EVENT_DISMISSED",
    "EVENT_SHOWN",
    "Notification",
    "NotificationChannel",
]
