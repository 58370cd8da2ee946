"""
Tests for the notification channel.
"""

from __future__ import annotations

import asyncio

import pytest

from tsdb_console.core import NotificationConfig, NotificationSeverity, NotificationSink
from tsdb_console.notifications import EVENT_DISMISSED, EVENT_SHOWN, NotificationChannel


class TestNotify:
    """Tests for showing notifications."""

    def test_notify_sets_current(self, channel):
        notification = channel.notify("Configuration saved", NotificationSeverity.SUCCESS)
        assert channel.current is notification
        assert notification.severity is NotificationSeverity.SUCCESS
        assert notification.sequence == 1

    def test_default_severity_is_info(self, channel):
        assert channel.notify("hello").severity is NotificationSeverity.INFO

    def test_severity_from_string(self, channel):
        assert channel.notify("boom", "error").severity is NotificationSeverity.ERROR

    def test_unknown_severity_rejected(self, channel):
        with pytest.raises(ValueError):
            channel.notify("huh", "fatal")

    def test_new_notification_supersedes(self, channel):
        """At most one notification is visible; the newest wins."""
        channel.notify("first")
        second = channel.notify("second", NotificationSeverity.ERROR)
        assert channel.current is second
        assert [n.message for n in channel.history] == ["first", "second"]

    def test_to_dict(self, channel):
        data = channel.notify("Instance created", NotificationSeverity.SUCCESS).to_dict()
        assert data["message"] == "Instance created"
        assert data["severity"] == "success"
        assert data["sequence"] == 1
        assert "created_at" in data

    def test_is_a_notification_sink(self, channel):
        assert isinstance(channel, NotificationSink)


class TestDismissal:
    """Tests for removing notifications."""

    def test_lazy_expiry_outside_loop(self, channel, clock):
        channel.notify("Console initialized", NotificationSeverity.SUCCESS)
        clock.advance(2.9)
        assert channel.current is not None
        clock.advance(0.2)
        assert channel.current is None

    def test_superseding_restarts_interval(self, channel, clock):
        channel.notify("first")
        clock.advance(2.0)
        channel.notify("second")
        clock.advance(2.0)
        assert channel.current.message == "second"

    def test_manual_dismiss(self, channel):
        assert not channel.dismiss()
        channel.notify("bye")
        assert channel.dismiss()
        assert channel.current is None

    def test_timer_dismisses_on_running_loop(self):
        channel = NotificationChannel(NotificationConfig(dismiss_after_seconds=0.01))

        async def scenario():
            channel.notify("short-lived")
            assert channel.current is not None
            await asyncio.sleep(0.05)
            return channel.current

        assert asyncio.run(scenario()) is None

    def test_superseded_timer_does_not_dismiss_newer(self):
        channel = NotificationChannel(NotificationConfig(dismiss_after_seconds=0.2))

        async def scenario():
            channel.notify("first")
            await asyncio.sleep(0.12)
            channel.notify("second")
            await asyncio.sleep(0.12)
            return channel.current

        current = asyncio.run(scenario())
        assert current is not None
        assert current.message == "second"


class TestListeners:
    """Tests for notification subscribers."""

    def test_events_in_order(self, channel):
        events = []
        channel.subscribe(lambda event, n: events.append((event, n.message)))

        channel.notify("first")
        channel.notify("second")
        channel.dismiss()

        assert events == [
            (EVENT_SHOWN, "first"),
            (EVENT_DISMISSED, "first"),
            (EVENT_SHOWN, "second"),
            (EVENT_DISMISSED, "second"),
        ]

    def test_unsubscribe(self, channel):
        events = []
        unsubscribe = channel.subscribe(lambda event, n: events.append(event))
        unsubscribe()
        unsubscribe()
        channel.notify("quiet")
        assert events == []

    def test_failing_listener_does_not_break_channel(self, channel):
        def broken(event, notification):
            raise RuntimeError("listener bug")

        channel.subscribe(broken)
        notification = channel.notify("still shown")
        assert channel.current is notification


class TestHistory:
    def test_history_is_bounded(self, clock):
        channel = NotificationChannel(NotificationConfig(history_size=3), clock=clock)
        for i in range(5):
            channel.notify(f"n{i}")
        assert [n.message for n in channel.history] == ["n2", "n3", "n4"]
