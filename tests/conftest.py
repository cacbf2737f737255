from typing import List

import pytest

from uptime_monitor.alerts import AlertEvent, NotificationSink


class RecordingSink(NotificationSink):
    """Keeps every event it is handed."""

    def __init__(self, fail: bool = False, raises: bool = False):
        self.events: List[AlertEvent] = []
        self.fail = fail
        self.raises = raises
        self.closed = False

    def notify(self, event):
        if self.raises:
            raise ConnectionError("sink exploded")
        if self.fail:
            return False
        self.events.append(event)
        return True

    def close(self):
        self.closed = True


@pytest.fixture
def make_sink():
    """Factory for RecordingSink; pass fail=True or raises=True for a broken one."""
    return RecordingSink


@pytest.fixture
def sink(make_sink):
    return make_sink()
