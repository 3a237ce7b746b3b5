"""Shared fixtures for Route Globe Monitor tests."""

import pytest

from routeglobe.api_clients import FetchResult
from routeglobe.models import RouteRecord


class FakeTimerHandle:
    """Timer handle compatible with asyncio.TimerHandle for tests."""

    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def cancelled(self):
        return self._cancelled


class FakeLoop:
    """Manually advanced clock exposing call_later like an event loop."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        handle = FakeTimerHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self.handles if not h.cancelled()]

    def advance(self, seconds):
        """Advance the clock, firing due callbacks in time order."""
        target = self.now + seconds
        while True:
            due = [h for h in self.pending() if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.handles.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target


class FakeFetcher:
    """Route event source returning queued results."""

    def __init__(self, total=0, records=None, error=None):
        self.total = total
        self.records = records or []
        self.error = error
        self.count_calls = 0
        self.latest_calls = []

    async def get_total_count(self):
        self.count_calls += 1
        if self.error is not None:
            return FetchResult(0, self.error)
        return FetchResult(self.total)

    async def fetch_latest(self, n):
        self.latest_calls.append(n)
        if self.error is not None:
            return FetchResult([], self.error)
        return FetchResult(list(self.records[:n]))


def make_record(index, origin=(10, 20), dest=(None, None), timestamp=None):
    return RouteRecord(
        origin_lat=origin[0],
        origin_lng=origin[1],
        dest_lat=dest[0],
        dest_lng=dest[1],
        timestamp=timestamp,
        sequence_index=index,
    )


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def sample_records():
    """Newest first: an arc, a point, a dropped record and an arc."""
    return [
        make_record(1, (52.52, 13.405), (48.1351, 11.582)),
        make_record(2, (10, 20), ("abc", 30)),
        make_record(3, ("NaN", 5), (1, 2)),
        make_record(4, ("40.7128", "-74.0060"), ("34.0522", "-118.2437")),
    ]
