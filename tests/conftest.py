"""Shared fixtures for croncall tests."""

import heapq
import itertools
from datetime import datetime, timedelta
from typing import Any, Callable

import pytest


class FakeHandle:
    """Timer handle recorded by FakeTimers."""

    def __init__(self, when: datetime, delay: float, callback: Callable[[], Any]) -> None:
        self.when = when
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """Deterministic clock and timer backend.

    Time only moves through advance(); due callbacks run in order, with the
    clock set to their due time.
    """

    def __init__(self, now: datetime) -> None:
        self._now = now
        self._queue: list[tuple[datetime, int, FakeHandle]] = []
        self._counter = itertools.count()
        self.handles: list[FakeHandle] = []

    def now(self) -> datetime:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], Any]) -> FakeHandle:
        handle = FakeHandle(self._now + timedelta(seconds=delay), delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        self.handles.append(handle)
        return handle

    @property
    def delays(self) -> list[float]:
        """Delays of every timer armed so far."""
        return [h.delay for h in self.handles]

    @property
    def pending(self) -> list[FakeHandle]:
        """Timers armed and not yet fired nor cancelled."""
        return [h for _, _, h in self._queue if not h.cancelled]

    def advance(self, **kwargs: float) -> None:
        """Move the clock forward, running every timer that becomes due."""
        target = self._now + timedelta(**kwargs)
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = when
            handle.callback()
        self._now = target


@pytest.fixture
def fake_timers() -> FakeTimers:
    """Fake timers starting at 2000-01-01 00:00."""
    return FakeTimers(datetime(2000, 1, 1))


class SequenceRandom:
    """Random source returning a fixed sequence of draws."""

    def __init__(self, *draws: float) -> None:
        self._draws = list(draws)
        self.calls = 0

    def __call__(self) -> float:
        value = self._draws[self.calls]
        self.calls += 1
        return value


@pytest.fixture
def draws() -> Callable[..., SequenceRandom]:
    """Factory for deterministic random sources."""
    return SequenceRandom
