"""Clock and timer backends.

The scheduling code only needs two things from its host: the current local
time and a way to run a callback after a delay. ``AsyncioTimers`` provides
both on top of an asyncio event loop.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Protocol


class TimerHandle(Protocol):
    """A pending callback that can be cancelled."""

    def cancel(self) -> None: ...


class Timers(Protocol):
    """Clock plus single-shot timer primitive."""

    def now(self) -> datetime:
        """Get the current local wall-clock time."""
        ...

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds."""
        ...


class AsyncioTimers:
    """Timers backed by an asyncio event loop.

    Callbacks run on the loop thread; an exception raised by a callback goes
    to the loop's exception handler.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the backend.

        Args:
            loop: Event loop to use. Defaults to the loop running when the
                first timer is armed.
        """
        self._loop = loop

    def now(self) -> datetime:
        return datetime.now()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
