"""One-shot scheduling at an absolute instant.

Timer backends cap the delay of a single wait. When the target lies
further away than that ceiling, ``At`` waits for the ceiling, then
re-evaluates the remaining delay, until the callback itself can be armed.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable

from croncall.config import settings
from croncall.timers import AsyncioTimers, TimerHandle, Timers
from croncall.types import OWNER, Invocation

logger = logging.getLogger(__name__)


class At:
    """A callback scheduled at a given instant.

    The callback is called as ``callback(context, *args)``; the context
    defaults to the ``At`` instance itself.

    Example:
        at = At(datetime(2030, 1, 1), lambda at: print("Happy new year"))
        ...
        at.abort()
    """

    def __init__(
        self,
        when: datetime,
        callback: Callable[..., Any],
        *,
        context: Any = OWNER,
        args: Iterable[Any] = (),
        timers: Timers | None = None,
        max_delay: float | None = None,
    ) -> None:
        """Schedule the callback.

        Args:
            when: Instant at which the callback runs.
            callback: Function to call.
            context: First argument passed to the callback (defaults to self).
            args: Further positional arguments.
            timers: Clock and timer backend (defaults to asyncio).
            max_delay: Longest single wait in seconds (defaults to settings).

        Raises:
            TypeError: If the callback is not callable.
            ValueError: If max_delay is not positive.
        """
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")

        self._when = when
        self._invocation = Invocation(
            func=callback,
            context=self if context is OWNER else context,
            args=tuple(args),
        )
        self._timers = timers or AsyncioTimers()
        self._max_delay = max_delay if max_delay is not None else settings.get_max_delay()
        if self._max_delay <= 0:
            raise ValueError(f"max_delay must be positive, got {self._max_delay}")
        self._handle: TimerHandle | None = None

        self._schedule()

    def __repr__(self) -> str:
        return f"At({self._when.isoformat()}, pending={self.pending})"

    @property
    def when(self) -> datetime:
        """The scheduled instant."""
        return self._when

    @property
    def pending(self) -> bool:
        """Whether a timer (intermediate or final) is armed."""
        return self._handle is not None

    def run(self) -> Any:
        """Call the callback now.

        Returns:
            Whatever the callback returns.
        """
        return self._invocation()

    def _schedule(self) -> None:
        """Arm the next wait, either the final one or an intermediate step."""
        delay = (self._when - self._timers.now()).total_seconds()
        if delay <= self._max_delay:
            self._handle = self._timers.call_later(max(delay, 0), self._fire)
        else:
            logger.debug(
                f"Target {self._when} is {delay:.0f}s away, "
                f"waiting {self._max_delay:.0f}s before rescheduling"
            )
            self._handle = self._timers.call_later(self._max_delay, self._schedule)

    def _fire(self) -> None:
        self._handle = None
        self.run()

    def abort(self) -> None:
        """Cancel the pending timer, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def schedule_at(
    when: datetime,
    callback: Callable[..., Any],
    *,
    context: Any = OWNER,
    args: Iterable[Any] = (),
    timers: Timers | None = None,
    max_delay: float | None = None,
) -> At:
    """Schedule a callback at an absolute instant.

    Args:
        when: Instant at which the callback runs.
        callback: Function to call as ``callback(context, *args)``.
        context: First argument passed to the callback (defaults to the
            returned handle).
        args: Further positional arguments.
        timers: Clock and timer backend.
        max_delay: Longest single wait in seconds.

    Returns:
        Handle with ``run()`` and ``abort()``.
    """
    return At(
        when,
        callback,
        context=context,
        args=args,
        timers=timers,
        max_delay=max_delay,
    )
