"""Recurring tasks driven by cron expressions.

A CronTask owns one or more cron expressions and a callback. While active it
keeps exactly one timer armed for the earliest next run; when that timer
fires, the task arms the following run before calling the callback, so a
callback that raises never stops the schedule.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable

from croncall.at import At
from croncall.config import settings
from croncall.expression import CronExpression
from croncall.timers import AsyncioTimers, Timers
from croncall.types import OWNER, Invocation

logger = logging.getLogger(__name__)


class CronTask:
    """A callback run at every instant matched by its cron expressions.

    The callback is called as ``callback(context, *args)``; the context
    defaults to the task itself.

    Example:
        async def main():
            task = CronTask("0 9 * * mon-fri", lambda task: print("Morning!"))
            ...
            task.stop()
    """

    def __init__(
        self,
        patterns: str | Iterable[str],
        callback: Callable[..., Any],
        *,
        active: bool | None = None,
        context: Any = OWNER,
        args: Iterable[Any] = (),
        timers: Timers | None = None,
        random: Callable[[], float] | None = None,
        max_delay: float | None = None,
    ) -> None:
        """Create the task.

        Args:
            patterns: One cron pattern or a list of patterns. An empty list
                gives a task that never fires on schedule.
            callback: Function to call.
            active: Whether to arm the task immediately (defaults to
                settings.active_by_default).
            context: First argument passed to the callback (defaults to self).
            args: Further positional arguments.
            timers: Clock and timer backend (defaults to asyncio).
            random: Uniform [0, 1) source for '~' forms.
            max_delay: Longest single wait in seconds (defaults to settings).

        Raises:
            TypeError: If patterns is not a string or an iterable of strings,
                or if the callback is not callable.
            CronSyntaxError: If a pattern is malformed.
            CronRangeError: If a pattern has a value out of range.
            ValueError: If max_delay is not positive.
        """
        if isinstance(patterns, str):
            patterns = [patterns]
        else:
            try:
                patterns = list(patterns)
            except TypeError:
                raise TypeError(
                    f"patterns must be a string or a list of strings, "
                    f"got {type(patterns).__name__}"
                ) from None
            for pattern in patterns:
                if not isinstance(pattern, str):
                    raise TypeError(
                        f"patterns must be strings, got {type(pattern).__name__}"
                    )
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        if max_delay is not None and max_delay <= 0:
            raise ValueError(f"max_delay must be positive, got {max_delay}")

        self._timers = timers or AsyncioTimers()
        now = self._timers.now()
        self._expressions = tuple(
            CronExpression(pattern, now=now, random=random) for pattern in patterns
        )
        self._invocation = Invocation(
            func=callback,
            context=self if context is OWNER else context,
            args=tuple(args),
        )
        self._max_delay = max_delay
        self._active = False
        self._timer: At | None = None

        if settings.active_by_default if active is None else active:
            self.start()

    def __repr__(self) -> str:
        patterns = [e.pattern for e in self._expressions]
        return f"CronTask({patterns!r}, active={self._active})"

    @property
    def expressions(self) -> tuple[CronExpression, ...]:
        """The parsed expressions."""
        return self._expressions

    @property
    def active(self) -> bool:
        """Whether the task is scheduled."""
        return self._active

    @active.setter
    def active(self, value: bool) -> None:
        if value:
            self.start()
        else:
            self.stop()

    @property
    def pending(self) -> bool:
        """Whether a timer is currently armed."""
        return self._timer is not None and self._timer.pending

    def run(self) -> Any:
        """Call the callback now, outside the schedule.

        Returns:
            Whatever the callback returns.
        """
        return self._invocation()

    def _schedule(self, after: datetime | None = None) -> None:
        """Arm a timer for the next run.

        Args:
            after: Instant the next run must follow, when later than now.
        """
        start = self._timers.now()
        if after is not None and after > start:
            start = after
        when = self.next(start)
        if when is None:
            logger.debug(f"{self!r} has no expression, nothing to schedule")
            self._timer = None
            return

        logger.debug(f"Scheduling {self!r} at {when}")
        self._timer = At(
            when,
            self._fire,
            timers=self._timers,
            max_delay=self._max_delay,
        )

    def _fire(self, timer: At) -> None:
        """Re-arm, then call the callback."""
        # The loop clock may fire slightly ahead of the wall clock.
        self._schedule(after=timer.when)
        self.run()

    def start(self) -> bool:
        """Activate the task.

        Returns:
            True if the task was activated, False if it was already active.
        """
        if self._active:
            return False

        self._active = True
        self._schedule()
        logger.info(f"Started {self!r}")
        return True

    def stop(self) -> bool:
        """Deactivate the task.

        Returns:
            True if the task was deactivated, False if it was already inactive.
        """
        if not self._active:
            return False

        if self._timer is not None:
            self._timer.abort()
            self._timer = None
        self._active = False
        logger.info(f"Stopped {self!r}")
        return True

    def test(self, instant: datetime | None = None) -> bool:
        """Check whether any expression matches an instant.

        Args:
            instant: Instant to test (defaults to the backend's now).

        Returns:
            True if at least one expression matches.
        """
        instant = instant or self._timers.now()
        return any(e.test(instant) for e in self._expressions)

    def next(self, start: datetime | None = None) -> datetime | None:
        """Compute the earliest next run over all expressions.

        Args:
            start: Start instant (defaults to the backend's now).

        Returns:
            The next run, or None when the task has no expression.
        """
        if not self._expressions:
            return None
        start = start or self._timers.now()
        return min(e.next(start) for e in self._expressions)
