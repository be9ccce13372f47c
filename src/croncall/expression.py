"""Cron expression matching and next-run computation.

``CronExpression.next()`` walks the columns from the finest to the coarsest.
Each step keeps the candidate when its column already matches; otherwise it
moves to the next allowed value of that column, resets every finer column to
its minimum, and carries into the coarser column when no larger value exists.
"""

import calendar
import logging
from datetime import datetime, timedelta
from typing import Callable

from croncall.field import CronField
from croncall.parse import CronFields, parse

logger = logging.getLogger(__name__)


def _weekday(date: datetime) -> int:
    """Day of week with Sunday as 0."""
    return date.isoweekday() % 7


def _days_in_month(date: datetime) -> int:
    return calendar.monthrange(date.year, date.month)[1]


def _first_of_next_month(date: datetime) -> datetime:
    if date.month == 12:
        return date.replace(year=date.year + 1, month=1, day=1)
    return date.replace(month=date.month + 1, day=1)


class CronExpression:
    """A parsed cron expression.

    Example:
        cron = CronExpression("*/15 9-17 * * mon-fri")
        cron.test(datetime(2000, 1, 3, 9, 30))   # True
        cron.next(datetime(2000, 1, 3, 17, 45))  # 2000-01-04 09:00
    """

    def __init__(
        self,
        pattern: str,
        *,
        now: datetime | None = None,
        random: Callable[[], float] | None = None,
    ) -> None:
        """Parse the pattern.

        Args:
            pattern: The cron pattern.
            now: Instant substituted for '?' bounds.
            random: Uniform [0, 1) source for '~' forms.

        Raises:
            CronSyntaxError: If the pattern is malformed.
            CronRangeError: If a value is out of range.
        """
        self._pattern = pattern
        self._fields = parse(pattern, now=now, random=random)

    def __repr__(self) -> str:
        return f"CronExpression({self._pattern!r})"

    @property
    def pattern(self) -> str:
        """The pattern as given."""
        return self._pattern

    @property
    def fields(self) -> CronFields:
        """The normalized columns."""
        return self._fields

    @property
    def seconds(self) -> CronField:
        return self._fields.seconds

    @property
    def minutes(self) -> CronField:
        return self._fields.minutes

    @property
    def hours(self) -> CronField:
        return self._fields.hours

    @property
    def date(self) -> CronField:
        return self._fields.date

    @property
    def month(self) -> CronField:
        return self._fields.month

    @property
    def day(self) -> CronField:
        return self._fields.day

    def test(self, instant: datetime | None = None) -> bool:
        """Check whether an instant matches the expression.

        When both the day of month and the day of week are restricted, a
        match on either one is enough; otherwise both must match.

        Args:
            instant: Instant to test (defaults to now).

        Returns:
            True if the instant matches.
        """
        instant = instant or datetime.now()
        f = self._fields

        if (
            not f.seconds.test(instant.second)
            or not f.minutes.test(instant.minute)
            or not f.hours.test(instant.hour)
            or not f.month.test(instant.month - 1)
        ):
            return False

        if f.date.restricted and f.day.restricted:
            return f.date.test(instant.day) or f.day.test(_weekday(instant))

        return f.date.test(instant.day) and f.day.test(_weekday(instant))

    def next(self, start: datetime | None = None) -> datetime:
        """Compute the first matching instant strictly after ``start``.

        Args:
            start: Start instant (defaults to now). Sub-second precision is
                dropped.

        Returns:
            The next matching instant, with zero microseconds.
        """
        start = start or datetime.now()
        date = start.replace(microsecond=0) + timedelta(seconds=1)

        date = self._next_seconds(date)
        date = self._next_minutes(date)
        date = self._next_hours(date)
        date = self._next_date_day(date)
        date = self._next_month(date)

        logger.debug(f"Next run of {self._pattern!r} after {start}: {date}")
        return date

    def _next_seconds(self, start: datetime) -> datetime:
        seconds = self._fields.seconds
        if seconds.test(start.second):
            return start

        following = seconds.next(start.second)
        if following is None:
            return start.replace(second=seconds.min) + timedelta(minutes=1)
        return start.replace(second=following)

    def _next_minutes(self, start: datetime) -> datetime:
        minutes = self._fields.minutes
        if minutes.test(start.minute):
            return start

        date = start.replace(second=self._fields.seconds.min)
        following = minutes.next(date.minute)
        if following is None:
            return date.replace(minute=minutes.min) + timedelta(hours=1)
        return date.replace(minute=following)

    def _next_hours(self, start: datetime) -> datetime:
        hours = self._fields.hours
        if hours.test(start.hour):
            return start

        date = start.replace(
            minute=self._fields.minutes.min,
            second=self._fields.seconds.min,
        )
        following = hours.next(date.hour)
        if following is None:
            return date.replace(hour=hours.min) + timedelta(days=1)
        return date.replace(hour=following)

    def _reset_time(self, date: datetime) -> datetime:
        return date.replace(
            hour=self._fields.hours.min,
            minute=self._fields.minutes.min,
            second=self._fields.seconds.min,
        )

    def _next_date(self, start: datetime) -> datetime:
        """Advance to the next allowed day of month, skipping short months."""
        date_field = self._fields.date
        if date_field.test(start.day):
            return start

        date = self._reset_time(start)
        day = date.day
        while True:
            following = date_field.next(day)
            if following is not None and following <= _days_in_month(date):
                return date.replace(day=following)
            date = _first_of_next_month(date)
            day = 0

    def _next_day(self, start: datetime) -> datetime:
        """Advance to the next allowed day of week."""
        day_field = self._fields.day
        weekday = _weekday(start)
        if day_field.test(weekday):
            return start

        date = self._reset_time(start)
        following = day_field.next(weekday)
        if following is None:
            following = day_field.min
        return date + timedelta(days=(following - weekday) % 7)

    def _next_date_day(self, start: datetime) -> datetime:
        """Advance to the next instant allowed by day of month and day of week.

        An unrestricted column leaves the candidate unchanged, so taking the
        later candidate enforces the restricted one; with both restricted
        either one is enough and the earlier candidate wins.
        """
        by_date = self._next_date(start)
        by_day = self._next_day(start)
        if self._fields.date.restricted and self._fields.day.restricted:
            return min(by_date, by_day)
        return max(by_date, by_day)

    def _next_month(self, start: datetime) -> datetime:
        """Advance to the next allowed month.

        The day columns are resolved again in every new month because they
        may roll the candidate into a month that is not allowed.
        """
        month = self._fields.month
        date = start
        while not month.test(date.month - 1):
            following = month.next(date.month - 1)
            if following is None:
                date = date.replace(year=date.year + 1, month=month.min + 1, day=1)
            else:
                date = date.replace(month=following + 1, day=1)
            date = self._next_date_day(self._reset_time(date))
        return date


def parse_cron_expression(
    pattern: str,
    *,
    now: datetime | None = None,
    random: Callable[[], float] | None = None,
) -> CronExpression:
    """Parse a cron pattern into an expression.

    Args:
        pattern: The cron pattern.
        now: Instant substituted for '?' bounds.
        random: Uniform [0, 1) source for '~' forms.

    Returns:
        The parsed expression.
    """
    return CronExpression(pattern, now=now, random=random)
