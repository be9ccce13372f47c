"""Parsing of cron patterns into per-column fields.

A pattern has five or six columns (seconds, minutes, hours, day of month,
month, day of week) separated by runs of whitespace; with five columns the
seconds default to ``0``. Leading or trailing whitespace makes an empty,
invalid column. Each column is a comma-separated list of sub-fields
written in one of these forms:

    *            every value
    */S          every S-th value
    N            a single value
    N-M          an interval
    N-M/S        a stepped interval
    ~  ~/S  N~  N~/S  ~M  ~M/S  N~M  N~M/S
                 a random value (or stepped values from a random start)
                 drawn once, when the pattern is parsed

Bounds are numbers, three-letter month or weekday names, or ``?`` (the
current value of that column).
"""

import logging
import random as _random
import re
import sys
from datetime import datetime
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from croncall.errors import CronRangeError, CronSyntaxError
from croncall.field import CronField

logger = logging.getLogger(__name__)

NICKNAMES = {
    "@yearly": "0 0 0 1 1 *",
    "@annually": "0 0 0 1 1 *",
    "@monthly": "0 0 0 1 * *",
    "@weekly": "0 0 0 * * 0",
    "@daily": "0 0 0 * * *",
    "@midnight": "0 0 0 * * *",
    "@hourly": "0 0 * * * *",
}

# Column indexes
SECONDS, MINUTES, HOURS, DATE, MONTH, DAY = range(6)

# Inclusive limits accepted in each column (month is one-based, 7 is Sunday).
LIMITS_MIN = (0, 0, 0, 1, 1, 0)
LIMITS_MAX = (59, 59, 23, 31, 12, 7)

_MONTH_NAMES = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
_DAY_NAMES = {"sun": 0, "mon": 1, "tue": 2, "wed": 3, "thu": 4, "fri": 5, "sat": 6}

# Names usable as a lower and as an upper bound; Sunday is 7 as an upper bound
# so that "sat-sun" does not wrap.
NAMES_MIN: tuple[dict[str, int], ...] = ({}, {}, {}, {}, _MONTH_NAMES, _DAY_NAMES)
NAMES_MAX: tuple[dict[str, int], ...] = ({}, {}, {}, {}, _MONTH_NAMES, {**_DAY_NAMES, "sun": 7})

DEFAULT_STEP = 1
# Large enough to keep a single value from any interval.
RANDOM_STEP = sys.maxsize

MAX_DAYS_IN_MONTHS = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

_BOUND = r"[0-9a-z?]+"


def _compile(form: str) -> re.Pattern[str]:
    regex = (
        re.escape(form)
        .replace(r"\{min\}", f"(?P<min>{_BOUND})")
        .replace(r"\{max\}", f"(?P<max>{_BOUND})")
        .replace(r"\{step\}", r"(?P<step>[0-9]+)")
    )
    return re.compile(regex, re.IGNORECASE)


# Sub-field forms, tried in order. The options tell how missing parts are
# filled in: "single" copies min into max, "random" draws the first value.
FORMATS: list[tuple[re.Pattern[str], dict[str, bool]]] = [
    (_compile(form), options)
    for form, options in [
        ("*", {"restricted": False}),
        ("*/{step}", {}),
        ("{min}", {"single": True}),
        ("{min}-{max}", {}),
        ("{min}-{max}/{step}", {}),
        ("~", {"random": True}),
        ("~/{step}", {"random": True}),
        ("{min}~", {"random": True}),
        ("{min}~/{step}", {"random": True}),
        ("~{max}", {"random": True}),
        ("~{max}/{step}", {"random": True}),
        ("{min}~{max}", {"random": True}),
        ("{min}~{max}/{step}", {"random": True}),
    ]
]


class CronFields(BaseModel):
    """The six normalized columns of a cron pattern.

    Attributes:
        seconds: Seconds, 0-59.
        minutes: Minutes, 0-59.
        hours: Hours, 0-23.
        date: Day of month, 1-31.
        month: Month, zero-based (0 is January).
        day: Day of week, 0-6 (0 is Sunday).
    """

    model_config = ConfigDict(frozen=True)

    seconds: CronField
    minutes: CronField
    hours: CronField
    date: CronField
    month: CronField
    day: CronField


def _now_value(now: datetime, index: int, upper: bool = False) -> int:
    """Get the value of a column for the given instant.

    Args:
        now: The instant substituted for ``?``.
        index: Column index.
        upper: Whether the value is used as an upper bound (Sunday is 7).

    Returns:
        The column value in input numbering (one-based month).
    """
    if index == SECONDS:
        return now.second
    if index == MINUTES:
        return now.minute
    if index == HOURS:
        return now.hour
    if index == DATE:
        return now.day
    if index == MONTH:
        return now.month
    weekday = now.isoweekday() % 7
    return 7 if upper and weekday == 0 else weekday


def _resolve_bound(
    text: str,
    index: int,
    now: datetime,
    names: tuple[dict[str, int], ...],
    pattern: str,
    upper: bool = False,
) -> int:
    if text == "?":
        return _now_value(now, index, upper)
    if text.lower() in names[index]:
        return names[index][text.lower()]
    if text.isascii() and text.isdigit():
        return int(text)
    raise CronSyntaxError(pattern)


def _parse_subfield(
    groups: dict[str, Any],
    options: dict[str, bool],
    index: int,
    now: datetime,
    pattern: str,
    random: Callable[[], float],
) -> CronField:
    """Build the field described by one matched sub-field.

    Raises:
        CronSyntaxError: If a bound is neither a number, a known name nor '?'.
        CronRangeError: If the interval is outside the column limits,
            inverted, or has a zero step.
    """
    if groups.get("min") is None:
        low = LIMITS_MIN[index]
    else:
        low = _resolve_bound(groups["min"], index, now, NAMES_MIN, pattern)

    if options.get("single"):
        high = low
    elif groups.get("max") is None:
        high = LIMITS_MAX[index]
    else:
        high = _resolve_bound(groups["max"], index, now, NAMES_MAX, pattern, upper=True)

    is_random = options.get("random", False)
    if groups.get("step") is not None:
        step = int(groups["step"])
    else:
        step = RANDOM_STEP if is_random else DEFAULT_STEP

    if low < LIMITS_MIN[index] or LIMITS_MAX[index] < high or high < low or step == 0:
        raise CronRangeError(pattern)

    return CronField.range(
        low,
        high,
        step,
        restricted=options.get("restricted", True),
        random=random if is_random else None,
    )


def _parse_column(
    column: str,
    index: int,
    now: datetime,
    pattern: str,
    random: Callable[[], float],
) -> CronField:
    fields = []
    for subfield in column.split(","):
        for regex, options in FORMATS:
            match = regex.fullmatch(subfield)
            if match is not None:
                fields.append(
                    _parse_subfield(match.groupdict(), options, index, now, pattern, random)
                )
                break
        else:
            raise CronSyntaxError(pattern)
    return CronField.flat(fields)


def parse(
    pattern: str,
    *,
    now: datetime | None = None,
    random: Callable[[], float] | None = None,
) -> CronFields:
    """Parse a cron pattern.

    Args:
        pattern: Five or six column pattern, or a nickname such as '@daily'.
        now: Instant used for every '?' in the pattern (defaults to now).
        random: Uniform [0, 1) source for '~' forms (defaults to
            ``random.random``). Each '~' sub-field draws exactly once.

    Returns:
        The normalized fields, with zero-based months and Sunday as 0.

    Raises:
        CronSyntaxError: If the pattern is malformed.
        CronRangeError: If a value is out of range or the day of month
            never occurs in the allowed months.
    """
    columns = re.split(r"\s+", NICKNAMES.get(pattern.lower(), pattern))
    if len(columns) == 5:
        columns.insert(0, "0")
    elif len(columns) != 6:
        raise CronSyntaxError(pattern)

    # Freeze the clock so that every '?' resolves against the same instant.
    now = now or datetime.now()
    random = random or _random.random

    seconds, minutes, hours, date, month, day = (
        _parse_column(column, index, now, pattern, random)
        for index, column in enumerate(columns)
    )

    longest = max(MAX_DAYS_IN_MONTHS[m - 1] for m in month.values)
    if longest < date.min:
        raise CronRangeError(pattern)

    fields = CronFields(
        seconds=seconds,
        minutes=minutes,
        hours=hours,
        date=date,
        month=month.map(lambda v: v - 1),
        day=day.map(lambda v: 0 if v == 7 else v),
    )
    logger.debug(f"Parsed cron pattern {pattern!r}: {fields}")
    return fields
