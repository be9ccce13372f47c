"""croncall - in-process cron scheduling for asyncio applications."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("croncall")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from croncall.at import At, schedule_at
from croncall.errors import CronPatternError, CronRangeError, CronSyntaxError
from croncall.expression import CronExpression, parse_cron_expression
from croncall.field import CronField
from croncall.parse import CronFields, parse
from croncall.task import CronTask
from croncall.timers import AsyncioTimers, TimerHandle, Timers

__all__ = [
    # Scheduling
    "CronTask",
    "At",
    "schedule_at",
    # Expressions
    "CronExpression",
    "parse_cron_expression",
    "CronField",
    "CronFields",
    "parse",
    # Errors
    "CronPatternError",
    "CronSyntaxError",
    "CronRangeError",
    # Timer backends
    "Timers",
    "TimerHandle",
    "AsyncioTimers",
]
