"""Exceptions raised while parsing cron patterns."""

# Prefix shared by every pattern error message.
ERROR_PREFIX = "Syntax error, unrecognized expression: "


class CronPatternError(ValueError):
    """Base class for invalid cron patterns.

    Attributes:
        pattern: The pattern text exactly as the caller supplied it.
    """

    def __init__(self, pattern: str) -> None:
        super().__init__(ERROR_PREFIX + pattern)
        self.pattern = pattern


class CronSyntaxError(CronPatternError):
    """Raised when a pattern or one of its sub-fields is malformed."""


class CronRangeError(CronPatternError):
    """Raised when a value is out of bounds, a range is inverted, a step is
    zero or a day of month can never occur in the allowed months."""
