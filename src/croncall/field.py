"""Allowed values of a single cron column.

A CronField is an immutable, sorted set of integers plus a flag telling
whether the column was written as the bare wildcard ``*``. The flag, not the
value set, decides how day-of-month and day-of-week combine.
"""

import math
from bisect import bisect_left, bisect_right
from typing import Callable, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CronField(BaseModel):
    """Allowed values for one cron column.

    Attributes:
        values: Distinct allowed values in increasing order.
        restricted: False when the column was the wildcard ``*``.
    """

    model_config = ConfigDict(frozen=True)

    values: tuple[int, ...] = Field(..., description="Allowed values, sorted")
    restricted: bool = Field(
        default=True,
        description="Whether the column was anything other than '*'",
    )

    @field_validator("values")
    @classmethod
    def _normalize_values(cls, values: tuple[int, ...]) -> tuple[int, ...]:
        """Deduplicate and sort the allowed values."""
        if not values:
            raise ValueError("a cron field needs at least one value")
        return tuple(sorted(set(values)))

    @classmethod
    def all(cls, low: int, high: int) -> "CronField":
        """Create an unrestricted field holding every value in [low, high].

        Args:
            low: Smallest allowed value (inclusive).
            high: Largest allowed value (inclusive).

        Returns:
            The wildcard field.
        """
        return cls(values=tuple(range(low, high + 1)), restricted=False)

    @classmethod
    def range(
        cls,
        low: int,
        high: int,
        step: int,
        *,
        restricted: bool = True,
        random: Callable[[], float] | None = None,
    ) -> "CronField":
        """Create a field from a stepped interval.

        When ``random`` is given, the first value is drawn uniformly among
        the ``step`` possible offsets (bounded by the interval width), so a
        huge step keeps a single random value.

        Args:
            low: Lower bound (inclusive).
            high: Upper bound (inclusive).
            step: Distance between values; must be positive.
            restricted: Whether the column was written explicitly.
            random: Uniform [0, 1) source used to pick the first value.

        Returns:
            The stepped field.
        """
        start = low
        if random is not None:
            start += math.floor(random() * min(step, high - low + 1))
        return cls(values=tuple(range(start, high + 1, step)), restricted=restricted)

    @classmethod
    def flat(cls, fields: Iterable["CronField"]) -> "CronField":
        """Merge several fields into one.

        Args:
            fields: Fields to merge.

        Returns:
            Field holding the union of all values.
        """
        fields = list(fields)
        values = [value for field in fields for value in field.values]
        return cls(values=values, restricted=any(f.restricted for f in fields))

    @property
    def min(self) -> int:
        """Smallest allowed value."""
        return self.values[0]

    @property
    def max(self) -> int:
        """Largest allowed value."""
        return self.values[-1]

    def map(self, func: Callable[[int], int]) -> "CronField":
        """Apply a function to every value, keeping the restricted flag."""
        return CronField(values=[func(v) for v in self.values], restricted=self.restricted)

    def test(self, value: int) -> bool:
        """Check whether a value is allowed."""
        index = bisect_left(self.values, value)
        return index < len(self.values) and self.values[index] == value

    def next(self, value: int) -> int | None:
        """Get the smallest allowed value strictly greater than ``value``.

        Args:
            value: Current value.

        Returns:
            The next allowed value, or None when ``value`` is at or past max.
        """
        index = bisect_right(self.values, value)
        if index < len(self.values):
            return self.values[index]
        return None

