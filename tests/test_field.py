"""Tests for cron fields."""

import pytest
from pydantic import ValidationError

from croncall.field import CronField


class TestFieldConstruction:
    """Tests for the CronField factories."""

    def test_all_is_unrestricted(self):
        """all() holds every value and is not restricted."""
        field = CronField.all(0, 7)
        assert field.values == (0, 1, 2, 3, 4, 5, 6, 7)
        assert field.restricted is False

    def test_range_with_step(self):
        """range() keeps min and every step up to max."""
        assert CronField.range(0, 3, 1).values == (0, 1, 2, 3)
        assert CronField.range(0, 10, 2).values == (0, 2, 4, 6, 8, 10)
        assert CronField.range(0, 5, 3).values == (0, 3)
        assert CronField.range(0, 2, 4).values == (0,)
        assert CronField.range(0, 3, 1).restricted is True

    def test_range_with_huge_step(self):
        """A huge step keeps only the first value."""
        field = CronField.range(1, 12, 2**63 - 1)
        assert field.values == (1,)

    def test_range_with_random_start(self):
        """A random source shifts the first value within one step."""
        assert CronField.range(1, 4, 2, random=lambda: 0).values == (1, 3)
        assert CronField.range(1, 4, 2, random=lambda: 0.99).values == (2, 4)
        assert CronField.range(0, 59, 2**63 - 1, random=lambda: 0.5).values == (30,)

    def test_random_source_called_once(self):
        """Building a random field consumes exactly one draw."""
        calls = []

        def source() -> float:
            calls.append(1)
            return 0.25

        CronField.range(0, 23, 5, random=source)
        assert len(calls) == 1

    def test_values_are_sorted_and_unique(self):
        """Values are normalized on construction."""
        field = CronField(values=[5, 1, 3, 1, 5])
        assert field.values == (1, 3, 5)

    def test_empty_values_rejected(self):
        """A field cannot be empty."""
        with pytest.raises(ValidationError):
            CronField(values=[])

    def test_field_is_frozen(self):
        """Fields are immutable."""
        field = CronField.range(1, 3, 1)
        with pytest.raises(ValidationError):
            field.restricted = False


class TestFieldFlat:
    """Tests for merging fields."""

    def test_flat_merges_values(self):
        """flat() unions, deduplicates and sorts."""
        field = CronField.flat([
            CronField.range(1, 1, 1),
            CronField.range(2, 2, 1),
            CronField.range(0, 4, 2),
        ])
        assert field.values == (0, 1, 2, 4)
        assert field.restricted is True

    def test_flat_of_wildcard_stays_unrestricted(self):
        """A lone wildcard keeps its unrestricted flag."""
        field = CronField.flat([CronField.all(0, 59)])
        assert field.restricted is False

    def test_flat_with_explicit_member_is_restricted(self):
        """Mixing a wildcard with an explicit value restricts the column."""
        field = CronField.flat([CronField.all(0, 6), CronField.range(1, 1, 1)])
        assert field.restricted is True


class TestFieldQueries:
    """Tests for min, max, map, test and next."""

    def test_min_and_max(self):
        field = CronField.range(2, 5, 1)
        assert field.min == 2
        assert field.max == 5

    def test_map_keeps_restricted(self):
        """map() returns a new field with the same flag."""
        restricted = CronField.range(10, 12, 1)
        assert restricted.map(lambda v: v - 1).values == (9, 10, 11)
        assert restricted.values == (10, 11, 12)

        wildcard = CronField.all(1, 3)
        doubled = wildcard.map(lambda v: v * 2)
        assert doubled.values == (2, 4, 6)
        assert doubled.restricted is False

    def test_membership(self):
        field = CronField.range(21, 23, 1)
        assert not field.test(20)
        assert field.test(21)
        assert field.test(22)
        assert field.test(23)
        assert not field.test(24)

    def test_next_value(self):
        """next() returns the smallest value strictly greater."""
        field = CronField.range(11, 44, 11)
        assert field.next(10) == 11
        assert field.next(11) == 22
        assert field.next(22) == 33
        assert field.next(34) == 44

    def test_next_past_max(self):
        """next() returns None at or past the maximum."""
        field = CronField.range(3, 9, 3)
        assert field.next(9) is None
        assert field.next(10) is None
