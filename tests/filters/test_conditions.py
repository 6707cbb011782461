#!/usr/bin/env python3
"""
Tests for the per-type condition parsers.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from filterkit.exceptions import ConditionError
from filterkit.filters import (
    BooleanCondition, DateCondition, DateRange, DateTimeCondition, FilterConfig,
    NumberCondition, RawCondition, TextCondition, parse_condition
)


def raw(column, value, comparator="equals", inverse=False):
    return RawCondition(column=column, comparator=comparator, value=value, inverse=inverse)


def error_for(config, condition):
    with pytest.raises(ConditionError) as exc_info:
        parse_condition(config, condition)
    return exc_info.value


class TestBooleanCondition:
    """Test boolean parsing."""

    config = FilterConfig("boolean", ["flag"])

    @pytest.mark.parametrize("value", ["true", True, 1])
    def test_true_values(self, value):
        """Test every accepted spelling of true."""
        assert parse_condition(self.config, raw("flag", value)) == \
            BooleanCondition(column="flag", comparator="equals", value=True)

    @pytest.mark.parametrize("value", ["", "false", False, None])
    def test_false_values(self, value):
        """Test empty and false spellings."""
        assert parse_condition(self.config, raw("flag", value)) == \
            BooleanCondition(column="flag", comparator="equals", value=False)

    @pytest.mark.parametrize("value", ["blah", 2, 1.0, "TRUE", []])
    def test_invalid_value(self, value):
        """Test anything else is rejected, naming the column."""
        error = error_for(self.config, raw("flag", value))
        assert error.message == "Invalid boolean value for flag"
        assert error.column == "flag"

    def test_does_not_equal_and_inverse(self):
        """Test both negation forms are accepted."""
        negated = parse_condition(self.config, raw("flag", "true", "does not equal"))
        inverted = parse_condition(self.config, raw("flag", "true", inverse=True))
        assert negated.comparator == "does not equal"
        assert inverted.inverse is True

    def test_invalid_comparator(self):
        """Test comparators of other types are rejected."""
        error = error_for(self.config, raw("flag", "true", "contains"))
        assert "contains" in error.message
        assert "boolean" in error.message
        assert "flag" in error.message


class TestTextCondition:
    """Test text parsing."""

    config = FilterConfig("text", ["title"])

    @pytest.mark.parametrize("comparator", ["equals", "does not equal", "contains", "does not contain"])
    def test_comparators(self, comparator):
        """Test every text comparator round-trips."""
        condition = parse_condition(self.config, raw("title", "Python", comparator, inverse=True))
        assert condition == TextCondition(
            column="title", comparator=comparator, value="Python", inverse=True
        )

    def test_coercion(self):
        """Test scalars become strings and None becomes empty."""
        assert parse_condition(self.config, raw("title", 42)).value == "42"
        assert parse_condition(self.config, raw("title", None)).value == ""
        assert parse_condition(self.config, raw("title", "")).value == ""

    def test_structured_value(self):
        """Test lists and mappings are rejected."""
        error = error_for(self.config, raw("title", ["a", "b"]))
        assert error.message == "Invalid text value for title"

    def test_invalid_comparator(self):
        """Test number comparators are not text comparators."""
        error = error_for(self.config, raw("title", "x", "greater than"))
        assert error.message == "Invalid text comparator 'greater than' for title"


class TestNumberCondition:
    """Test number parsing."""

    integers = FilterConfig("number", ["upvotes"])
    decimals = FilterConfig("number", ["rating"], {"allow_decimal": True})

    @pytest.mark.parametrize("comparator", [
        "equals", "does not equal", "greater than", "greater than or", "less than", "less than or"
    ])
    def test_comparators(self, comparator):
        """Test every number comparator round-trips."""
        condition = parse_condition(self.integers, raw("upvotes", "10", comparator))
        assert condition == NumberCondition(column="upvotes", comparator=comparator, value=10)

    def test_integer_values(self):
        """Test integers from strings and ints."""
        assert parse_condition(self.integers, raw("upvotes", "-3")).value == -3
        assert parse_condition(self.integers, raw("upvotes", 7)).value == 7

    @pytest.mark.parametrize("value", ["10.5", "1.0", 2.5])
    def test_decimal_rejected_by_default(self, value):
        """Test fractions need allow_decimal."""
        error = error_for(self.integers, raw("upvotes", value))
        assert error.message == "Invalid number value for upvotes"

    def test_decimal_allowed(self):
        """Test fractions with allow_decimal."""
        assert parse_condition(self.decimals, raw("rating", "90.5")).value == 90.5
        assert parse_condition(self.decimals, raw("rating", 4.25)).value == 4.25
        assert parse_condition(self.decimals, raw("rating", "90")).value == 90

    @pytest.mark.parametrize("value", ["12abc", "abc", "", "1e5", "1.2.3", True, None, "nan"])
    def test_partial_or_invalid_literals(self, value):
        """Test literals must parse fully."""
        error = error_for(self.decimals, raw("rating", value))
        assert error.message == "Invalid number value for rating"

    def test_allowed_values(self):
        """Test whitelisted values."""
        config = FilterConfig("number", ["stars"], {"allowed_values": [1, 2, 3]})
        assert parse_condition(config, raw("stars", "2")).value == 2

        error = error_for(config, raw("stars", "4"))
        assert error.message == "Provided number value not allowed for stars"

    def test_allowed_range_is_inclusive_interval(self):
        """Test a range whitelist covers its numeric interval."""
        config = FilterConfig("number", ["score"], {
            "allow_decimal": True, "allowed_values": range(0, 101)
        })
        assert parse_condition(config, raw("score", "99.5")).value == 99.5
        assert parse_condition(config, raw("score", "100")).value == 100
        assert "score" in error_for(config, raw("score", "100.5")).message

    def test_oversized_literals(self):
        """Test literals too large to convert are invalid values."""
        assert error_for(self.integers, raw("upvotes", "9" * 5000)).message == \
            "Invalid number value for upvotes"
        assert error_for(self.decimals, raw("rating", "9" * 400 + ".5")).message == \
            "Invalid number value for rating"
        assert error_for(self.decimals, raw("rating", float("inf"))).message == \
            "Invalid number value for rating"


class TestDateCondition:
    """Test date parsing."""

    config = FilterConfig("date", ["posted_at"])

    @pytest.mark.parametrize("comparator", [
        "equals", "does not equal", "after", "on or after", "before", "on or before"
    ])
    def test_single_date_comparators(self, comparator):
        """Test single-date comparators round-trip."""
        condition = parse_condition(self.config, raw("posted_at", "2015-01-31", comparator))
        assert condition == DateCondition(
            column="posted_at", comparator=comparator, value=date(2015, 1, 31)
        )

    @pytest.mark.parametrize("comparator", ["between", "not between"])
    def test_ranges(self, comparator):
        """Test start/end pairs."""
        condition = parse_condition(self.config, raw(
            "posted_at", {"start": "2015-01-01", "end": "2015-12-31"}, comparator
        ))
        assert condition.value == DateRange(date(2015, 1, 1), date(2015, 12, 31))

    def test_range_missing_bound(self):
        """Test both bounds are required."""
        error = error_for(self.config, raw("posted_at", {"start": "2015-01-01"}, "between"))
        assert error.message == "Both start and end are required for posted_at"

        error = error_for(self.config, raw("posted_at", "2015-01-01", "between"))
        assert error.message == "Both start and end are required for posted_at"

    def test_range_bad_bound(self):
        """Test one bad bound fails the whole condition."""
        error = error_for(self.config, raw(
            "posted_at", {"start": "2015-01-01", "end": "2015-13-45"}, "between"
        ))
        assert error.message == "Invalid date value for posted_at"

    def test_invalid_value(self):
        """Test unparsable dates."""
        assert error_for(self.config, raw("posted_at", "yesterday")).message == \
            "Invalid date value for posted_at"
        assert error_for(self.config, raw("posted_at", 20150131)).message == \
            "Invalid date value for posted_at"

    def test_custom_format(self):
        """Test the format option."""
        config = FilterConfig("date", ["posted_at"], {"format": "%d/%m/%Y"})
        assert parse_condition(config, raw("posted_at", "31/01/2015")).value == date(2015, 1, 31)
        assert error_for(config, raw("posted_at", "2015-01-31")).message == \
            "Invalid date value for posted_at"

    @pytest.mark.parametrize("fmt", ["YYYY-MM-DD", "%Q-%m", 12])
    def test_invalid_format(self, fmt):
        """Test a broken format is reported apart from a broken value."""
        config = FilterConfig("date", ["posted_at"], {"format": fmt})
        assert error_for(config, raw("posted_at", "2015-01-31")).message == \
            "Invalid date format for posted_at"

    def test_format_without_directives(self):
        """Test a literal format is rejected even when the value matches it."""
        config = FilterConfig("date", ["posted_at"], {"format": "today"})
        assert error_for(config, raw("posted_at", "today")).message == \
            "Invalid date format for posted_at"

    def test_date_objects(self):
        """Test date instances pass through."""
        assert parse_condition(self.config, raw("posted_at", date(2015, 1, 31))).value == \
            date(2015, 1, 31)

    def test_not_between_on_datetime_type(self):
        """Test ranges are a date-only comparator."""
        config = FilterConfig("datetime", ["updated_at"])
        error = error_for(config, raw("updated_at", {"start": "a", "end": "b"}, "between"))
        assert error.message == "Invalid datetime comparator 'between' for updated_at"


class TestDateTimeCondition:
    """Test datetime parsing."""

    config = FilterConfig("datetime", ["updated_at"])

    @pytest.mark.parametrize("comparator", [
        "equals", "does not equal", "after", "on or after", "before", "on or before"
    ])
    def test_comparators(self, comparator):
        """Test every datetime comparator round-trips."""
        condition = parse_condition(self.config, raw("updated_at", "2016-04-01T10:30:00Z", comparator))
        assert condition == DateTimeCondition(
            column="updated_at",
            comparator=comparator,
            value=datetime(2016, 4, 1, 10, 30, tzinfo=timezone.utc)
        )

    def test_offset_normalized_to_utc(self):
        """Test offsets are converted to UTC."""
        condition = parse_condition(self.config, raw("updated_at", "2016-04-01T12:30:00+02:00"))
        assert condition.value == datetime(2016, 4, 1, 10, 30, tzinfo=timezone.utc)
        assert condition.value.utcoffset() == timedelta(0)

    def test_naive_is_utc(self):
        """Test naive values are taken as UTC."""
        condition = parse_condition(self.config, raw("updated_at", datetime(2016, 4, 1, 10, 30)))
        assert condition.value.tzinfo == timezone.utc

    def test_custom_format(self):
        """Test the format option."""
        config = FilterConfig("datetime", ["updated_at"], {"format": "%Y/%m/%d %H:%M"})
        condition = parse_condition(config, raw("updated_at", "2016/04/01 10:30"))
        assert condition.value == datetime(2016, 4, 1, 10, 30, tzinfo=timezone.utc)

    def test_invalid_value(self):
        """Test unparsable datetimes."""
        assert error_for(self.config, raw("updated_at", "noon")).message == \
            "Invalid datetime value for updated_at"
        assert error_for(self.config, raw("updated_at", 1459506600)).message == \
            "Invalid datetime value for updated_at"

    def test_invalid_format(self):
        """Test a broken format is reported as such."""
        config = FilterConfig("datetime", ["updated_at"], {"format": "YYYY-MM-DD HH:mm"})
        assert error_for(config, raw("updated_at", "2016-04-01 10:30")).message == \
            "Invalid datetime format for updated_at"

    def test_format_without_directives(self):
        """Test a literal format is rejected even when the value matches it."""
        config = FilterConfig("datetime", ["updated_at"], {"format": "noon"})
        assert error_for(config, raw("updated_at", "noon")).message == \
            "Invalid datetime format for updated_at"

    def test_format_with_offset(self):
        """Test formats carrying a UTC offset are accepted and normalized."""
        config = FilterConfig("datetime", ["updated_at"], {"format": "%Y-%m-%d %H:%M%z"})
        condition = parse_condition(config, raw("updated_at", "2016-04-01 12:30+0200"))
        assert condition.value == datetime(2016, 4, 1, 10, 30, tzinfo=timezone.utc)

    def test_iso_fractional_seconds(self):
        """Test ISO-8601 values with short fractional seconds."""
        condition = parse_condition(self.config, raw("updated_at", "2016-04-01T10:30:00.12Z"))
        assert condition.value == datetime(2016, 4, 1, 10, 30, 0, 120000, tzinfo=timezone.utc)
