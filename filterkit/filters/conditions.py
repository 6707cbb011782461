#!/usr/bin/env python3
"""
Per-type condition parsers.
Each parser validates a raw condition against its type's grammar and
returns a typed condition, or raises ConditionError naming the column.
"""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from ..exceptions import ConditionError
from .base import (
    BooleanCondition, Condition, DateCondition, DateRange, DateTimeCondition,
    NumberCondition, RawCondition, TextCondition
)
from .registry import FilterConfig, TypeTag

DEFAULT_DATE_FORMAT = "%Y-%m-%d"

TRUE_VALUES = (True, "true", 1)
FALSE_VALUES = (False, "false", "", None)

INTEGER_RE = re.compile(r"^[+-]?\d+$")
DECIMAL_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)$")

# Reference instant used to check that a format can parse what it formats
REFERENCE_INSTANT = datetime(2001, 2, 3, 4, 5, 6, tzinfo=timezone.utc)


def parse_condition(config: FilterConfig, raw: RawCondition) -> Condition:
    """
    Validate a raw condition with the parser for its config's type.

    Args:
        config: The config the column resolved to
        raw: The unvalidated condition

    Returns:
        A typed condition

    Raises:
        ConditionError: If the comparator or value is invalid
    """
    _check_comparator(config, raw)

    if config.type == TypeTag.BOOLEAN:
        return parse_boolean(config.options, raw)
    elif config.type == TypeTag.TEXT:
        return parse_text(config.options, raw)
    elif config.type == TypeTag.NUMBER:
        return parse_number(config.options, raw)
    elif config.type == TypeTag.DATE:
        return parse_date(config.options, raw)
    elif config.type == TypeTag.DATETIME:
        return parse_datetime(config.options, raw)
    else:
        raise ConditionError(f"Unsupported filter type {config.type} for {raw.column}", raw.column)


def _check_comparator(config: FilterConfig, raw: RawCondition) -> None:
    if not config.allows(raw.comparator):
        raise ConditionError(
            f"Invalid {config.type.value} comparator '{raw.comparator}' for {raw.column}",
            raw.column
        )


def parse_boolean(options: Mapping[str, Any], raw: RawCondition) -> BooleanCondition:
    """Parse a boolean condition: true/"true"/1 or false/"false"/""/absent."""
    value = raw.value
    # True == 1, so types are compared as well
    if _is_one_of(value, TRUE_VALUES):
        parsed = True
    elif _is_one_of(value, FALSE_VALUES):
        parsed = False
    else:
        raise ConditionError(f"Invalid boolean value for {raw.column}", raw.column)

    return BooleanCondition(
        column=raw.column, comparator=raw.comparator, value=parsed, inverse=raw.inverse
    )


def _is_one_of(value: Any, candidates: tuple) -> bool:
    return any(type(value) is type(c) and value == c for c in candidates)


def parse_text(options: Mapping[str, Any], raw: RawCondition) -> TextCondition:
    """Parse a text condition. Scalars are coerced to strings."""
    value = raw.value
    if value is None:
        value = ""
    elif isinstance(value, (list, tuple, set, dict)):
        raise ConditionError(f"Invalid text value for {raw.column}", raw.column)

    return TextCondition(
        column=raw.column, comparator=raw.comparator, value=str(value), inverse=raw.inverse
    )


def parse_number(options: Mapping[str, Any], raw: RawCondition) -> NumberCondition:
    """
    Parse a number condition.

    Options:
        allow_decimal: Accept fractional values (default False)
        allowed_values: Whitelist; a range is an inclusive integer interval
    """
    allow_decimal = bool(options.get("allow_decimal", False))
    parsed = _parse_number_value(raw.value, allow_decimal)
    if parsed is None:
        raise ConditionError(f"Invalid number value for {raw.column}", raw.column)

    allowed = options.get("allowed_values")
    if allowed is not None and not _is_allowed(parsed, allowed):
        raise ConditionError(f"Provided number value not allowed for {raw.column}", raw.column)

    return NumberCondition(
        column=raw.column, comparator=raw.comparator, value=parsed, inverse=raw.inverse
    )


def _parse_number_value(value: Any, allow_decimal: bool) -> Optional[Any]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not allow_decimal or not math.isfinite(value):
            return None
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if INTEGER_RE.match(text):
        try:
            return int(text)
        except ValueError:
            # Over the interpreter's integer string conversion limit
            return None
    if allow_decimal and DECIMAL_RE.match(text):
        parsed = float(text)
        return parsed if math.isfinite(parsed) else None
    return None


def _is_allowed(value: Any, allowed: Any) -> bool:
    if isinstance(allowed, range):
        if allowed.step != 1:
            return value in allowed
        return allowed.start <= value <= allowed.stop - 1
    return value in allowed


def parse_date(options: Mapping[str, Any], raw: RawCondition) -> DateCondition:
    """
    Parse a date condition.

    Options:
        format: strptime pattern (default %Y-%m-%d)

    between / not between take a mapping with start and end.
    """
    fmt = options.get("format", DEFAULT_DATE_FORMAT)

    if raw.comparator in ("between", "not between"):
        value = raw.value
        if not isinstance(value, Mapping) or "start" not in value or "end" not in value:
            raise ConditionError(f"Both start and end are required for {raw.column}", raw.column)
        parsed = DateRange(
            start=_parse_date_value(value["start"], fmt, raw.column),
            end=_parse_date_value(value["end"], fmt, raw.column),
        )
    else:
        parsed = _parse_date_value(raw.value, fmt, raw.column)

    return DateCondition(
        column=raw.column, comparator=raw.comparator, value=parsed, inverse=raw.inverse
    )


def _parse_date_value(value: Any, fmt: str, column: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ConditionError(f"Invalid date value for {column}", column)
    if not _format_is_valid(fmt):
        raise ConditionError(f"Invalid date format for {column}", column)

    try:
        return datetime.strptime(value, fmt).date()
    except ValueError:
        raise ConditionError(f"Invalid date value for {column}", column)


def parse_datetime(options: Mapping[str, Any], raw: RawCondition) -> DateTimeCondition:
    """
    Parse a datetime condition into a UTC instant.

    Options:
        format: strptime pattern (default ISO-8601, trailing Z means UTC)
    """
    fmt = options.get("format")
    value = raw.value

    if isinstance(value, datetime):
        parsed = value
    elif not isinstance(value, str):
        raise ConditionError(f"Invalid datetime value for {raw.column}", raw.column)
    elif fmt is None:
        parsed = _parse_iso_datetime(value, raw.column)
    elif not _format_is_valid(fmt):
        raise ConditionError(f"Invalid datetime format for {raw.column}", raw.column)
    else:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            raise ConditionError(f"Invalid datetime value for {raw.column}", raw.column)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    else:
        parsed = parsed.astimezone(timezone.utc)

    return DateTimeCondition(
        column=raw.column, comparator=raw.comparator, value=parsed, inverse=raw.inverse
    )


def _parse_iso_datetime(value: str, column: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ConditionError(f"Invalid datetime value for {column}", column)


def _format_is_valid(fmt: Any) -> bool:
    """Check that a strptime format can parse a value it formatted itself."""
    if not isinstance(fmt, str) or "%" not in fmt:
        return False
    try:
        datetime.strptime(REFERENCE_INSTANT.strftime(fmt), fmt)
    except ValueError:
        return False
    return True
