#!/usr/bin/env python3
"""
SQL backend for parsed filters.
Converts FilterExpression trees and conditions into Fragments: a WHERE
clause with `?` placeholders plus the values to bind, in order.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Union

from ..exceptions import EncodingError
from .base import (
    BooleanCondition, Condition, DateCondition, DateTimeCondition, FilterExpression,
    FilterUnion, Fragment, NumberCondition, TextCondition
)
from .registry import TypeTag

logger = logging.getLogger(__name__)

TRUE_EXPRESSION = "1=1"
FALSE_EXPRESSION = "0=1"

LIKE_ESCAPE = "!"


class FilterBackend(ABC):
    """
    Abstract base class for filter backends.
    Each target query language implements this to convert
    FilterExpression trees into its native form.
    """

    @abstractmethod
    def convert(self, expression: Union[FilterExpression, Condition]) -> Any:
        """
        Convert a FilterExpression tree or a single condition.

        Args:
            expression: The parsed filter

        Returns:
            Backend-specific query object
        """
        pass

    @abstractmethod
    def supports_type(self, type_tag: TypeTag) -> bool:
        """
        Check if this backend can encode a condition type.

        Args:
            type_tag: The type to check

        Returns:
            True if supported, False otherwise
        """
        pass


class SQLFilterBackend(FilterBackend):
    """
    Converts parsed filters to SQL boolean expressions.
    Column names are emitted as configured.
    """

    SUPPORTED_TYPES = set(TypeTag)

    COMPARISON_OPERATORS = {
        "equals": "=",
        "does not equal": "!=",
        "greater than": ">",
        "greater than or": ">=",
        "less than": "<",
        "less than or": "<=",
        "after": ">",
        "on or after": ">=",
        "before": "<",
        "on or before": "<=",
    }

    def convert(self, expression: Union[FilterExpression, Condition]) -> Fragment:
        """
        Convert a filter tree or condition to a Fragment.

        Raises:
            EncodingError: If the input could not have come from the parser
        """
        if isinstance(expression, FilterExpression):
            return self._convert_expression(expression)
        elif isinstance(expression, Condition):
            return self._convert_condition(expression)
        else:
            raise EncodingError(f"Unknown expression type: {type(expression)}")

    def supports_type(self, type_tag: TypeTag) -> bool:
        """Check if SQL backend supports a condition type."""
        return type_tag in self.SUPPORTED_TYPES

    def _convert_expression(self, expr: FilterExpression) -> Fragment:
        """Convert a node: join children with the node's union."""
        children: List[Fragment] = [self._convert_condition(c) for c in expr.conditions]
        children.extend(self._convert_expression(s) for s in expr.sub_filters)

        if expr.union == FilterUnion.ALL:
            return self._join(children, "AND", TRUE_EXPRESSION)
        elif expr.union == FilterUnion.ANY:
            return self._join(children, "OR", TRUE_EXPRESSION)
        elif expr.union == FilterUnion.NONE:
            if not children:
                return Fragment(FALSE_EXPRESSION)
            return self._negate(self._join(children, "AND", TRUE_EXPRESSION))
        else:
            raise EncodingError(f"Unknown filter union: {expr.union}")

    def _join(self, children: List[Fragment], operator: str, empty: str) -> Fragment:
        if not children:
            return Fragment(empty)
        if len(children) == 1:
            return children[0]

        expression = f" {operator} ".join(f"({child.expression})" for child in children)
        values = [value for child in children for value in child.values]
        return Fragment(expression, values)

    def _negate(self, fragment: Fragment) -> Fragment:
        return Fragment(f"NOT ({fragment.expression})", fragment.values)

    def _convert_condition(self, condition: Condition) -> Fragment:
        """Convert a single condition, applying its inverse flag."""
        if not self.supports_type(getattr(condition, "type", None)):
            raise EncodingError(f"Unsupported condition: {condition!r}")

        if isinstance(condition, BooleanCondition):
            fragment = self._build_comparison(condition)
        elif isinstance(condition, TextCondition):
            fragment = self._build_text(condition)
        elif isinstance(condition, NumberCondition):
            fragment = self._build_comparison(condition)
        elif isinstance(condition, DateCondition):
            fragment = self._build_date(condition)
        elif isinstance(condition, DateTimeCondition):
            fragment = self._build_comparison(condition)
        else:
            raise EncodingError(f"Unknown condition type: {type(condition)}")

        return self._negate(fragment) if condition.inverse else fragment

    def _build_comparison(self, condition: Condition) -> Fragment:
        """Build `column <op> ?` comparisons."""
        try:
            op = self.COMPARISON_OPERATORS[condition.comparator]
        except KeyError:
            raise EncodingError(
                f"No {condition.type.value} encoding for comparator '{condition.comparator}'"
            )
        return Fragment(f"{condition.column} {op} ?", [condition.value])

    def _build_text(self, condition: TextCondition) -> Fragment:
        """Build text equality or case-insensitive pattern match."""
        if condition.comparator in ("contains", "does not contain"):
            op = "NOT LIKE" if condition.comparator == "does not contain" else "LIKE"
            pattern = f"%{self._escape_like(condition.value)}%"
            return Fragment(
                f"lower({condition.column}) {op} lower(?) ESCAPE '{LIKE_ESCAPE}'",
                [pattern]
            )
        return self._build_comparison(condition)

    def _build_date(self, condition: DateCondition) -> Fragment:
        """Build date comparisons, including two-bound ranges."""
        column = condition.column
        if condition.comparator == "between":
            return Fragment(f"({column} >= ? AND {column} <= ?)",
                            [condition.value.start, condition.value.end])
        elif condition.comparator == "not between":
            return Fragment(f"({column} < ? OR {column} > ?)",
                            [condition.value.start, condition.value.end])
        return self._build_comparison(condition)

    @staticmethod
    def _escape_like(value: str) -> str:
        return (value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
                     .replace("%", LIKE_ESCAPE + "%")
                     .replace("_", LIKE_ESCAPE + "_"))


_default_backend = SQLFilterBackend()


def encode(expression: Union[FilterExpression, Condition]) -> Fragment:
    """
    Encode a parsed filter tree or condition.

    Example:
        fragment = encode(parse(configs, structure))
        cursor.execute(f"SELECT * FROM posts WHERE {fragment.expression}", fragment.values)
    """
    fragment = _default_backend.convert(expression)
    logger.debug(f"Encoded filter: {fragment.expression} ({len(fragment.values)} values)")
    return fragment
