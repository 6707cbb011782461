#!/usr/bin/env python3
"""
Filter tree parser.
Validates nested `{type, conditions, sub_filters}` structures, or flat
parameters, against the declared filter types and builds an immutable
FilterExpression tree.

Every problem in the input is reported at once: errors are collected
across all conditions and sub-filters and raised together.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from ..config import Config, DEFAULT_MAX_DEPTH, DEFAULT_UNION_KEY
from ..exceptions import ConditionError, InvalidFilterError
from .base import Condition, FilterExpression, FilterUnion, RawCondition
from .conditions import parse_condition
from .params import decode_params
from .registry import FilterConfig, TypeTag, conflicting_columns, find_config, load_configs

ConfigDeclarations = Iterable[Union[FilterConfig, Mapping[str, Any]]]


class FilterParser:
    """
    Parses filter structures against an ordered list of filter configs.
    Holds no per-call state, so one instance can be shared.
    """

    def __init__(self,
                 configs: ConfigDeclarations,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 union_key: str = DEFAULT_UNION_KEY):
        """
        Initialize the parser.

        Args:
            configs: Filter type declarations; the first match for a column wins
            max_depth: Maximum sub-filter nesting depth
            union_key: Flat parameter key selecting the union
        """
        self.configs: Sequence[FilterConfig] = tuple(load_configs(configs))
        self.max_depth = max_depth
        self.union_key = union_key
        self.logger = logging.getLogger(__name__)

        for column, types in conflicting_columns(self.configs).items():
            self.logger.warning(
                f"Column '{column}' declared as {', '.join(t.value for t in types)}; "
                f"using {types[0].value}"
            )

    def parse(self, structure: Mapping[str, Any]) -> FilterExpression:
        """
        Parse a nested filter structure.

        Args:
            structure: `{type: all|any|none, conditions: [...], sub_filters: [...]}`

        Returns:
            FilterExpression tree

        Raises:
            InvalidFilterError: With every error found, if any
        """
        errors: List[str] = []
        expression = self._parse_node(structure, 1, errors)

        if errors:
            self.logger.debug(f"Filter rejected with {len(errors)} errors")
            raise InvalidFilterError(errors)

        self.logger.debug(f"Parsed filter with {expression.leaf_count()} conditions")
        return expression

    def parse_params(self, params: Mapping[str, Any]) -> FilterExpression:
        """
        Parse flat parameters such as `{"title_contains": "foo"}`.

        Raises:
            InvalidFilterError: With every error found, if any
        """
        if not isinstance(params, Mapping):
            raise InvalidFilterError(["Filter params must be a mapping"])

        union_value, raw_conditions, errors = decode_params(self.configs, params, self.union_key)
        union = self._parse_union(union_value, errors)

        conditions = []
        for raw in raw_conditions:
            condition = self._parse_raw(raw, errors)
            if condition is not None:
                conditions.append(condition)

        if errors:
            raise InvalidFilterError(errors)
        return FilterExpression(union, conditions)

    def _parse_node(self, node: Any, depth: int, errors: List[str]) -> Optional[FilterExpression]:
        """Parse one node, appending problems to errors."""
        if depth > self.max_depth:
            errors.append(f"Filter nesting exceeds maximum depth of {self.max_depth}")
            return None

        if not isinstance(node, Mapping):
            errors.append(f"Filter must be a mapping, got {type(node).__name__}")
            return None

        union = self._parse_union(node.get("type", FilterUnion.ALL.value), errors)

        conditions = []
        for entry in self._list_field(node, "conditions", errors):
            condition = self._parse_entry(entry, errors)
            if condition is not None:
                conditions.append(condition)

        sub_filters = []
        for sub_node in self._list_field(node, "sub_filters", errors):
            sub_filter = self._parse_node(sub_node, depth + 1, errors)
            if sub_filter is not None:
                sub_filters.append(sub_filter)

        if union is None:
            return None
        return FilterExpression(union, conditions, sub_filters)

    def _parse_union(self, value: Any, errors: List[str]) -> Optional[FilterUnion]:
        union = FilterUnion.from_string(value)
        if union is None:
            errors.append(f"Invalid filter type '{value}', expected all, any or none")
        return union

    def _list_field(self, node: Mapping[str, Any], name: str, errors: List[str]) -> list:
        value = node.get(name)
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            errors.append(f"Filter {name} must be a list")
            return []
        return list(value)

    def _parse_entry(self, entry: Any, errors: List[str]) -> Optional[Condition]:
        """Turn a condition mapping into a raw condition and parse it."""
        if not isinstance(entry, Mapping):
            errors.append(f"Condition must be a mapping, got {type(entry).__name__}")
            return None

        column = entry.get("column")
        if not isinstance(column, str) or not column:
            errors.append("Condition is missing a column")
            return None

        comparator = entry.get("comparator")
        if not isinstance(comparator, str):
            errors.append(f"Condition for {column} is missing a comparator")
            return None

        type_tag = None
        if entry.get("type") is not None:
            type_tag = TypeTag.from_string(entry["type"])
            if type_tag is None:
                errors.append(f"Unknown filter type '{entry['type']}' for {column}")
                return None

        raw = RawCondition(
            column=column,
            comparator=comparator,
            value=entry.get("value"),
            inverse=entry.get("inverse", False) in (True, "true"),
            type=type_tag
        )
        return self._parse_raw(raw, errors)

    def _parse_raw(self, raw: RawCondition, errors: List[str]) -> Optional[Condition]:
        """Resolve a raw condition's config and dispatch to its type parser."""
        config = find_config(self.configs, raw.column, raw.type)
        if config is None:
            if raw.type is None:
                errors.append(f"Column '{raw.column}' is not configured")
            else:
                errors.append(f"Column '{raw.column}' is not configured for type '{raw.type.value}'")
            return None

        try:
            return parse_condition(config, raw)
        except ConditionError as e:
            errors.append(e.message)
            return None


def _parser(configs: ConfigDeclarations, options: Mapping[str, Any]) -> FilterParser:
    settings = Config.from_env()
    settings.update(options)
    return FilterParser(configs, **settings)


def parse(configs: ConfigDeclarations, structure: Mapping[str, Any], **options) -> FilterExpression:
    """
    Parse a nested filter structure.

    Example:
        parse([{"type": "boolean", "keys": ["flag"]}],
              {"type": "all", "conditions": [
                  {"column": "flag", "comparator": "equals", "value": "true", "type": "boolean"}
              ]})
    """
    return _parser(configs, options).parse(structure)


def parse_params(configs: ConfigDeclarations, params: Mapping[str, Any], **options) -> FilterExpression:
    """
    Parse flat parameters.

    Example:
        parse_params([{"type": "number", "keys": ["rating"], "options": {"allow_decimal": True}}],
                     {"rating_greater_than_or": "90.5"})
    """
    return _parser(configs, options).parse_params(params)
