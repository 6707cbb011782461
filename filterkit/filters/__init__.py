"""
Typed filter system with a SQL backend.

This module turns untrusted filter input, either nested structures or flat
URL-style parameters, into validated filter trees and encodes them as
parameterized WHERE clauses.

Example usage:
    from filterkit.filters import FilterParser, encode

    parser = FilterParser([
        {"type": "text", "keys": ["title"]},
        {"type": "date", "keys": ["posted_at"]},
    ])
    expression = parser.parse({
        "type": "all",
        "conditions": [
            {"column": "title", "comparator": "contains", "value": "python", "type": "text"}
        ],
        "sub_filters": [
            {"type": "none", "conditions": [
                {"column": "posted_at", "comparator": "before",
                 "value": "2020-01-01", "type": "date"}
            ]}
        ]
    })

    fragment = encode(expression)
    fragment.expression, fragment.values
"""

from .registry import (
    TypeTag,
    FilterConfig,
    COMPARATORS,
    find_config,
    conflicting_columns,
    load_configs
)

from .base import (
    FilterUnion,
    RawCondition,
    Condition,
    BooleanCondition,
    TextCondition,
    NumberCondition,
    DateCondition,
    DateTimeCondition,
    DateRange,
    FilterExpression,
    Fragment
)

from .conditions import parse_condition
from .params import decode_params, split_key
from .parser import FilterParser, parse, parse_params
from .sql_backend import FilterBackend, SQLFilterBackend, encode
from .query import query, SelectQuery

__all__ = [
    # Registry
    'TypeTag',
    'FilterConfig',
    'COMPARATORS',
    'find_config',
    'conflicting_columns',
    'load_configs',

    # Model
    'FilterUnion',
    'RawCondition',
    'Condition',
    'BooleanCondition',
    'TextCondition',
    'NumberCondition',
    'DateCondition',
    'DateTimeCondition',
    'DateRange',
    'FilterExpression',
    'Fragment',

    # Parsing
    'parse_condition',
    'decode_params',
    'split_key',
    'FilterParser',
    'parse',
    'parse_params',

    # Encoding
    'FilterBackend',
    'SQLFilterBackend',
    'encode',
    'query',
    'SelectQuery'
]
