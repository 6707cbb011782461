"""
filterkit - validated filter trees encoded as parameterized SQL fragments.
"""

from .filters import (
    FilterConfig,
    FilterExpression,
    FilterParser,
    Fragment,
    SelectQuery,
    encode,
    parse,
    parse_params,
    query
)
from .exceptions import (
    FilterkitError,
    ConfigurationError,
    FilterError,
    ConditionError,
    InvalidFilterError,
    EncodingError,
    QueryError
)

__version__ = "1.0.0"

__all__ = [
    'FilterConfig',
    'FilterExpression',
    'FilterParser',
    'Fragment',
    'SelectQuery',
    'encode',
    'parse',
    'parse_params',
    'query',
    'FilterkitError',
    'ConfigurationError',
    'FilterError',
    'ConditionError',
    'InvalidFilterError',
    'EncodingError',
    'QueryError'
]
