"""
Exception classes for filterkit.
"""

from typing import Iterable, List, Optional


class FilterkitError(Exception):
    """Base exception for all filterkit errors."""
    pass


class ConfigurationError(FilterkitError):
    """Raised when a filter type declaration is malformed."""
    pass


class FilterError(FilterkitError):
    """Base exception for filter parsing errors."""
    pass


class ConditionError(FilterError):
    """Raised by a condition parser when a single condition is invalid."""
    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.column = column


class InvalidFilterError(FilterError):
    """
    Raised when a filter fails to parse.
    Carries every error found in the pass, in declaration order.
    """
    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class EncodingError(FilterkitError):
    """Raised when a parsed filter cannot be encoded (internal defect)."""
    pass


class QueryError(FilterkitError):
    """Raised when a fragment cannot be applied to a query builder."""
    pass
