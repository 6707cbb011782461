#!/usr/bin/env python3
"""
Applying filters to caller-owned query builders.

Any builder exposing `where(expression, values)` and returning the
augmented builder can be filtered. SelectQuery is a minimal immutable
builder for DB-API drivers using the qmark paramstyle.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, List, Sequence, Tuple, TypeVar

from ..exceptions import InvalidFilterError, QueryError
from .base import FilterExpression, FilterUnion
from .sql_backend import encode

logger = logging.getLogger(__name__)

Q = TypeVar("Q")


def query(base_query: Q, expression: FilterExpression, allow_empty: bool = True) -> Q:
    """
    Apply a parsed filter to a query builder.

    Args:
        base_query: Builder with a `where(expression, values)` method
        expression: Parsed filter tree
        allow_empty: When False, an empty filter is rejected

    Returns:
        Whatever the builder's `where` returns; the untouched builder for
        an empty all or any filter when allow_empty is True

    Raises:
        InvalidFilterError: If the filter is empty and allow_empty is False
        QueryError: If the builder has no callable `where`
    """
    if expression.is_empty():
        if not allow_empty:
            raise InvalidFilterError(["Filter has no conditions"])
        # An empty none node matches nothing and still has to reach the builder
        if expression.union != FilterUnion.NONE:
            return base_query

    where = getattr(base_query, "where", None)
    if not callable(where):
        raise QueryError(f"{type(base_query).__name__} does not support where()")

    fragment = encode(expression)
    return where(fragment.expression, list(fragment.values))


@dataclass(frozen=True)
class SelectQuery:
    """
    Immutable SELECT builder. Each where() returns a new query with the
    predicate ANDed onto the existing ones.

    Example:
        sql, params = query(SelectQuery("posts"), expression).to_sql()
        cursor = await conn.execute(sql, params)
    """
    table: str
    columns: Tuple[str, ...] = ("*",)
    predicates: Tuple[str, ...] = ()
    params: Tuple[Any, ...] = ()
    order_by: Tuple[str, ...] = ()

    def where(self, expression: str, values: Sequence[Any] = ()) -> "SelectQuery":
        """Add a predicate with its bound values."""
        if expression.count("?") != len(values):
            raise QueryError(
                f"Predicate has {expression.count('?')} placeholders but {len(values)} values"
            )
        return replace(
            self,
            predicates=self.predicates + (expression,),
            params=self.params + tuple(values)
        )

    def order(self, *columns: str) -> "SelectQuery":
        """Set ORDER BY columns."""
        return replace(self, order_by=tuple(columns))

    def to_sql(self) -> Tuple[str, List[Any]]:
        """
        Render the query.

        Returns:
            Tuple of (sql, params)
        """
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}"
        if self.predicates:
            if len(self.predicates) == 1:
                sql += f" WHERE {self.predicates[0]}"
            else:
                sql += " WHERE " + " AND ".join(f"({p})" for p in self.predicates)
        if self.order_by:
            sql += f" ORDER BY {', '.join(self.order_by)}"

        logger.debug(f"Built query: {sql}")
        return sql, list(self.params)
