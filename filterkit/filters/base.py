#!/usr/bin/env python3
"""
Filter data model.
Parsed conditions, the filter expression tree, and the encoded fragment
shared by the parsers and the encoding backends.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, NamedTuple, Optional, Tuple, Union

from .registry import TypeTag


class FilterUnion(Enum):
    """How a node combines its children."""
    ALL = "all"
    ANY = "any"
    NONE = "none"

    @classmethod
    def from_string(cls, value: Any) -> Optional['FilterUnion']:
        """Convert string to union."""
        if isinstance(value, cls):
            return value
        for union in cls:
            if union.value == value:
                return union
        return None


@dataclass(frozen=True)
class RawCondition:
    """
    An unvalidated condition as supplied by the caller.
    """
    column: str
    comparator: str
    value: Any = None
    inverse: bool = False
    type: Optional[TypeTag] = None


class DateRange(NamedTuple):
    """Bounds of a date between / not between condition."""
    start: date
    end: date


@dataclass(frozen=True)
class Condition:
    """
    A validated condition. Only the per-type subclasses are instantiated.
    """
    type: ClassVar[TypeTag]

    column: str
    comparator: str
    value: Any
    inverse: bool = False

    def __repr__(self):
        neg = "NOT " if self.inverse else ""
        return f"{neg}{self.column} {self.comparator} {self.value!r}"


@dataclass(frozen=True, repr=False)
class BooleanCondition(Condition):
    type: ClassVar[TypeTag] = TypeTag.BOOLEAN
    value: bool


@dataclass(frozen=True, repr=False)
class TextCondition(Condition):
    type: ClassVar[TypeTag] = TypeTag.TEXT
    value: str


@dataclass(frozen=True, repr=False)
class NumberCondition(Condition):
    type: ClassVar[TypeTag] = TypeTag.NUMBER
    value: Union[int, float]


@dataclass(frozen=True, repr=False)
class DateCondition(Condition):
    type: ClassVar[TypeTag] = TypeTag.DATE
    value: Union[date, DateRange]


@dataclass(frozen=True, repr=False)
class DateTimeCondition(Condition):
    type: ClassVar[TypeTag] = TypeTag.DATETIME
    value: datetime


@dataclass(frozen=True)
class FilterExpression:
    """
    Represents a complete filter expression tree.
    Each node owns its conditions and nested sub-filters.
    """
    union: FilterUnion = FilterUnion.ALL
    conditions: Tuple[Condition, ...] = ()
    sub_filters: Tuple['FilterExpression', ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "sub_filters", tuple(self.sub_filters))

    def is_empty(self) -> bool:
        """Check if this node has no conditions and no sub-filters."""
        return not self.conditions and not self.sub_filters

    def leaf_count(self) -> int:
        """Count conditions in this node and all sub-filters."""
        return len(self.conditions) + sum(sub.leaf_count() for sub in self.sub_filters)

    def __repr__(self):
        children = list(self.conditions) + list(self.sub_filters)
        return f"{self.union.value}({children})"


PARAMSTYLES = {
    "qmark": lambda n: "?",
    "numeric": lambda n: f":{n}",
    "dollar": lambda n: f"${n}",
    "format": lambda n: "%s",
}


@dataclass(frozen=True)
class Fragment:
    """
    An encoded filter: a boolean expression with positional `?`
    placeholders and the values bound to them, in order.
    """
    expression: str
    values: Tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))

    def render(self, paramstyle: str = "qmark") -> str:
        """
        Re-emit the expression with another DB-API placeholder style.

        Args:
            paramstyle: One of qmark, numeric (:1), dollar ($1), format (%s)

        Returns:
            Expression string; value order is unchanged
        """
        if paramstyle not in PARAMSTYLES:
            raise ValueError(f"Unsupported paramstyle: {paramstyle}")
        placeholder = PARAMSTYLES[paramstyle]
        parts = self.expression.split("?")
        rendered = [parts[0]]
        for position, part in enumerate(parts[1:], start=1):
            rendered.append(placeholder(position))
            rendered.append(part)
        return "".join(rendered)
