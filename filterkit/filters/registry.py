#!/usr/bin/env python3
"""
Filter type registry.
Declares which columns may be filtered and how their values are validated.
"""

from collections.abc import Container
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..exceptions import ConfigurationError


class TypeTag(Enum):
    """Condition value types."""
    BOOLEAN = "boolean"
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"

    @classmethod
    def from_string(cls, value: Any) -> Optional['TypeTag']:
        """Convert string to type tag."""
        if isinstance(value, cls):
            return value
        for tag in cls:
            if tag.value == value:
                return tag
        return None


# Legal comparators per type, in the order they are documented
COMPARATORS: Dict[TypeTag, tuple] = {
    TypeTag.BOOLEAN: ("equals", "does not equal"),
    TypeTag.TEXT: ("equals", "does not equal", "contains", "does not contain"),
    TypeTag.NUMBER: (
        "equals", "does not equal",
        "greater than", "greater than or",
        "less than", "less than or",
    ),
    TypeTag.DATE: (
        "equals", "does not equal",
        "after", "on or after",
        "before", "on or before",
        "between", "not between",
    ),
    TypeTag.DATETIME: (
        "equals", "does not equal",
        "after", "on or after",
        "before", "on or before",
    ),
}


@dataclass(frozen=True)
class FilterConfig:
    """
    Declares a filter type: the columns it covers and its options.

    Options by type:
        number: allow_decimal (bool), allowed_values (container or range)
        date: format (strptime pattern, default %Y-%m-%d)
        datetime: format (strptime pattern, default ISO-8601)
    """
    type: Union[TypeTag, str]
    keys: Iterable[str]
    options: Optional[Mapping[str, Any]] = field(default=None, hash=False)

    def __post_init__(self):
        tag = TypeTag.from_string(self.type)
        if tag is None:
            raise ConfigurationError(f"Unknown filter type: {self.type}")
        keys = [self.keys] if isinstance(self.keys, str) else self.keys
        keys = frozenset(keys)
        if not keys:
            raise ConfigurationError(f"No keys declared for {tag.value} filter")

        options = dict(self.options or {})
        allowed = options.get("allowed_values")
        if allowed is not None and (isinstance(allowed, (str, bytes)) or not isinstance(allowed, Container)):
            raise ConfigurationError(f"allowed_values must be a collection of numbers, got {allowed!r}")

        # Frozen: normalize through object.__setattr__
        object.__setattr__(self, "type", tag)
        object.__setattr__(self, "keys", keys)
        object.__setattr__(self, "options", MappingProxyType(options))

    def allows(self, comparator: str) -> bool:
        """Check if this type accepts a comparator."""
        return comparator in COMPARATORS[self.type]


def find_config(configs: Sequence[FilterConfig],
                column: str,
                type_tag: Optional[TypeTag] = None) -> Optional[FilterConfig]:
    """
    Resolve a column to its declaring config.

    The first config in declaration order wins. When a type is given,
    only configs of that type are considered.
    """
    for config in configs:
        if type_tag is not None and config.type != type_tag:
            continue
        if column in config.keys:
            return config
    return None


def conflicting_columns(configs: Sequence[FilterConfig]) -> Dict[str, List[TypeTag]]:
    """
    Find columns declared under more than one type.

    Returns:
        Mapping of column to the distinct types declaring it, in declaration order
    """
    seen: Dict[str, List[TypeTag]] = {}
    for config in configs:
        for key in config.keys:
            types = seen.setdefault(key, [])
            if config.type not in types:
                types.append(config.type)
    return {key: types for key, types in seen.items() if len(types) > 1}


def load_configs(configs: Iterable[Union[FilterConfig, Mapping[str, Any]]]) -> List[FilterConfig]:
    """
    Normalize config declarations, accepting plain mappings.

    Example:
        load_configs([{"type": "number", "keys": ["rating"],
                       "options": {"allow_decimal": True}}])
    """
    loaded = []
    for config in configs:
        if isinstance(config, FilterConfig):
            loaded.append(config)
        elif isinstance(config, Mapping):
            unknown = set(config) - {"type", "keys", "options"}
            if unknown:
                raise ConfigurationError(f"Unknown config fields: {sorted(unknown)}")
            if "type" not in config or "keys" not in config:
                raise ConfigurationError("Config requires 'type' and 'keys'")
            loaded.append(FilterConfig(config["type"], config["keys"], config.get("options")))
        else:
            raise ConfigurationError(f"Invalid config declaration: {config!r}")
    return loaded
