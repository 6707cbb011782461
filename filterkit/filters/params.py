#!/usr/bin/env python3
"""
Flat parameter decoder.
Turns URL-style parameters such as `title_contains=foo` or
`posted_at_between[start]=...` (already nested by the web layer) into
raw conditions for the filter parser.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..config import DEFAULT_UNION_KEY
from .base import RawCondition
from .registry import COMPARATORS, FilterConfig, find_config

logger = logging.getLogger(__name__)


def comparator_alias(comparator: str) -> str:
    """Parameter-key form of a comparator, e.g. `greater than or` -> `greater_than_or`."""
    return comparator.replace(" ", "_")


# Every known alias, longest first so `not_between` wins over `between`
ALIASES: Tuple[Tuple[str, str], ...] = tuple(sorted(
    {(comparator_alias(c), c) for comparators in COMPARATORS.values() for c in comparators},
    key=lambda pair: (-len(pair[0]), pair[0])
))


def split_key(configs: Sequence[FilterConfig], key: str) -> Tuple[str, str, Optional[FilterConfig]]:
    """
    Split a parameter key into column and comparator.

    The longest comparator suffix whose prefix is a column of a type
    supporting that comparator wins. Without a match the whole key is the
    column and the comparator is `equals`.

    Returns:
        Tuple of (column, comparator, resolved config or None)
    """
    for alias, comparator in ALIASES:
        suffix = "_" + alias
        if not key.endswith(suffix) or len(key) == len(suffix):
            continue
        column = key[:-len(suffix)]
        config = find_config(configs, column)
        if config is not None and config.allows(comparator):
            return column, comparator, config

    return key, "equals", find_config(configs, key)


def _is_range(value: Any) -> bool:
    return isinstance(value, Mapping) and "start" in value and "end" in value


def decode_params(configs: Sequence[FilterConfig],
                  params: Mapping[str, Any],
                  union_key: str = DEFAULT_UNION_KEY) -> Tuple[Any, List[RawCondition], List[str]]:
    """
    Decode flat parameters into raw conditions.

    Args:
        configs: Declared filter types
        params: Flat parameter mapping
        union_key: Key selecting all/any/none

    Returns:
        Tuple of (union value, raw conditions, errors); errors name the column
    """
    union = params.get(union_key, "all")
    conditions: List[RawCondition] = []
    errors: List[str] = []

    for key, value in params.items():
        if key == union_key:
            continue
        if not isinstance(key, str):
            errors.append(f"Invalid filter key {key!r}")
            continue

        column, comparator, config = split_key(configs, key)
        if config is None:
            errors.append(f"Unknown filter column '{column}'")
            continue

        if _is_range(value) and comparator != "not between":
            comparator = "between"

        conditions.append(RawCondition(
            column=column,
            comparator=comparator,
            value=value,
            inverse=False,
            type=config.type
        ))

    logger.debug(f"Decoded {len(conditions)} conditions from {len(params)} params")
    return union, conditions, errors
