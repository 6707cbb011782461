"""
Configuration helpers for filterkit.
Supports environment variables for deployment-time parser settings.
"""

import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10
DEFAULT_UNION_KEY = "filter_union"


class Config:
    """
    Configuration helper that reads from environment variables.

    Environment variables:
        FILTERKIT_MAX_DEPTH: Maximum sub-filter nesting depth (default: 10)
        FILTERKIT_UNION_KEY: Flat parameter key selecting the union (default: filter_union)
    """

    @staticmethod
    def from_env() -> Dict[str, Any]:
        """
        Create parser configuration from environment variables.

        Returns:
            Dict of keyword arguments for FilterParser

        Example:
            from filterkit import FilterParser
            from filterkit.config import Config

            parser = FilterParser(configs, **Config.from_env())
        """
        config = Config.defaults()

        max_depth = os.getenv("FILTERKIT_MAX_DEPTH")
        if max_depth:
            try:
                config["max_depth"] = int(max_depth)
            except ValueError:
                logger.warning(
                    f"Ignoring FILTERKIT_MAX_DEPTH={max_depth!r}, "
                    f"using default {DEFAULT_MAX_DEPTH}"
                )

        union_key = os.getenv("FILTERKIT_UNION_KEY")
        if union_key:
            config["union_key"] = union_key

        return config

    @staticmethod
    def defaults() -> Dict[str, Any]:
        """Default parser configuration."""
        return {
            "max_depth": DEFAULT_MAX_DEPTH,
            "union_key": DEFAULT_UNION_KEY,
        }
