"""
Shared pytest fixtures for filterkit tests.
Provides common filter declarations for all test suites.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from filterkit.filters import FilterConfig, FilterParser

# Keep library logging out of test output
logging.basicConfig(level=logging.CRITICAL)


@pytest.fixture
def configs():
    """Filter declarations covering every type."""
    return [
        FilterConfig("boolean", ["flag", "published"]),
        FilterConfig("text", ["title", "body"]),
        FilterConfig("number", ["rating"], {"allow_decimal": True}),
        FilterConfig("number", ["upvotes"]),
        FilterConfig("date", ["posted_at"]),
        FilterConfig("datetime", ["updated_at"]),
    ]


@pytest.fixture
def parser(configs):
    """Parser over the shared declarations."""
    return FilterParser(configs)
