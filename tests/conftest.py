import logging

import pytest

from messages.schemas import Distribution


@pytest.fixture
def histogram() -> Distribution:
    """Cumulative distribution with ranges (..10), [10, 20), [20..)"""
    return Distribution.from_bounds([10.0, 20.0])


@pytest.fixture
def sliding_histogram() -> Distribution:
    return Distribution.from_bounds([10.0, 20.0], is_not_cumulative=True)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
