from unittest.mock import AsyncMock

import pytest

from payroc.core.fetcher import FetchRequest
from payroc.utils.logging_config import _loggers_configured


@pytest.fixture
def initial_request():
    """Fixture for the first-page request."""
    return FetchRequest(url="https://api.example.com/items", method="GET")


@pytest.fixture
def mock_fetcher():
    """Fixture for a page fetcher; set ``side_effect`` to the responses."""
    return AsyncMock()


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging configuration tracking between tests."""
    _loggers_configured.clear()
    yield
    _loggers_configured.clear()
